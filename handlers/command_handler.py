"""
handlers/command_handler.py
---------------------------
Consumes `/cointip <command>` events and answers them privately.

    /cointip balance   - refresh and show the tip jar balance
    /cointip deposit   - create a deposit address
    /cointip withdraw  - not implemented yet
    /cointip help      - show the help text (also the default)
"""

import asyncio

from models.events import CommandEvent, CommandResponse
from handlers.event_loop import consume
from services.account_service import AccountService
from utils.logger import get_logger

logger = get_logger(__name__)

HELP_TEXT = "cointip: Tip your friends!\nAvailable commands: help, balance, deposit, withdraw"


async def say(event: CommandEvent, msg: str, in_channel: bool = False) -> None:
    await event.reply(CommandResponse(text=msg, in_channel=in_channel))


async def say_error(event: CommandEvent, msg: str, in_channel: bool = False) -> None:
    await say(event, f"Uh Oh. Something broke: {msg}", in_channel)


async def help_reply(event: CommandEvent) -> None:
    await say(event, HELP_TEXT)


async def _balance(accounts: AccountService, event: CommandEvent) -> None:
    try:
        account = await accounts.get_or_create_account(event.user_id, refresh=True)
    except Exception as e:
        logger.error(f"Failed fetching coinbase account for {event.user_id}: {e}")
        await say_error(event, str(e))
        return
    await say(event, f"tipjar balance: {account.balance_string()}")


async def _deposit(accounts: AccountService, event: CommandEvent) -> None:
    try:
        account = await accounts.get_or_create_account(event.user_id, refresh=False)
    except Exception as e:
        logger.error(f"Failed fetching coinbase account for {event.user_id}: {e}")
        await say_error(event, str(e))
        return

    try:
        address = await asyncio.to_thread(accounts.ledger.create_address, account.resource_id)
    except Exception as e:
        logger.error(f"Failed fetching coinbase address for {account.id}: {e}")
        await say_error(event, str(e))
        return
    await say(event, f"deposit address: {address}")


async def handle_command(accounts: AccountService, event: CommandEvent) -> None:
    """Dispatch one command on its first word."""
    words = event.text.split()
    command = words[0] if words else ""
    logger.info(f"cointip command '{command or 'help'}' from user {event.user_id}")

    if command == "balance":
        await _balance(accounts, event)
    elif command == "deposit":
        await _deposit(accounts, event)
    elif command == "withdraw":
        await say(event, "withdraw is not implemented yet, sorry!")
    else:
        await help_reply(event)


async def command_loop(
    accounts: AccountService,
    queue: "asyncio.Queue[CommandEvent]",
    stop: asyncio.Event,
) -> None:
    """Answer queued commands one at a time until `stop` is set."""
    async def handle(event: CommandEvent) -> None:
        await handle_command(accounts, event)

    await consume("command", queue, stop, handle)
