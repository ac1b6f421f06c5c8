"""
plugin.py
---------
The cointip plugin: everything the two event loops share, built once at
registration and torn down on shutdown.
"""

import asyncio
from typing import Optional

from telegram.ext import Application

from config import AUTHOR_INDEX_SIZE, COINBASE_API_URL, COINBASE_API_VERSION, COINBASE_TIMEOUT_SECONDS
from handlers.command_handler import command_loop
from handlers.reaction_handler import reaction_loop
from handlers.telegram_adapter import PLUGIN_KEY, MessageAuthorIndex, build_handlers
from models.events import CommandEvent, ReactionEvent
from services.account_service import AccountService
from services.ledger_client import CoinbaseClient
from utils.logger import get_logger

logger = get_logger(__name__)


class CointipPlugin:
    """
    Shared state of a registered cointip plugin.

    Attributes:
        ledger: Client for the payment API.
        accounts: Account cache and provisioner, including the bank account.
        commands: Queue of /cointip command events.
        reactions: Queue of tip reaction events.
        stop_event: Set to make both loops exit.
        authors: Who wrote which group message, for attributing reactions.
    """

    name = "cointip"

    def __init__(self, ledger: CoinbaseClient, accounts: AccountService):
        self.ledger = ledger
        self.accounts = accounts
        self.commands: asyncio.Queue[CommandEvent] = asyncio.Queue()
        self.reactions: asyncio.Queue[ReactionEvent] = asyncio.Queue()
        self.stop_event = asyncio.Event()
        self.authors = MessageAuthorIndex(AUTHOR_INDEX_SIZE)
        self._tasks: list[asyncio.Task] = []

    def start(self) -> None:
        """Start the command and reaction loops on the running event loop."""
        if self._tasks:
            return
        self.stop_event.clear()
        self._tasks = [
            asyncio.create_task(command_loop(self.accounts, self.commands, self.stop_event), name="cointip-commands"),
            asyncio.create_task(reaction_loop(self.accounts, self.reactions, self.stop_event), name="cointip-reactions"),
        ]
        logger.info("cointip plugin started")

    async def stop(self) -> None:
        """Signal both loops to exit and wait for them."""
        self.stop_event.set()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
            self._tasks = []
        logger.info("cointip plugin stopped")

    def attach(self, application: Application) -> None:
        """Register the Telegram handlers that feed this plugin's queues."""
        application.bot_data[PLUGIN_KEY] = self
        for handler, group in build_handlers():
            application.add_handler(handler, group=group)


async def register(
    api_key: str,
    api_secret: str,
    bank_account_id: str,
    ledger: Optional[CoinbaseClient] = None,
) -> Optional[CointipPlugin]:
    """
    Build the cointip plugin.

    Args:
        api_key: Coinbase API key.
        api_secret: Coinbase API secret.
        bank_account_id: User id whose cointip account funds new accounts.
        ledger: Pre-built ledger client (tests); built from the key pair otherwise.

    Returns:
        The plugin, or None if the client or the bank account could not be set up.
    """
    if ledger is None:
        try:
            ledger = CoinbaseClient(
                api_key=api_key,
                api_secret=api_secret,
                base_url=COINBASE_API_URL,
                api_version=COINBASE_API_VERSION,
                timeout=COINBASE_TIMEOUT_SECONDS,
            )
        except ValueError as e:
            logger.error(f"Failed to create Coinbase client: {e}")
            return None

    accounts = AccountService(ledger)
    try:
        await accounts.resolve_bank_account(bank_account_id)
    except Exception as e:
        logger.error(f"Failed to resolve cointip bank account {bank_account_id}: {e}")
        return None

    return CointipPlugin(ledger, accounts)
