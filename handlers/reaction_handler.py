"""
handlers/reaction_handler.py
----------------------------
Turns tip reactions into transfers. This path never replies in chat;
every outcome is only logged.
"""

import asyncio
from decimal import Decimal
from typing import Optional

from models.account import Balance, Transaction
from models.events import ReactionEvent
from handlers.event_loop import consume
from services.account_service import AccountService
from utils.logger import get_logger

logger = get_logger(__name__)

TIP_TIERS: dict[str, Decimal] = {
    ":cointip_1:": Decimal("0.01"),
    ":cointip_2:": Decimal("0.02"),
    ":cointip_5:": Decimal("0.05"),
    ":cointip_10:": Decimal("0.10"),
    ":cointip_25:": Decimal("0.25"),
}


def tip_amount(reaction: str, currency: str) -> Optional[Balance]:
    """Return the tip for a reaction, or None if it is not a tip reaction."""
    amount = TIP_TIERS.get(reaction)
    if amount is None:
        return None
    return Balance(currency=currency, amount=amount)


async def handle_reaction(accounts: AccountService, event: ReactionEvent) -> Optional[Transaction]:
    """
    Transfer the tip for one reaction from the reacting user to the author.

    Returns:
        The Transaction, or None if the reaction was ignored or failed.
    """
    amount = tip_amount(event.reaction, accounts.native_currency)
    if amount is None:
        logger.debug(f"Ignoring reaction {event.reaction} from {event.user_id}")
        return None

    try:
        sender = await accounts.get_or_create_account(event.user_id, refresh=False)
        recipient = await accounts.get_or_create_account(event.item_user_id, refresh=False)
    except Exception as e:
        logger.error(f"Failed fetching coinbase account: {e}")
        return None

    try:
        tx = await asyncio.to_thread(
            accounts.ledger.transfer, sender.resource_id, recipient.resource_id, amount
        )
    except Exception as e:
        logger.error(f"Failed creating transaction {sender.id} -> {recipient.id}: {e}")
        return None

    logger.info(f"{sender.id} tipped {recipient.id} {tx.native_amount} txid: {tx.id}")
    return tx


async def reaction_loop(
    accounts: AccountService,
    queue: "asyncio.Queue[ReactionEvent]",
    stop: asyncio.Event,
) -> None:
    """Process queued reactions one at a time until `stop` is set."""
    async def handle(event: ReactionEvent) -> None:
        await handle_reaction(accounts, event)

    await consume("reaction", queue, stop, handle)
