"""
services/account_service.py
---------------------------
Account cache and lazy provisioning of cointip accounts.

Every chat user gets a ledger sub-account named 'cointip_<user id>'.
Accounts are created on first use and primed with a small amount from
the bank account.
"""

import asyncio
from decimal import Decimal
from typing import Optional

from models.account import Account, Balance, Transaction, account_id_for
from services.ledger_client import CoinbaseClient
from utils.logger import get_logger

logger = get_logger(__name__)

STARTING_BALANCE = Decimal("3.00")


class AccountService:
    """
    Caches ledger accounts and creates missing ones.

    All lookups run under a single lock that is held across ledger calls,
    so at most one account is ever created per user.
    """

    def __init__(self, ledger: CoinbaseClient):
        self.ledger = ledger
        self.bank_account: Optional[Account] = None
        self._cache: list[Account] = []
        self._lock = asyncio.Lock()

    @property
    def native_currency(self) -> str:
        """Currency of the bank account; tips and funding are paid in it."""
        if self.bank_account is None:
            raise RuntimeError("Bank account not resolved. Call resolve_bank_account() first.")
        return self.bank_account.native_balance.currency

    async def resolve_bank_account(self, user_id: str) -> Account:
        """Fetch (or create) the funding account and remember it."""
        self.bank_account = await self.get_or_create_account(user_id, refresh=True)
        logger.info(f"Using bank account {self.bank_account.id}")
        return self.bank_account

    async def get_or_create_account(self, user_id: str, refresh: bool = False) -> Account:
        """
        Return the cointip account for a user, creating it if needed.

        Args:
            user_id: Chat user id.
            refresh: Re-fetch a cached account from the ledger before returning it.

        Returns:
            The Account.

        Raises:
            LedgerAPIError: If listing, fetching or creating the account fails.
                A failed refresh leaves the cached copy in place.
        """
        account_id = account_id_for(user_id)

        async with self._lock:
            if not self._cache:
                self._cache = await asyncio.to_thread(self.ledger.list_accounts)
                logger.info(f"Loaded {len(self._cache)} accounts into the cache")

            for i, account in enumerate(self._cache):
                if account.id != account_id:
                    continue
                if refresh:
                    account = await asyncio.to_thread(self.ledger.get_account, account.resource_id)
                    self._cache[i] = account
                return account

            account = await asyncio.to_thread(self.ledger.create_account, account_id)
            self._cache.append(account)
            logger.info(f"Created new cointip account: {account_id}")

            await self._prime(account)
            return account

    async def _prime(self, account: Account) -> Optional[Transaction]:
        """Send the starting balance from the bank. Failures are only logged."""
        if self.bank_account is None:
            logger.warning(f"No bank account yet, not priming {account.id}")
            return None

        amount = Balance(currency=self.native_currency, amount=STARTING_BALANCE)
        try:
            tx = await asyncio.to_thread(
                self.ledger.transfer, self.bank_account.resource_id, account.resource_id, amount
            )
        except Exception as e:
            logger.error(f"Failed to prime new cointip account from bank {self.bank_account.id}: {e}")
            return None

        logger.info(f"Primed new cointip account {account.id} txid: {tx.id}")
        return tx
