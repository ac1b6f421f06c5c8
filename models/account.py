"""
models/account.py
-----------------
Domain models for cointip payment accounts and the transfers between them.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

ACCOUNT_PREFIX = "cointip_"


def account_id_for(user_id: str) -> str:
    """Return the cointip account identifier for a chat user id."""
    return f"{ACCOUNT_PREFIX}{user_id}"


@dataclass(frozen=True)
class Balance:
    """
    An amount of a single currency.

    Attributes:
        currency: Currency code, e.g. 'USD' or 'BTC'.
        amount: Decimal amount in that currency.
    """
    currency: str
    amount: Decimal

    def format(self, places: int = 2) -> str:
        """Render as ``CODE:amount`` with a fixed number of decimals."""
        return f"{self.currency}:{self.amount:.{places}f}"

    def __str__(self) -> str:
        return self.format()


@dataclass
class Account:
    """
    A cached copy of a ledger sub-account.

    Attributes:
        id: The cointip identifier ('cointip_<user>'), kept as the account name.
        resource_id: The ledger's own account id, used in API calls.
        balance: Crypto balance of the account.
        native_balance: Balance converted to the account's fiat currency.
    """
    id: str
    resource_id: str
    balance: Balance
    native_balance: Balance

    def balance_string(self) -> str:
        """Native and crypto balances, e.g. 'USD:3.00 BTC:0.00012000'."""
        return f"{self.native_balance.format(2)} {self.balance.format(8)}"


@dataclass
class Transaction:
    """A completed (or pending) transfer between two accounts."""
    id: str
    amount: Balance
    native_amount: Balance
    status: Optional[str] = field(default=None)
