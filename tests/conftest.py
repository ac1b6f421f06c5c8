import pytest

from models.account import Account
from services.account_service import AccountService
from tests.fakes import FakeLedger, RecordingReply, make_account


@pytest.fixture
def bank() -> Account:
    return make_account("cointip_bank", usd="100.00", btc="0.01")


@pytest.fixture
def ledger(bank: Account) -> FakeLedger:
    return FakeLedger([bank])


@pytest.fixture
def accounts(ledger: FakeLedger, bank: Account) -> AccountService:
    service = AccountService(ledger)
    service.bank_account = bank
    return service


@pytest.fixture
def reply() -> RecordingReply:
    return RecordingReply()
