from __future__ import annotations

import pytest

from handlers.command_handler import HELP_TEXT, handle_command
from services.account_service import AccountService
from tests.fakes import FakeLedger, RecordingReply, command, make_account


@pytest.mark.asyncio
async def test_balance_refreshes_and_replies_privately(
    ledger: FakeLedger, accounts: AccountService, reply: RecordingReply
) -> None:
    ledger.accounts.append(make_account("cointip_alice", resource_id="a-1", usd="3.00", btc="0.00012"))

    await handle_command(accounts, command("balance", reply))

    assert ledger.calls_of("get") == [("get", "a-1")]
    assert reply.texts == ["tipjar balance: USD:3.00 BTC:0.00012000"]
    assert reply.responses[0].in_channel is False


@pytest.mark.asyncio
async def test_balance_error_is_reported(ledger: FakeLedger, accounts: AccountService, reply: RecordingReply) -> None:
    ledger.fail.add("list")

    await handle_command(accounts, command("balance", reply))

    assert reply.texts == ["Uh Oh. Something broke: list failed"]
    assert reply.responses[0].in_channel is False


@pytest.mark.asyncio
async def test_deposit_replies_with_address(ledger: FakeLedger, accounts: AccountService, reply: RecordingReply) -> None:
    ledger.accounts.append(make_account("cointip_alice", resource_id="a-1"))

    await handle_command(accounts, command("deposit", reply))

    assert ledger.calls_of("get") == []
    assert ledger.calls_of("address") == [("address", "a-1")]
    assert reply.texts == ["deposit address: addr-a-1"]


@pytest.mark.asyncio
async def test_deposit_address_failure_is_reported(
    ledger: FakeLedger, accounts: AccountService, reply: RecordingReply
) -> None:
    ledger.fail.add("address")

    await handle_command(accounts, command("deposit", reply))

    assert reply.texts == ["Uh Oh. Something broke: address failed"]


@pytest.mark.asyncio
async def test_withdraw_is_not_implemented(ledger: FakeLedger, accounts: AccountService, reply: RecordingReply) -> None:
    await handle_command(accounts, command("withdraw", reply))

    assert reply.texts == ["withdraw is not implemented yet, sorry!"]
    assert ledger.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "help", "tip bob", "   "])
async def test_anything_else_gets_help(
    text: str, ledger: FakeLedger, accounts: AccountService, reply: RecordingReply
) -> None:
    await handle_command(accounts, command(text, reply))

    assert reply.texts == [HELP_TEXT]
    assert ledger.calls == []


@pytest.mark.asyncio
async def test_dispatch_uses_first_word(ledger: FakeLedger, accounts: AccountService, reply: RecordingReply) -> None:
    await handle_command(accounts, command("withdraw 5 to bob", reply))

    assert reply.texts == ["withdraw is not implemented yet, sorry!"]
