from __future__ import annotations

import hashlib
import hmac
import json
from decimal import Decimal
from unittest.mock import Mock

import pytest
import requests

from models.account import Balance
from services.ledger_client import CoinbaseClient, LedgerAPIError


def _mock_response(payload, status_code: int = 200) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = "payload"
    response.raise_for_status.return_value = None
    return response


def _account_payload(uuid: str, name: str, usd: str = "3.00", btc: str = "0.00012") -> dict:
    return {
        "id": uuid,
        "name": name,
        "type": "wallet",
        "balance": {"amount": btc, "currency": "BTC"},
        "native_balance": {"amount": usd, "currency": "USD"},
    }


def _client(session: Mock) -> CoinbaseClient:
    return CoinbaseClient(api_key="key", api_secret="secret", session=session)


def test_requires_credentials() -> None:
    with pytest.raises(ValueError):
        CoinbaseClient(api_key="", api_secret="secret")
    with pytest.raises(ValueError):
        CoinbaseClient(api_key="key", api_secret="")


def test_list_accounts_follows_pagination() -> None:
    session = Mock()
    session.request.side_effect = [
        _mock_response(
            {
                "pagination": {"next_uri": "/v2/accounts?limit=100&starting_after=u-1"},
                "data": [_account_payload("u-1", "cointip_alice")],
            }
        ),
        _mock_response({"pagination": {"next_uri": None}, "data": [_account_payload("u-2", "cointip_bob")]}),
    ]

    accounts = _client(session).list_accounts()

    assert [a.id for a in accounts] == ["cointip_alice", "cointip_bob"]
    assert [a.resource_id for a in accounts] == ["u-1", "u-2"]
    assert accounts[0].native_balance == Balance(currency="USD", amount=Decimal("3.00"))
    assert accounts[0].balance == Balance(currency="BTC", amount=Decimal("0.00012"))

    assert session.request.call_count == 2
    second_url = session.request.call_args_list[1].args[1]
    assert second_url == "https://api.coinbase.com/v2/accounts?limit=100&starting_after=u-1"


def test_get_account_signs_request(monkeypatch) -> None:
    monkeypatch.setattr("services.ledger_client.time.time", lambda: 1_700_000_000)
    session = Mock()
    session.request.return_value = _mock_response({"data": _account_payload("u-1", "cointip_alice")})

    account = _client(session).get_account("u-1")

    assert account.id == "cointip_alice"
    args, kwargs = session.request.call_args
    assert args == ("GET", "https://api.coinbase.com/v2/accounts/u-1")
    headers = kwargs["headers"]
    expected = hmac.new(b"secret", b"1700000000GET/v2/accounts/u-1", hashlib.sha256).hexdigest()
    assert headers["CB-ACCESS-KEY"] == "key"
    assert headers["CB-ACCESS-TIMESTAMP"] == "1700000000"
    assert headers["CB-ACCESS-SIGN"] == expected
    assert kwargs["timeout"] == 10.0


def test_create_account_posts_name() -> None:
    session = Mock()
    session.request.return_value = _mock_response({"data": _account_payload("u-9", "cointip_carol", usd="0.00")})

    account = _client(session).create_account("cointip_carol")

    assert account.id == "cointip_carol"
    args, kwargs = session.request.call_args
    assert args[0] == "POST"
    assert json.loads(kwargs["data"]) == {"name": "cointip_carol"}


def test_create_address_returns_address() -> None:
    session = Mock()
    session.request.return_value = _mock_response({"data": {"id": "addr-1", "address": "1BvBMSEYstWetqTFn5Au4m4GFg7xJaNVN2"}})

    address = _client(session).create_address("u-1")

    assert address == "1BvBMSEYstWetqTFn5Au4m4GFg7xJaNVN2"
    assert session.request.call_args.args[1].endswith("/v2/accounts/u-1/addresses")


def test_transfer_posts_transfer_transaction() -> None:
    session = Mock()
    session.request.return_value = _mock_response(
        {
            "data": {
                "id": "tx-1",
                "type": "transfer",
                "status": "completed",
                "amount": {"amount": "-0.00000100", "currency": "BTC"},
                "native_amount": {"amount": "-0.05", "currency": "USD"},
            }
        }
    )

    tx = _client(session).transfer("u-a", "u-b", Balance(currency="USD", amount=Decimal("0.05")))

    assert tx.id == "tx-1"
    assert tx.status == "completed"
    assert tx.native_amount.currency == "USD"
    args, kwargs = session.request.call_args
    assert args[1].endswith("/v2/accounts/u-a/transactions")
    assert json.loads(kwargs["data"]) == {"type": "transfer", "to": "u-b", "amount": "0.05", "currency": "USD"}


def test_transfer_rejects_non_positive_amount() -> None:
    with pytest.raises(ValueError):
        _client(Mock()).transfer("u-a", "u-b", Balance(currency="USD", amount=Decimal("0")))


def test_request_wraps_http_errors() -> None:
    session = Mock()
    response = _mock_response({"errors": [{"id": "not_found", "message": "Not found"}]}, status_code=404)
    response.raise_for_status.side_effect = requests.HTTPError(response=response)
    session.request.return_value = response

    with pytest.raises(LedgerAPIError) as excinfo:
        _client(session).get_account("missing")

    assert str(excinfo.value) == "Not found"
    assert excinfo.value.status_code == 404


def test_request_wraps_transport_errors() -> None:
    session = Mock()
    session.request.side_effect = requests.ConnectionError("boom")

    with pytest.raises(LedgerAPIError):
        _client(session).list_accounts()


def test_request_rejects_error_payload() -> None:
    session = Mock()
    session.request.return_value = _mock_response({"errors": [{"id": "invalid_request", "message": "Bad name"}]})

    with pytest.raises(LedgerAPIError, match="Bad name"):
        _client(session).create_account("cointip_x")


def test_request_rejects_invalid_json() -> None:
    session = Mock()
    response = _mock_response({})
    response.json.side_effect = ValueError("no json")
    session.request.return_value = response

    with pytest.raises(LedgerAPIError):
        _client(session).list_accounts()


def test_malformed_account_is_rejected() -> None:
    session = Mock()
    session.request.return_value = _mock_response({"data": {"id": "u-1", "name": "cointip_a", "balance": {}}})

    with pytest.raises(LedgerAPIError):
        _client(session).get_account("u-1")
