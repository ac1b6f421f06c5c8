"""
services/ledger_client.py
-------------------------
Minimal Coinbase wallet API (v2) client covering the endpoints cointip needs:
listing, fetching and creating accounts, deposit addresses and transfers.
"""

import hashlib
import hmac
import json
import time
from decimal import Decimal
from typing import Any, Optional

import requests

from models.account import Account, Balance, Transaction
from utils.logger import get_logger

logger = get_logger(__name__)


class LedgerAPIError(RuntimeError):
    def __init__(self, message: str, *, status_code: Optional[int] = None, payload: Optional[Any] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class CoinbaseClient:
    """API-key authenticated client for the Coinbase wallet API."""

    def __init__(
        self,
        *,
        api_key: str,
        api_secret: str,
        base_url: str = "https://api.coinbase.com",
        api_version: str = "2017-08-07",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key must be provided")
        if not api_secret:
            raise ValueError("api_secret must be provided")

        self.api_key = api_key
        self.api_secret = api_secret
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.timeout = timeout
        self._session = session or requests.Session()

    def list_accounts(self) -> list[Account]:
        accounts: list[Account] = []
        path: Optional[str] = "/v2/accounts?limit=100"
        while path:
            payload = self._request("GET", path)
            for entry in payload.get("data") or []:
                accounts.append(self._parse_account(entry))
            pagination = payload.get("pagination") or {}
            path = pagination.get("next_uri")
        return accounts

    def get_account(self, resource_id: str) -> Account:
        payload = self._request("GET", f"/v2/accounts/{resource_id}")
        return self._parse_account(payload.get("data"))

    def create_account(self, name: str) -> Account:
        payload = self._request("POST", "/v2/accounts", body={"name": name})
        return self._parse_account(payload.get("data"))

    def create_address(self, resource_id: str) -> str:
        payload = self._request("POST", f"/v2/accounts/{resource_id}/addresses", body={})
        data = payload.get("data")
        if not isinstance(data, dict) or not data.get("address"):
            raise LedgerAPIError("Coinbase address response missing address", payload=payload)
        return str(data["address"])

    def transfer(self, from_resource_id: str, to_resource_id: str, amount: Balance) -> Transaction:
        if amount.amount <= 0:
            raise ValueError("transfer amount must be > 0")

        body = {
            "type": "transfer",
            "to": to_resource_id,
            "amount": str(amount.amount),
            "currency": amount.currency,
        }
        payload = self._request("POST", f"/v2/accounts/{from_resource_id}/transactions", body=body)
        return self._parse_transaction(payload.get("data"))

    def _sign(self, timestamp: str, method: str, path: str, body: str) -> str:
        message = f"{timestamp}{method}{path}{body}".encode()
        return hmac.new(self.api_secret.encode(), message, hashlib.sha256).hexdigest()

    def _request(self, method: str, path: str, *, body: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        data = json.dumps(body) if body is not None else ""
        timestamp = str(int(time.time()))
        headers = {
            "CB-ACCESS-KEY": self.api_key,
            "CB-ACCESS-SIGN": self._sign(timestamp, method, path, data),
            "CB-ACCESS-TIMESTAMP": timestamp,
            "CB-VERSION": self.api_version,
            "Content-Type": "application/json",
        }
        logger.debug(f"Coinbase {method} {path}")
        try:
            response = self._session.request(
                method,
                url,
                data=data or None,
                timeout=self.timeout,
                headers=headers,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            resp = exc.response
            status_code = getattr(resp, "status_code", None)
            error_payload: Optional[Any] = None
            message = "Coinbase API request failed"
            if resp is not None:
                try:
                    error_payload = resp.json()
                    message = self._error_message(error_payload) or message
                except ValueError:
                    error_payload = resp.text
            raise LedgerAPIError(message, status_code=status_code, payload=error_payload) from exc
        except requests.RequestException as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            raise LedgerAPIError("Coinbase API request failed", status_code=status_code) from exc

        try:
            payload_raw = response.json()
        except ValueError as exc:
            raise LedgerAPIError("Coinbase API returned invalid JSON", payload=response.text) from exc

        if not isinstance(payload_raw, dict):
            raise LedgerAPIError("Coinbase API returned unexpected payload type", payload=payload_raw)

        payload: dict[str, Any] = payload_raw
        message = self._error_message(payload)
        if message:
            raise LedgerAPIError(message, status_code=response.status_code, payload=payload)

        return payload

    @staticmethod
    def _error_message(payload: Any) -> Optional[str]:
        if not isinstance(payload, dict):
            return None
        errors = payload.get("errors")
        if isinstance(errors, list) and errors:
            first = errors[0]
            if isinstance(first, dict) and first.get("message"):
                return str(first["message"])
            return "Coinbase API returned an error"
        return None

    def _parse_account(self, entry: Any) -> Account:
        if not isinstance(entry, dict) or not entry.get("id"):
            raise LedgerAPIError("Coinbase account entry missing id", payload=entry)

        return Account(
            id=str(entry.get("name", "")),
            resource_id=str(entry["id"]),
            balance=self._parse_balance(entry.get("balance"), entry),
            native_balance=self._parse_balance(entry.get("native_balance"), entry),
        )

    def _parse_transaction(self, entry: Any) -> Transaction:
        if not isinstance(entry, dict) or not entry.get("id"):
            raise LedgerAPIError("Coinbase transaction entry missing id", payload=entry)

        return Transaction(
            id=str(entry["id"]),
            amount=self._parse_balance(entry.get("amount"), entry),
            native_amount=self._parse_balance(entry.get("native_amount"), entry),
            status=entry.get("status"),
        )

    @staticmethod
    def _parse_balance(raw: Any, entry: Any) -> Balance:
        if not isinstance(raw, dict) or raw.get("amount") is None or not raw.get("currency"):
            raise LedgerAPIError("Coinbase entry missing balance field", payload=entry)
        try:
            amount = Decimal(str(raw["amount"]))
        except ArithmeticError as exc:
            raise LedgerAPIError("Coinbase entry contains non-numeric amount", payload=entry) from exc
        return Balance(currency=str(raw["currency"]), amount=amount)


__all__ = ["CoinbaseClient", "LedgerAPIError"]
