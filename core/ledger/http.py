"""
HTTP Ledger Gateway

LedgerClient over a JSON gateway service that signs and submits ledger
transactions on the oracle's behalf.

Endpoints (relative to ``base_url``):
    POST /markets/{address}/resolve   {"outcome", "transcript_digest", "authority"}
    POST /markets/{address}/disburse  {"user", "amount"}
    GET  /markets/{address}/stakes

Errors come back as non-2xx with ``{"error": {"code": ..., "message": ...}}``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from core.http import HttpClient, HttpError, HttpResponse
from core.schemas.errors import LedgerError, LedgerErrorKind
from core.schemas.stake import StakeRecord

logger = logging.getLogger(__name__)

_KIND_BY_CODE = {
    "AlreadyResolved": LedgerErrorKind.ALREADY_RESOLVED,
    "MarketAlreadyResolved": LedgerErrorKind.ALREADY_RESOLVED,
    "Unauthorized": LedgerErrorKind.UNAUTHORIZED,
    "UnauthorizedResolver": LedgerErrorKind.UNAUTHORIZED,
    "MarketNotOpen": LedgerErrorKind.MARKET_NOT_OPEN,
    "AlreadyDisbursed": LedgerErrorKind.ALREADY_DISBURSED,
}


class HttpLedgerGateway:
    """LedgerClient backed by a ledger gateway service."""

    def __init__(
        self,
        base_url: str,
        *,
        authority: str = "oracle",
        api_key: Optional[str] = None,
        http: Optional[HttpClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.authority = authority
        self._headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self.http = http or HttpClient(timeout=60.0)

    def _url(self, market_address: str, action: str) -> str:
        return f"{self.base_url}/markets/{market_address}/{action}"

    def _call(self, method: str, url: str, payload: Optional[dict[str, Any]] = None) -> Any:
        try:
            response = self.http.request(method, url, json=payload, headers=self._headers)
        except HttpError as e:
            raise LedgerError(f"Ledger gateway unreachable: {e}", LedgerErrorKind.OTHER) from e
        if not response.ok:
            raise _to_ledger_error(response)
        try:
            return response.json()
        except ValueError as e:
            raise LedgerError(f"Malformed gateway response: {e}", LedgerErrorKind.OTHER) from e

    def resolve(self, market_address: str, outcome: int, transcript_digest: bytes) -> str:
        data = self._call(
            "POST",
            self._url(market_address, "resolve"),
            {
                "outcome": outcome,
                "transcript_digest": transcript_digest.hex(),
                "authority": self.authority,
            },
        )
        return _signature(data)

    def disburse(self, market_address: str, user: str, amount: int) -> str:
        data = self._call(
            "POST",
            self._url(market_address, "disburse"),
            {"user": user, "amount": amount},
        )
        return _signature(data)

    def query_stakes(self, market_address: str) -> list[StakeRecord]:
        data = self._call("GET", self._url(market_address, "stakes"))
        stakes = data.get("stakes", []) if isinstance(data, dict) else data
        return [
            StakeRecord.model_validate({"market_address": market_address, **stake})
            for stake in stakes
        ]


def _signature(data: Any) -> str:
    if not isinstance(data, dict) or not data.get("signature"):
        raise LedgerError("Gateway response missing signature", LedgerErrorKind.OTHER)
    return str(data["signature"])


def _to_ledger_error(response: HttpResponse) -> LedgerError:
    code, message = None, response.text[:200]
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        code = body["error"].get("code")
        message = body["error"].get("message", message)
    kind = _KIND_BY_CODE.get(code or "", LedgerErrorKind.OTHER)
    return LedgerError(message, kind, details={"status_code": response.status_code, "code": code})
