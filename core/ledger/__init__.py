"""
Ledger Adapters

LedgerClient protocol plus the in-memory and HTTP gateway implementations.
"""

from typing import Optional

from core.http import HttpClient

from .base import LedgerClient, derive_market_address
from .http import HttpLedgerGateway
from .memory import InMemoryLedger, LedgerMarket


def create_ledger(config, http: Optional[HttpClient] = None) -> LedgerClient:
    """Build the ledger client named by a LedgerConfig."""
    backend = config.backend.lower()
    if backend == "memory":
        return InMemoryLedger(authority=config.authority)
    if backend == "http":
        if not config.endpoint:
            raise ValueError("ledger.endpoint is required for the http backend")
        return HttpLedgerGateway(
            config.endpoint,
            authority=config.authority,
            api_key=config.api_key,
            http=http,
        )
    raise ValueError(f"Unknown ledger backend: {config.backend}")


__all__ = [
    "HttpLedgerGateway",
    "InMemoryLedger",
    "LedgerClient",
    "LedgerMarket",
    "create_ledger",
    "derive_market_address",
]
