"""
Ledger Interface

The oracle consumes the ledger through three calls: commit an outcome,
disburse a reward, and snapshot a market's stakes. Every rejection is a
LedgerError and is never retried by the caller.
"""

from __future__ import annotations

import hashlib
from typing import Protocol, runtime_checkable

from core.schemas.stake import StakeRecord


def derive_market_address(market_id: str, program_id: str = "prophecy") -> str:
    """
    Deterministic ledger address for a market id under ``program_id``.

    Mirrors a program-derived address: seeds are the literal ``market`` and
    the market id.
    """
    seed = f"{program_id}/market/{market_id}".encode("utf-8")
    return hashlib.sha256(seed).hexdigest()[:44]


@runtime_checkable
class LedgerClient(Protocol):
    """Ledger settlement interface."""

    def resolve(self, market_address: str, outcome: int, transcript_digest: bytes) -> str:
        """
        Commit ``outcome`` (1 = Yes, 0 = No) and the 32-byte transcript digest.

        Returns the transaction signature.

        Raises:
            LedgerError: AlreadyResolved, Unauthorized, MarketNotOpen or Other
        """
        ...

    def disburse(self, market_address: str, user: str, amount: int) -> str:
        """Pay ``amount`` base units to ``user``. Returns the signature."""
        ...

    def query_stakes(self, market_address: str) -> list[StakeRecord]:
        """All stake records for the market as of call time."""
        ...
