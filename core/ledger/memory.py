"""
In-Memory Ledger

Development / test ledger enforcing the same rules as the on-chain program:

- only the configured authority may resolve
- a market resolves once (AlreadyResolved afterwards)
- stakes are accepted only while the market is open
- a user is paid at most once per market (AlreadyDisbursed)
- only users holding a winning stake can be paid
"""

from __future__ import annotations

import hashlib
import itertools
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from core.schemas.errors import LedgerError, LedgerErrorKind
from core.schemas.stake import StakeRecord

logger = logging.getLogger(__name__)


@dataclass
class LedgerMarket:
    address: str
    status: str = "Open"
    outcome: Optional[int] = None
    transcript_digest: Optional[bytes] = None
    stakes: list[StakeRecord] = field(default_factory=list)
    paid: dict[str, int] = field(default_factory=dict)


class InMemoryLedger:
    """
    Ledger kept in process memory.

    ``signer`` is the identity this client submits as; resolutions are
    rejected unless it matches ``authority``.
    """

    def __init__(self, authority: str = "oracle", signer: Optional[str] = None) -> None:
        self.authority = authority
        self.signer = signer or authority
        self._markets: dict[str, LedgerMarket] = {}
        self._lock = threading.Lock()
        self._counter = itertools.count(1)
        self.resolve_calls: list[tuple[str, int, bytes]] = []
        self.disburse_calls: list[tuple[str, str, int]] = []

    def _signature(self, *parts: object) -> str:
        raw = "|".join(str(p) for p in (next(self._counter), *parts))
        return "sig_" + hashlib.sha256(raw.encode("utf-8")).hexdigest()[:32]

    def _market(self, market_address: str) -> LedgerMarket:
        market = self._markets.get(market_address)
        if market is None:
            raise LedgerError(f"Unknown market account {market_address}", LedgerErrorKind.OTHER)
        return market

    # -- setup ---------------------------------------------------------------

    def open_market(self, market_address: str) -> LedgerMarket:
        with self._lock:
            return self._markets.setdefault(market_address, LedgerMarket(address=market_address))

    def place_stake(
        self,
        market_address: str,
        user: str,
        amount: int,
        direction: bool,
        timestamp: Optional[datetime] = None,
    ) -> StakeRecord:
        if amount <= 0:
            raise LedgerError("Invalid amount specified", LedgerErrorKind.OTHER)
        with self._lock:
            market = self._market(market_address)
            if market.status != "Open":
                raise LedgerError("Market is not open for participation", LedgerErrorKind.MARKET_NOT_OPEN)
            stake = StakeRecord(
                user=user,
                market_address=market_address,
                amount=amount,
                direction=direction,
                timestamp=timestamp or datetime.now(timezone.utc),
            )
            market.stakes.append(stake)
            return stake

    # -- LedgerClient --------------------------------------------------------

    def resolve(self, market_address: str, outcome: int, transcript_digest: bytes) -> str:
        with self._lock:
            self.resolve_calls.append((market_address, outcome, transcript_digest))
            if self.signer != self.authority:
                raise LedgerError(
                    "Unauthorized resolver - only the executor authority can resolve",
                    LedgerErrorKind.UNAUTHORIZED,
                )
            if outcome not in (0, 1):
                raise LedgerError("Invalid outcome value (must be 0 or 1)", LedgerErrorKind.OTHER)
            if len(transcript_digest) != 32:
                raise LedgerError("Transcript digest must be 32 bytes", LedgerErrorKind.OTHER)
            market = self._market(market_address)
            if market.status == "Resolved":
                raise LedgerError("Market already resolved", LedgerErrorKind.ALREADY_RESOLVED)
            if market.status != "Open":
                raise LedgerError("Market is not open for participation", LedgerErrorKind.MARKET_NOT_OPEN)
            market.status = "Resolved"
            market.outcome = outcome
            market.transcript_digest = transcript_digest
            return self._signature("resolve", market_address, outcome)

    def disburse(self, market_address: str, user: str, amount: int) -> str:
        with self._lock:
            self.disburse_calls.append((market_address, user, amount))
            market = self._market(market_address)
            if market.status != "Resolved" or market.outcome is None:
                raise LedgerError("Market has not been resolved yet", LedgerErrorKind.OTHER)
            if user in market.paid:
                raise LedgerError(
                    f"Reward already disbursed to {user}", LedgerErrorKind.ALREADY_DISBURSED
                )
            winning = market.outcome == 1
            if not any(s.user == user and s.direction == winning for s in market.stakes):
                raise LedgerError("User did not win this market", LedgerErrorKind.OTHER)
            market.paid[user] = amount
            return self._signature("disburse", market_address, user, amount)

    def query_stakes(self, market_address: str) -> list[StakeRecord]:
        with self._lock:
            return list(self._market(market_address).stakes)

    # -- inspection ----------------------------------------------------------

    def paid(self, market_address: str) -> dict[str, int]:
        with self._lock:
            return dict(self._market(market_address).paid)

    def status(self, market_address: str) -> str:
        with self._lock:
            return self._market(market_address).status

    def dispute(self, market_address: str) -> None:
        with self._lock:
            market = self._market(market_address)
            if market.status != "Resolved":
                raise LedgerError("Market has not been resolved yet", LedgerErrorKind.OTHER)
            market.status = "Disputed"
