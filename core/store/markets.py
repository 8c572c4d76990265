"""
Market Store

Keyed market state with per-market locking. There is no cross-market lock:
work on distinct markets proceeds independently.

Readers always receive copies; every mutation goes through a method that
holds the market's lock and checks the status transition table.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

from core.schemas.errors import (
    InvalidTransitionError,
    MarketAlreadyResolvedError,
    MarketExistsError,
    MarketNotFoundError,
    ResolutionInProgressError,
)
from core.schemas.evidence import EvidenceItem
from core.schemas.market import Market, MarketStatus, Outcome
from core.schemas.stake import DistributionResult

logger = logging.getLogger(__name__)


# Allowed status transitions. Any in-flight status may fall back to OPEN
# when a resolution ends without a committed outcome.
STATUS_TRANSITIONS: dict[MarketStatus, frozenset[MarketStatus]] = {
    MarketStatus.OPEN: frozenset({MarketStatus.RESEARCHING}),
    MarketStatus.RESEARCHING: frozenset({MarketStatus.JUDGING, MarketStatus.OPEN}),
    MarketStatus.JUDGING: frozenset(
        {MarketStatus.RESEARCHING, MarketStatus.EXECUTING, MarketStatus.OPEN}
    ),
    MarketStatus.EXECUTING: frozenset({MarketStatus.RESOLVED, MarketStatus.OPEN}),
    MarketStatus.RESOLVED: frozenset({MarketStatus.DISPUTED}),
    MarketStatus.DISPUTED: frozenset(),
}


class MarketStore:
    """In-process market registry."""

    def __init__(self) -> None:
        self._markets: dict[str, Market] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    # -- locking -------------------------------------------------------------

    def _lock_for(self, market_id: str) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(market_id)
            if lock is None:
                lock = self._locks[market_id] = threading.RLock()
            return lock

    @contextmanager
    def locked(self, market_id: str) -> Iterator[Market]:
        """Hold the market's lock and yield the live record (mutate with care)."""
        with self._lock_for(market_id):
            yield self._require(market_id)

    def _require(self, market_id: str) -> Market:
        market = self._markets.get(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    # -- queries -------------------------------------------------------------

    def get(self, market_id: str) -> Market:
        with self._lock_for(market_id):
            return self._require(market_id).model_copy(deep=True)

    def find(self, market_id: str) -> Optional[Market]:
        try:
            return self.get(market_id)
        except MarketNotFoundError:
            return None

    def exists(self, market_id: str) -> bool:
        return market_id in self._markets

    def list(self, status: Optional[MarketStatus] = None) -> list[Market]:
        with self._registry_lock:
            ids = list(self._markets)
        markets = [self.get(market_id) for market_id in ids]
        if status is not None:
            markets = [m for m in markets if m.status == status]
        return sorted(markets, key=lambda m: m.created_at, reverse=True)

    def stats(self) -> dict[str, Any]:
        markets = self.list()
        by_status = {status.value: 0 for status in MarketStatus}
        for market in markets:
            by_status[market.status.value] += 1
        return {
            "total_markets": len(markets),
            "by_status": by_status,
            "total_evidence": sum(m.evidence_count for m in markets),
            "total_staked": sum(m.yes_stake_total + m.no_stake_total for m in markets),
        }

    # -- mutations -----------------------------------------------------------

    def create(self, market: Market) -> Market:
        with self._lock_for(market.market_id):
            if market.market_id in self._markets:
                raise MarketExistsError(market.market_id)
            self._markets[market.market_id] = market.model_copy(deep=True)
        logger.info("Registered market %s", market.market_id)
        return market

    def append_evidence(self, market_id: str, item: EvidenceItem) -> Market:
        """Evidence is append-only; it is accepted in any status."""
        with self._lock_for(market_id):
            market = self._require(market_id)
            market.evidence.append(item)
            return market.model_copy(deep=True)

    def update_stakes(self, market_id: str, yes_total: int, no_total: int) -> Market:
        with self._lock_for(market_id):
            market = self._require(market_id)
            market.yes_stake_total = yes_total
            market.no_stake_total = no_total
            return market.model_copy(deep=True)

    def begin_resolution(self, market_id: str) -> Market:
        """
        Atomically claim the market for a resolution workflow (OPEN -> RESEARCHING).

        Raises:
            ResolutionInProgressError: another workflow owns the market
            MarketAlreadyResolvedError: the market is Resolved or Disputed
        """
        with self._lock_for(market_id):
            market = self._require(market_id)
            if market.status.in_flight:
                raise ResolutionInProgressError(market_id, market.status.value)
            if market.status.settled:
                raise MarketAlreadyResolvedError(market_id, market.status.value)
            market.status = MarketStatus.RESEARCHING
            return market.model_copy(deep=True)

    def set_status(self, market_id: str, status: MarketStatus) -> Market:
        with self._lock_for(market_id):
            market = self._require(market_id)
            if status == market.status:
                return market.model_copy(deep=True)
            if status not in STATUS_TRANSITIONS[market.status]:
                raise InvalidTransitionError(
                    market.status.value, status.value, details={"market_id": market_id}
                )
            market.status = status
            return market.model_copy(deep=True)

    def record_settlement(
        self,
        market_id: str,
        outcome: Outcome,
        *,
        transcript_cid: Optional[str] = None,
        transcript_digest: Optional[str] = None,
    ) -> Market:
        """
        Write the committed outcome and mark the market Resolved.

        A committed outcome is never overwritten.
        """
        with self._lock_for(market_id):
            market = self._require(market_id)
            if market.outcome != Outcome.UNSET and market.outcome != outcome:
                raise MarketAlreadyResolvedError(market_id, market.status.value)
            if market.status != MarketStatus.RESOLVED:
                self.set_status(market_id, MarketStatus.RESOLVED)
            market.outcome = outcome
            market.transcript_cid = transcript_cid or market.transcript_cid
            market.transcript_digest = transcript_digest or market.transcript_digest
            market.resolved_at = market.resolved_at or datetime.now(timezone.utc)
            return market.model_copy(deep=True)

    def record_distribution(self, market_id: str, result: DistributionResult) -> Market:
        with self._lock_for(market_id):
            market = self._require(market_id)
            market.last_distribution = result
            return market.model_copy(deep=True)

    def mark_disputed(self, market_id: str) -> Market:
        """Resolved -> Disputed; the only change allowed after resolution."""
        return self.set_status(market_id, MarketStatus.DISPUTED)
