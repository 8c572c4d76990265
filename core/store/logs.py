"""
Log Store

Single shared append target for the observable log stream. Entries from
concurrent resolutions interleave in append order; each carries its market
id so a per-market view can be kept alongside the global one. Both views are
bounded trailing windows (oldest dropped first), and at most ``max_markets``
per-market views are kept; the least recently written one is evicted.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections import OrderedDict, deque
from typing import Optional

from core.schemas.logs import LogEntry, Sentiment, Speaker, Workflow

logger = logging.getLogger("prophecy.logs")

_LEVELS = {
    Sentiment.NEGATIVE: logging.WARNING,
    Sentiment.NEUTRAL: logging.INFO,
    Sentiment.POSITIVE: logging.INFO,
}


class LogStore:
    """Thread-safe bounded log stream with per-market views."""

    def __init__(
        self,
        window: int = 200,
        market_window: Optional[int] = None,
        max_markets: int = 1000,
    ) -> None:
        if window < 1:
            raise ValueError("window must be >= 1")
        if max_markets < 1:
            raise ValueError("max_markets must be >= 1")
        self.window = window
        self.market_window = market_window or window
        self._entries: deque[LogEntry] = deque(maxlen=window)
        self.max_markets = max_markets
        self._by_market: OrderedDict[str, deque[LogEntry]] = OrderedDict()
        self._seq = itertools.count(1)
        self._lock = threading.Lock()

    def append(
        self,
        speaker: Speaker,
        message: str,
        *,
        sentiment: Sentiment = Sentiment.NEUTRAL,
        market_id: Optional[str] = None,
        workflow: Workflow = Workflow.RESOLUTION,
    ) -> LogEntry:
        with self._lock:
            entry = LogEntry(
                seq=next(self._seq),
                speaker=speaker,
                message=message,
                sentiment=sentiment,
                market_id=market_id,
                workflow=workflow,
            )
            self._entries.append(entry)
            if market_id is not None:
                view = self._by_market.get(market_id)
                if view is None:
                    view = self._by_market[market_id] = deque(maxlen=self.market_window)
                    while len(self._by_market) > self.max_markets:
                        self._by_market.popitem(last=False)
                else:
                    self._by_market.move_to_end(market_id)
                view.append(entry)

        logger.log(
            _LEVELS[sentiment],
            "[%s]%s %s",
            speaker.value,
            f" ({market_id})" if market_id else "",
            message,
        )
        return entry

    def recent(
        self,
        limit: Optional[int] = None,
        *,
        workflow: Optional[Workflow] = None,
    ) -> list[LogEntry]:
        """Trailing window of the global stream, oldest first."""
        with self._lock:
            entries = list(self._entries)
        return _tail(_filter(entries, workflow), limit)

    def for_market(
        self,
        market_id: str,
        limit: Optional[int] = None,
        *,
        workflow: Optional[Workflow] = None,
    ) -> list[LogEntry]:
        """Trailing window for a single market, oldest first."""
        with self._lock:
            entries = list(self._by_market.get(market_id, ()))
        return _tail(_filter(entries, workflow), limit)

    def since(self, seq: int, market_id: Optional[str] = None) -> list[LogEntry]:
        """Entries appended after ``seq`` (for polling clients)."""
        source = self.for_market(market_id) if market_id else self.recent()
        return [e for e in source if e.seq > seq]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def _filter(entries: list[LogEntry], workflow: Optional[Workflow]) -> list[LogEntry]:
    if workflow is None:
        return entries
    return [e for e in entries if e.workflow == workflow]


def _tail(entries: list[LogEntry], limit: Optional[int]) -> list[LogEntry]:
    if limit is None or limit >= len(entries):
        return entries
    if limit <= 0:
        return []
    return entries[-limit:]
