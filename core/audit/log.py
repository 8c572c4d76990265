"""
Audit Log

Append-only JSON-lines file of AuditRecords, one line per event.
Also answers "was (market, user) already paid?" so reward distribution can
be re-run after a crash without paying anyone twice.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Iterator, Optional

from pydantic import ValidationError

from core.schemas.canonical import dumps_canonical

from .models import AuditRecord

logger = logging.getLogger(__name__)


class AuditLog:
    """
    JSONL audit log.

    With ``path=None`` records are kept in memory only (tests, dry runs).
    """

    def __init__(self, path: Optional[str | Path] = None) -> None:
        self.path = Path(path) if path else None
        self._lock = threading.Lock()
        self._memory: list[AuditRecord] = []
        if self.path:
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: AuditRecord) -> AuditRecord:
        line = dumps_canonical(record)
        with self._lock:
            if self.path:
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
            else:
                self._memory.append(record)
        logger.info("audit %s %s %s", record.action, record.subject, record.counterparty or "")
        return record

    def records(self) -> Iterator[AuditRecord]:
        """Iterate all records in append order. Corrupt lines are skipped and logged."""
        if not self.path:
            with self._lock:
                snapshot = list(self._memory)
            yield from snapshot
            return
        if not self.path.exists():
            return
        with open(self.path, encoding="utf-8") as f:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield AuditRecord.model_validate_json(line)
                except ValidationError as e:
                    logger.error("Corrupt audit line %s:%d: %s", self.path, lineno, e)

    def for_market(self, market_address: str) -> list[AuditRecord]:
        return [r for r in self.records() if r.subject == market_address]

    def paid_users(self, market_address: str) -> set[str]:
        """Users with a successful disbursement recorded for this market."""
        return {
            r.counterparty
            for r in self.records()
            if r.subject == market_address and r.action == "disburse" and r.counterparty
        }
