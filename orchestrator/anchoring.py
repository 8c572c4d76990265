"""
Transcript Anchorer

Builds the transcript bundle for a decided market, serializes it as
canonical JSON and pins it to the content store. The ledger stores
SHA-256(CID) as the fixed 32-byte transcript field.

When the content store is unavailable the transcript is still anchored
against a locally derived CID (same bytes, same CID). That is a degraded
result, not an error: settlement goes ahead.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence, TYPE_CHECKING

from core.audit import AuditLog, AuditRecord
from core.crypto.hashing import cid_to_digest, local_cid
from core.schemas.canonical import canonical_bytes
from core.schemas.errors import ContentStoreError
from core.schemas.evidence import EvidenceItem, Fact
from core.schemas.logs import Sentiment, Speaker
from core.schemas.market import Market
from core.schemas.transcript import AnchorResult, TranscriptBundle
from core.schemas.verdict import Verdict

if TYPE_CHECKING:
    from core.storage import ContentStore
    from core.store.logs import LogStore

logger = logging.getLogger(__name__)

ACTOR = "transcript_anchorer"


def build_transcript(
    market: Market,
    facts: Sequence[Fact],
    verdict: Verdict,
    logs: "LogStore",
    *,
    question: Optional[str] = None,
    evidence: Optional[Sequence[EvidenceItem]] = None,
    log_window: int = 50,
    timestamp: Optional[datetime] = None,
) -> TranscriptBundle:
    """
    Snapshot of everything that led to ``verdict``, bounded to the trailing
    log window. ``question`` is the text that was actually judged when the
    trigger overrode the market question.
    """
    return TranscriptBundle(
        market_id=market.market_id,
        ledger_address=market.ledger_address,
        question=question or market.question,
        facts=list(facts),
        decision=verdict.decision,
        reasoning=verdict.reasoning,
        agent_logs=logs.for_market(market.market_id, limit=log_window),
        evidence=list(market.evidence if evidence is None else evidence),
        timestamp=timestamp or datetime.now(timezone.utc),
    )


class TranscriptAnchorer:
    """Pins transcripts and derives the ledger digest."""

    def __init__(
        self,
        store: "ContentStore",
        logs: "LogStore",
        *,
        audit: Optional[AuditLog] = None,
    ) -> None:
        self.store = store
        self.logs = logs
        self.audit = audit

    def anchor(self, bundle: TranscriptBundle) -> AnchorResult:
        content = canonical_bytes(bundle)
        name = f"transcript-{bundle.market_id}.json"

        self.logs.append(
            Speaker.EXECUTOR, "Pinning transcript to content store...", market_id=bundle.market_id
        )
        try:
            cid = self.store.pin(content, name=name)
            pinned = True
        except Exception as e:
            # any store failure degrades to a local CID; settlement still proceeds
            cid = local_cid(content)
            pinned = False
            reason = e.message if isinstance(e, ContentStoreError) else f"{type(e).__name__}: {e}"
            logger.warning("Transcript pin failed for %s, using local CID %s: %s",
                           bundle.market_id, cid, reason)
            self.logs.append(
                Speaker.EXECUTOR,
                f"Content store unavailable, transcript anchored locally: {cid[:20]}...",
                market_id=bundle.market_id,
            )
        else:
            self.logs.append(
                Speaker.EXECUTOR,
                f"Transcript pinned: {cid[:20]}...",
                sentiment=Sentiment.POSITIVE,
                market_id=bundle.market_id,
            )

        result = AnchorResult(cid=cid, digest=cid_to_digest(cid).hex(), pinned=pinned)
        if self.audit is not None:
            self.audit.append(
                AuditRecord(
                    action="anchor" if pinned else "anchor_degraded",
                    actor=ACTOR,
                    subject=bundle.ledger_address,
                    market_id=bundle.market_id,
                    details={"cid": cid, "digest": result.digest},
                )
            )
        return result
