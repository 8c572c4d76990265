"""
Post-Settlement Side Effects

Work that follows a committed outcome but is not part of it: each effect is
named, run in order, logged, and isolated. A failing effect is recorded as a
SideEffectError and never propagates into settlement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence, TYPE_CHECKING

from core.schemas.canonical import canonical_bytes
from core.schemas.errors import SideEffectError
from core.schemas.logs import Sentiment, Speaker
from core.schemas.market import Market
from core.schemas.transcript import AnchorResult

if TYPE_CHECKING:
    from core.storage import ContentStore
    from core.store.logs import LogStore

logger = logging.getLogger(__name__)


@dataclass
class SideEffectResult:
    name: str
    ok: bool
    output: Optional[Any] = None
    error: Optional[str] = None


class SideEffect(Protocol):
    """A named action run after a market is committed."""

    name: str

    def run(self, market: Market, anchor: AnchorResult) -> Any:
        ...


def proof_certificate_metadata(market: Market, anchor: AnchorResult) -> dict[str, Any]:
    """Metadata document for the proof-of-truth certificate of a resolved market."""
    resolved_at = market.resolved_at
    return {
        "name": f"Proof-Of-Truth: {market.market_id[:8]}",
        "description": (
            f'Verified outcome for: "{market.question}"\n\n'
            "Immutable proof of the oracle's decision. The complete transcript "
            "and evidence are stored under the transcript CID."
        ),
        "attributes": [
            {"trait_type": "Outcome", "value": market.outcome.value.upper()},
            {
                "trait_type": "Resolution Date",
                "value": resolved_at.date().isoformat() if resolved_at else None,
            },
            {"trait_type": "Market Type", "value": "Prediction"},
            {"trait_type": "Verification", "value": "Oracle Verified"},
        ],
        "properties": {
            "market_id": market.market_id,
            "ledger_address": market.ledger_address,
            "outcome": market.outcome.value.upper(),
            "transcript_cid": anchor.cid,
            "transcript_digest": anchor.digest,
            "resolution_timestamp": resolved_at,
        },
    }


class ProofCertificateEffect:
    """Pins the proof-certificate metadata next to the transcript."""

    name = "proof_certificate"

    def __init__(self, store: "ContentStore") -> None:
        self.store = store

    def run(self, market: Market, anchor: AnchorResult) -> str:
        metadata = proof_certificate_metadata(market, anchor)
        return self.store.pin(canonical_bytes(metadata), name=f"certificate-{market.market_id}.json")


@dataclass
class SideEffectDispatcher:
    logs: "LogStore"
    effects: Sequence[SideEffect] = field(default_factory=list)

    def dispatch(self, market: Market, anchor: AnchorResult) -> list[SideEffectResult]:
        results = []
        for effect in self.effects:
            try:
                output = effect.run(market, anchor)
            except Exception as e:
                error = SideEffectError(str(e), effect=effect.name, details={"market_id": market.market_id})
                logger.warning("Side effect %s failed for %s: %s", effect.name, market.market_id, error.message)
                self.logs.append(
                    Speaker.EXECUTOR,
                    f"Side effect {effect.name} failed: {error.message}",
                    sentiment=Sentiment.NEGATIVE,
                    market_id=market.market_id,
                )
                results.append(SideEffectResult(name=effect.name, ok=False, error=error.message))
                continue

            self.logs.append(
                Speaker.EXECUTOR,
                f"Side effect {effect.name} completed" + (f": {str(output)[:20]}..." if output else ""),
                sentiment=Sentiment.POSITIVE,
                market_id=market.market_id,
            )
            results.append(SideEffectResult(name=effect.name, ok=True, output=output))
        return results
