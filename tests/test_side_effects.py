"""
Post-settlement side effect tests
"""

from datetime import datetime, timezone

from core.crypto.hashing import cid_to_digest
from core.schemas import AnchorResult, Market, MarketStatus, Outcome
from core.storage import InMemoryContentStore
from core.store import LogStore
from orchestrator.side_effects import (
    ProofCertificateEffect,
    SideEffectDispatcher,
    proof_certificate_metadata,
)

CID = "bafkreitranscript"
ANCHOR = AnchorResult(cid=CID, digest=cid_to_digest(CID).hex())


def resolved_market():
    return Market(
        market_id="marathon-2026",
        ledger_address="addr",
        question="Sub 2h05?",
        status=MarketStatus.RESOLVED,
        outcome=Outcome.YES,
        resolved_at=datetime(2026, 4, 6, 8, 0, tzinfo=timezone.utc),
    )


class ExplodingEffect:
    name = "explode"

    def run(self, market, anchor):
        raise RuntimeError("metadata service down")


class TestProofCertificate:
    def test_metadata(self):
        metadata = proof_certificate_metadata(resolved_market(), ANCHOR)

        assert metadata["name"] == "Proof-Of-Truth: marathon"
        assert metadata["properties"]["outcome"] == "YES"
        assert metadata["properties"]["transcript_cid"] == CID
        assert {"trait_type": "Resolution Date", "value": "2026-04-06"} in metadata["attributes"]

    def test_pins_certificate(self):
        store = InMemoryContentStore()

        cid = ProofCertificateEffect(store).run(resolved_market(), ANCHOR)

        assert store.get(cid) is not None


class TestDispatcher:
    def test_failure_is_isolated(self):
        logs = LogStore()
        store = InMemoryContentStore()
        dispatcher = SideEffectDispatcher(logs, [ExplodingEffect(), ProofCertificateEffect(store)])

        results = dispatcher.dispatch(resolved_market(), ANCHOR)

        assert [(r.name, r.ok) for r in results] == [("explode", False), ("proof_certificate", True)]
        assert results[0].error == "metadata service down"
        messages = [e.message for e in logs.for_market("marathon-2026")]
        assert messages[0] == "Side effect explode failed: metadata service down"
        assert messages[1].startswith("Side effect proof_certificate completed: bafkrei")
        assert len(store) == 1
