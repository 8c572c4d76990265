"""
Resolution Workflow Tests

End-to-end runs of RESEARCH -> JUDGE -> SETTLE over the in-memory ledger
and content store, with the model scripted through the mock provider.
"""

import json

import pytest

from core.crypto.hashing import cid_to_digest
from core.ledger import InMemoryLedger
from core.schemas import (
    Decision,
    MarketAlreadyResolvedError,
    MarketStatus,
    Outcome,
    ResolutionInProgressError,
    Sentiment,
)
from core.storage import InMemoryContentStore
from orchestrator.resolution import merge_evidence
from orchestrator.state_machine import ResolutionState, SettlementStatus

from fixtures.common import (
    judge_json,
    make_config,
    make_service,
    mock_provider,
    register_with_stakes,
    research_json,
)

STAKES = [("alice", 100, True), ("bob", 50, False), ("carol", 30, True)]


class TestCommittedResolution:
    """Clear YES: anchored, committed once, winners paid double."""

    @pytest.fixture
    def resolved(self):
        service = make_service([research_json(), judge_json("YES", 88)])
        market = register_with_stakes(service, "m1", STAKES)
        run = service.resolve("m1")
        return service, market, run

    def test_outcome_committed(self, resolved):
        service, market, run = resolved

        assert run.decision == Decision.YES
        assert run.settlement == SettlementStatus.COMMITTED
        assert run.outcome == Outcome.YES
        assert run.iterations == 1
        assert run.history == [
            ResolutionState.RESEARCH,
            ResolutionState.JUDGE,
            ResolutionState.SETTLE,
            ResolutionState.DONE,
        ]
        assert service.ledger.status(market.ledger_address) == "Resolved"
        assert len(service.ledger.resolve_calls) == 1

    def test_ledger_digest_is_sha256_of_transcript_cid(self, resolved):
        service, market, run = resolved

        address, outcome, digest = service.ledger.resolve_calls[0]
        assert address == market.ledger_address
        assert outcome == 1
        assert digest == cid_to_digest(run.anchor.cid)
        assert run.anchor.pinned

    def test_transcript_is_retrievable(self, resolved):
        service, _, run = resolved

        transcript = json.loads(service.content_store.get(run.anchor.cid))
        assert transcript["decision"] == "YES"
        assert transcript["market_id"] == "m1"
        assert len(transcript["facts"]) == 2
        assert transcript["agent_logs"]

    def test_market_resolved(self, resolved):
        service, _, run = resolved

        market = service.get_market("m1")
        assert market.status == MarketStatus.RESOLVED
        assert market.outcome == Outcome.YES
        assert market.transcript_cid == run.anchor.cid
        assert market.resolved_at is not None

    def test_winners_paid_double(self, resolved):
        service, market, run = resolved

        assert service.ledger.paid(market.ledger_address) == {"alice": 200, "carol": 60}
        assert run.distribution.distributed == 2
        assert run.distribution.total == 2
        assert run.distribution.failed == 0

    def test_log_stream(self, resolved):
        service, _, _ = resolved

        messages = [e.message for e in service.market_logs("m1")]
        assert "Starting resolution for market m1" in messages
        assert "MARKET RESOLVED ON LEDGER: YES" in messages
        assert any(m.startswith("Transaction: sig_") for m in messages)
        assert "Distributed rewards: 2/2 winners received 2x their stake" in messages

    def test_proof_certificate_pinned(self, resolved):
        service, _, _ = resolved

        # transcript, certificate
        assert len(service.content_store) == 2

    def test_transcript_records_the_judged_question(self):
        service = make_service([research_json(), judge_json("YES", 88)])
        register_with_stakes(service, "m1", STAKES)

        run = service.resolve("m1", question="Did event X occur?")

        transcript = json.loads(service.content_store.get(run.anchor.cid))
        assert transcript["question"] == "Did event X occur?"
        assert "Did event X occur?" in mock_provider(service).calls[0]["messages"][-1]["content"]

    def test_resolved_market_cannot_be_resolved_again(self, resolved):
        service, _, _ = resolved

        with pytest.raises(MarketAlreadyResolvedError):
            service.resolve("m1")
        assert len(service.ledger.resolve_calls) == 1


class TestUncertainResolution:
    """UNCERTAIN on every pass: capped at max_iterations, never committed."""

    def test_unresolved_after_cap(self):
        service = make_service([research_json(), judge_json("UNCERTAIN", 30)])
        register_with_stakes(service, "m1", STAKES)

        run = service.resolve("m1")

        assert run.iterations == 3
        assert [v.iteration for v in run.verdicts] == [1, 2, 3]
        assert run.settlement == SettlementStatus.UNRESOLVED
        assert run.anchor is None
        assert service.ledger.resolve_calls == []
        assert service.ledger.disburse_calls == []
        assert mock_provider(service).call_count == 6

        market = service.get_market("m1")
        assert market.status == MarketStatus.OPEN
        assert market.outcome == Outcome.UNSET

    def test_state_history_loops_back_to_research(self):
        service = make_service([research_json(), judge_json("UNCERTAIN", 30)])
        register_with_stakes(service, "m1")

        run = service.resolve("m1")

        assert run.history == [
            ResolutionState.RESEARCH, ResolutionState.JUDGE,
            ResolutionState.RESEARCH, ResolutionState.JUDGE,
            ResolutionState.RESEARCH, ResolutionState.JUDGE,
            ResolutionState.SETTLE, ResolutionState.DONE,
        ]
        messages = [e.message for e in service.market_logs("m1")]
        assert "Uncertain after iteration 1/3, requesting further research" in messages
        assert "Market remains UNRESOLVED (decision uncertain)" in messages

    def test_custom_iteration_cap(self):
        service = make_service(
            [research_json(), judge_json("UNCERTAIN")], config=make_config(max_iterations=1)
        )
        register_with_stakes(service, "m1")

        run = service.resolve("m1")
        assert run.iterations == 1
        assert run.settlement == SettlementStatus.UNRESOLVED

    def test_uncertain_then_yes(self):
        service = make_service([
            research_json(), judge_json("UNCERTAIN", 40),
            research_json(), judge_json("YES", 90),
        ])
        register_with_stakes(service, "m1", STAKES)

        run = service.resolve("m1")
        assert run.iterations == 2
        assert run.committed

    def test_market_can_be_resolved_again_after_unresolved(self):
        service = make_service([
            research_json(), judge_json("UNCERTAIN"),
            research_json(), judge_json("UNCERTAIN"),
            research_json(), judge_json("UNCERTAIN"),
            research_json(), judge_json("NO", 80),
        ])
        register_with_stakes(service, "m1", STAKES)

        first = service.resolve("m1")
        second = service.resolve("m1")

        assert first.settlement == SettlementStatus.UNRESOLVED
        assert second.settlement == SettlementStatus.COMMITTED
        assert second.outcome == Outcome.NO
        assert second.distribution.distributed == 1


class TestModelOutage:
    def test_outage_never_commits(self):
        service = make_service([RuntimeError("provider down")])
        register_with_stakes(service, "m1", STAKES)

        run = service.resolve("m1")

        assert run.decision == Decision.UNCERTAIN
        assert run.settlement == SettlementStatus.UNRESOLVED
        assert service.ledger.resolve_calls == []
        # judge is not consulted on unverified facts: 3 research attempts x 3 passes
        assert mock_provider(service).call_count == 9
        assert any(e.startswith("research:") for e in run.errors)

    def test_malformed_verdict_never_commits(self):
        service = make_service([research_json(), '{"decision": "PROBABLY_YES"}'])
        register_with_stakes(service, "m1")

        run = service.resolve("m1")
        assert run.decision == Decision.UNCERTAIN
        assert service.ledger.resolve_calls == []


class TestDegradedAnchoring:
    """Content store down: transcript anchored against a local CID, settlement proceeds."""

    def test_commits_with_local_cid(self):
        service = make_service(
            [research_json(), judge_json("NO", 90)],
            content_store=InMemoryContentStore(available=False),
        )
        market = register_with_stakes(service, "m1", STAKES)

        run = service.resolve("m1")

        assert run.settlement == SettlementStatus.COMMITTED
        assert run.outcome == Outcome.NO
        assert not run.anchor.pinned
        assert run.anchor.cid.startswith("bafkreig")
        assert service.ledger.resolve_calls[0][2] == cid_to_digest(run.anchor.cid)
        assert service.ledger.paid(market.ledger_address) == {"bob": 100}

        actions = [r.action for r in service.audit.records()]
        assert "anchor_degraded" in actions
        assert "resolve" in actions

    def test_store_client_crash_still_commits(self):
        service = make_service(
            [research_json(), judge_json("YES", 90)], content_store=CrashingStore()
        )
        market = register_with_stakes(service, "m1", STAKES)

        run = service.resolve("m1")

        assert run.settlement == SettlementStatus.COMMITTED
        assert run.outcome == Outcome.YES
        assert not run.anchor.pinned
        assert service.ledger.resolve_calls[0][2] == cid_to_digest(run.anchor.cid)
        assert service.get_market("m1").status == MarketStatus.RESOLVED
        assert service.ledger.paid(market.ledger_address) == {"alice": 200, "carol": 60}

    def test_failed_side_effect_is_logged_not_raised(self):
        service = make_service(
            [research_json(), judge_json("YES", 90)],
            content_store=InMemoryContentStore(available=False),
        )
        register_with_stakes(service, "m1")

        run = service.resolve("m1")

        assert run.committed
        negatives = [
            e.message for e in service.market_logs("m1") if e.sentiment == Sentiment.NEGATIVE
        ]
        assert any(m.startswith("Side effect proof_certificate failed") for m in negatives)


class TestLedgerRejections:
    def test_already_resolved_on_ledger(self):
        service = make_service([research_json(), judge_json("YES", 90)])
        market = register_with_stakes(service, "m1", STAKES)
        service.ledger.resolve(market.ledger_address, 0, b"\x00" * 32)

        run = service.resolve("m1")

        assert run.settlement == SettlementStatus.ALREADY_RESOLVED
        assert service.ledger.disburse_calls == []
        stored = service.get_market("m1")
        assert stored.status == MarketStatus.RESOLVED
        assert stored.outcome == Outcome.UNSET

    def test_unauthorized_resolver(self):
        service = make_service(
            [research_json(), judge_json("YES", 90)],
            ledger=InMemoryLedger(authority="oracle", signer="intruder"),
        )
        register_with_stakes(service, "m1", STAKES)

        run = service.resolve("m1")

        assert run.settlement == SettlementStatus.FAILED
        assert any("Unauthorized" in e for e in run.errors)
        assert service.ledger.disburse_calls == []
        assert service.get_market("m1").status == MarketStatus.OPEN
        assert [r.action for r in service.audit.records()][-1] == "resolve_failed"

        messages = [e.message for e in service.market_logs("m1")]
        assert any(m.startswith("Ledger resolution failed: Unauthorized") for m in messages)


class TestExclusivity:
    def test_in_flight_market_is_rejected(self):
        service = make_service([research_json(), judge_json("YES")])
        register_with_stakes(service, "m1")
        service.markets.begin_resolution("m1")

        with pytest.raises(ResolutionInProgressError):
            service.resolve("m1")

    def test_distinct_markets_resolve_independently(self):
        service = make_service([research_json(), judge_json("YES", 90)])
        register_with_stakes(service, "m1")
        register_with_stakes(service, "m2")
        service.markets.begin_resolution("m1")

        run = service.resolve("m2")
        assert run.committed


class TestMergeEvidence:
    def test_stored_first_then_new(self):
        from core.schemas import EvidenceItem

        stored = [EvidenceItem(cid="bafkreia", description="stored")]
        merged = merge_evidence(stored, ["bafkreib", "bafkreia"])

        assert [e.cid for e in merged] == ["bafkreia", "bafkreib"]
        assert merged[0].description == "stored"

    def test_trigger_evidence_reaches_prompt_but_is_not_stored(self):
        service = make_service([research_json(), judge_json("YES", 90)])
        register_with_stakes(service, "m1")

        service.resolve("m1", evidence=["bafkreitrigger"])

        prompt = mock_provider(service).calls[0]["messages"][-1]["content"]
        assert "bafkreitrigger" in prompt
        assert service.get_market("m1").evidence_count == 0


class CrashingStore(InMemoryContentStore):
    """Pinning fails with a plain transport error rather than ContentStoreError."""

    def pin(self, content, *, name="blob.json"):
        raise ConnectionError("connection reset by peer")
