"""
Reconsideration Workflow Tests

ANALYZE -> JUDGE -> DONE with the OVERTURN guard rails and the
UPHOLD-on-failure defaults.
"""

import pytest
from pydantic import ValidationError

from agents.context import AgentContext
from agents.reconsideration import ReconsiderationJudgment
from core.config import ReconsiderationConfig
from core.schemas import (
    EvidenceAnalysis,
    InvalidTransitionError,
    Recommendation,
    ReconsiderationRequest,
    Speaker,
    SuggestedOutcome,
    Workflow,
)
from orchestrator.reconsideration import (
    ReconsiderationOrchestrator,
    apply_overturn_guard,
    confidence_delta,
    suggested_outcome,
)
from orchestrator.state_machine import ReconsiderationState, check_reconsideration_transition

from fixtures.common import (
    analyze_json,
    make_service,
    mock_provider,
    recon_judgment_json,
    register_with_stakes,
)


def make_request(**overrides):
    data = dict(
        market_id="marathon-2026",
        question="Will the Paris marathon be won in under 2h05m?",
        original_outcome="YES",
        original_reasoning="Official results listed 2:04:31.",
        evidence_cid="bafkreicertified",
        evidence_description="Federation certified results",
        submitter="carol",
    )
    data.update(overrides)
    return ReconsiderationRequest(**data)


def make_orchestrator(responses, min_credibility=80):
    ctx = AgentContext.create_mock(llm_responses=responses)
    return ReconsiderationOrchestrator(
        ctx,
        config=ReconsiderationConfig(pacing_delay_s=0, overturn_min_credibility=min_credibility),
    )


class TestRecommendations:
    def test_supported_overturn(self):
        orchestrator = make_orchestrator([analyze_json(), recon_judgment_json("OVERTURN", 80)])

        result = orchestrator.reconsider(make_request())

        assert result.recommendation == Recommendation.OVERTURN
        assert result.confidence_delta == -80
        assert result.new_outcome == SuggestedOutcome.NO
        assert result.annotation is None
        assert result.analysis.credibility_score == 90
        assert result.analysis.contradicts_original is True
        assert result.request_id.startswith("recon_")

    def test_overturn_of_no_suggests_yes(self):
        orchestrator = make_orchestrator([analyze_json(), recon_judgment_json("OVERTURN", 70)])

        result = orchestrator.reconsider(make_request(original_outcome="no"))

        assert result.new_outcome == SuggestedOutcome.YES
        assert result.confidence_delta == -70

    def test_low_credibility_overturn_is_downgraded(self):
        orchestrator = make_orchestrator(
            [analyze_json(credibility=40), recon_judgment_json("OVERTURN", 80)]
        )

        result = orchestrator.reconsider(make_request())

        assert result.recommendation == Recommendation.ANNOTATE
        assert result.confidence_delta == 15
        assert result.new_outcome == SuggestedOutcome.UNCHANGED
        assert result.annotation == "Certified timing contradicts the original outcome."
        messages = [e.message for e in result.logs]
        assert any(m.startswith("OVERTURN not supported (credibility 40%") for m in messages)

    def test_non_contradicting_overturn_without_warrant_is_upheld(self):
        orchestrator = make_orchestrator(
            [analyze_json(contradicts=False, warrants=False), recon_judgment_json("OVERTURN", 90)]
        )

        result = orchestrator.reconsider(make_request())

        assert result.recommendation == Recommendation.UPHOLD
        assert result.confidence_delta == 0
        assert result.annotation is None

    def test_uphold(self):
        orchestrator = make_orchestrator(
            [analyze_json(contradicts=False), recon_judgment_json("uphold", 95)]
        )

        result = orchestrator.reconsider(make_request())

        assert result.recommendation == Recommendation.UPHOLD
        assert result.confidence_delta == 0
        assert result.new_outcome == SuggestedOutcome.UNCHANGED

    def test_annotate_keeps_note(self):
        orchestrator = make_orchestrator([
            analyze_json(contradicts=False),
            recon_judgment_json("ANNOTATE", 30, annotation_note="Timing mat glitch at km 30."),
        ])

        result = orchestrator.reconsider(make_request())

        assert result.recommendation == Recommendation.ANNOTATE
        assert result.confidence_delta == -10
        assert result.annotation == "Timing mat glitch at km 30."
        assert "Annotation: Timing mat glitch at km 30." in [e.message for e in result.logs]


class TestFailureDefaults:
    def test_unparseable_analysis_skips_judge(self):
        orchestrator = make_orchestrator(["this is not json"])

        result = orchestrator.reconsider(make_request())

        assert result.recommendation == Recommendation.UPHOLD
        assert result.analysis.failed
        assert mock_provider(orchestrator.ctx).call_count == 1
        assert "Evidence analysis failed. Defaulting to UPHOLD." in [e.message for e in result.logs]
        analysis_error = next(e for e in result.logs if e.message.startswith("Evidence analysis error:"))
        assert analysis_error.speaker == Speaker.RESEARCHER

    def test_no_new_facts_skips_judge(self):
        orchestrator = make_orchestrator([analyze_json(facts=[])])

        result = orchestrator.reconsider(make_request())

        assert result.recommendation == Recommendation.UPHOLD
        assert not result.analysis.failed
        assert mock_provider(orchestrator.ctx).call_count == 1

    def test_judge_failure_upholds(self):
        orchestrator = make_orchestrator([analyze_json(), '{"recommendation": "REVERSE"}'])

        result = orchestrator.reconsider(make_request())

        assert result.recommendation == Recommendation.UPHOLD
        assert result.reasoning == "Error in judgment process"
        assert mock_provider(orchestrator.ctx).call_count == 2


class TestLogs:
    def test_result_carries_its_own_log_slice(self):
        orchestrator = make_orchestrator([analyze_json(), recon_judgment_json()])

        first = orchestrator.reconsider(make_request())
        second = orchestrator.reconsider(make_request())

        assert first.logs[0].message == "Reconsideration request received for market marathon-2026"
        assert second.logs[0].message == "Reconsideration request received for market marathon-2026"
        assert all(e.workflow == Workflow.RECONSIDERATION for e in first.logs)
        assert second.logs[0].seq > first.logs[-1].seq


class TestAdvisoryOnly:
    def test_service_reconsider_leaves_market_and_ledger_alone(self):
        service = make_service([analyze_json(), recon_judgment_json("OVERTURN", 80)])
        try:
            market = register_with_stakes(service, stakes=[("alice", 100, True)])

            result = service.reconsider(
                ReconsiderationRequest(
                    market_id=market.market_id,
                    original_outcome="YES",
                    evidence_cid="bafkreicertified",
                )
            )

            assert result.recommendation == Recommendation.OVERTURN
            assert service.get_market(market.market_id).status == market.status
            assert service.ledger.resolve_calls == []
            assert service.ledger.disburse_calls == []
            assert service.reconsiderations() == [result]
            prompt = mock_provider(service).calls[0]["messages"][-1]["content"]
            assert market.question in prompt
        finally:
            service.close()


class TestHelpers:
    @pytest.mark.parametrize(
        "recommendation,confidence,expected",
        [
            (Recommendation.OVERTURN, 80, -80),
            (Recommendation.ANNOTATE, 90, 20),
            (Recommendation.ANNOTATE, 30, -10),
            (Recommendation.ANNOTATE, 50, 0),
            (Recommendation.UPHOLD, 99, 0),
        ],
    )
    def test_confidence_delta(self, recommendation, confidence, expected):
        assert confidence_delta(recommendation, confidence) == expected

    def test_suggested_outcome(self):
        assert suggested_outcome(Recommendation.OVERTURN, "YES") == SuggestedOutcome.NO
        assert suggested_outcome(Recommendation.OVERTURN, "NO") == SuggestedOutcome.YES
        assert suggested_outcome(Recommendation.ANNOTATE, "YES") == SuggestedOutcome.UNCHANGED

    def test_request_normalizes_outcome(self):
        assert make_request(original_outcome=" no ").original_outcome == "NO"

    @pytest.mark.parametrize("outcome", ["MAYBE", "", "UNCHANGED"])
    def test_request_rejects_unknown_outcome(self, outcome):
        with pytest.raises(ValidationError):
            make_request(original_outcome=outcome)

    def test_guard_passes_supported_overturn(self):
        judgment = ReconsiderationJudgment(recommendation="OVERTURN", confidence_level=80)
        analysis = EvidenceAnalysis(credibility_score=80, contradicts_original=True)
        assert apply_overturn_guard(judgment, analysis, 80) is judgment

    def test_transitions(self):
        assert check_reconsideration_transition(
            ReconsiderationState.ANALYZE, ReconsiderationState.DONE
        ) == ReconsiderationState.DONE
        with pytest.raises(InvalidTransitionError):
            check_reconsideration_transition(ReconsiderationState.DONE, ReconsiderationState.JUDGE)
