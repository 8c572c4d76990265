"""
Verdict Judge Tests

YES / NO / UNCERTAIN rendering, iteration counting and the rule that the
judge never defaults to a terminal decision.
"""

from agents.context import AgentContext
from agents.judge import VerdictJudge
from core.schemas import UNVERIFIED_FACT, Decision, Fact

from fixtures.common import DEFAULT_QUESTION, judge_json, mock_provider

FACTS = [Fact(text="Official results list 2:04:31.", confidence=92)]


def run_judge(responses, facts=FACTS, iterations_so_far=0):
    ctx = AgentContext.create_mock(llm_responses=responses, market_id="m1")
    result = VerdictJudge(max_iterations=3).run(ctx, DEFAULT_QUESTION, facts, iterations_so_far)
    return ctx, result


class TestDecisions:
    def test_yes_verdict(self):
        ctx, result = run_judge([judge_json("YES", 85.4)])

        verdict = result.output
        assert result.success
        assert verdict.decision == Decision.YES
        assert verdict.confidence == 85
        assert verdict.iteration == 1
        assert verdict.key_evidence == ["Official results list the winning time as 2:04:31."]

    def test_decision_is_normalized(self):
        _, result = run_judge([judge_json(" no ", 70)])
        assert result.output.decision == Decision.NO

    def test_key_evidence_list_is_kept(self):
        _, result = run_judge([judge_json("YES", key_evidence=["a", "b"])])
        assert result.output.key_evidence == ["a", "b"]

    def test_verdict_logged(self):
        ctx, _ = run_judge([judge_json("YES", 85)])

        messages = [e.message for e in ctx.logs.for_market("m1")]
        assert messages[0] == "Evaluating 1 facts..."
        assert "VERDICT: YES" in messages
        assert "Confidence: 85%" in messages

    def test_iteration_follows_caller_count(self):
        _, result = run_judge([judge_json("UNCERTAIN", 20)], iterations_so_far=2)
        assert result.output.iteration == 3


class TestNeverDefaultsTerminal:
    def test_unknown_decision_is_uncertain(self):
        _, result = run_judge([judge_json("MAYBE", 90)])

        assert not result.success
        assert result.output.decision == Decision.UNCERTAIN
        assert result.output.reasoning == "Error in judgment process"
        assert result.output.iteration == 1

    def test_generation_failure_is_uncertain(self):
        ctx, result = run_judge([RuntimeError("provider down")], iterations_so_far=1)

        assert result.output.decision == Decision.UNCERTAIN
        assert result.output.iteration == 2
        assert any(e.message.startswith("Error rendering verdict") for e in ctx.logs.for_market("m1"))

    def test_no_facts_skips_model(self):
        ctx, result = run_judge([judge_json("YES")], facts=[])

        assert result.output.decision == Decision.UNCERTAIN
        assert result.metadata["skipped_model"] is True
        assert mock_provider(ctx).call_count == 0

    def test_unverified_facts_skip_model(self):
        ctx, result = run_judge([judge_json("YES")], facts=[UNVERIFIED_FACT])

        assert result.output.decision == Decision.UNCERTAIN
        assert mock_provider(ctx).call_count == 0


class TestPrompt:
    def test_prompt_lists_facts_and_iteration(self):
        ctx, _ = run_judge([judge_json("YES")], iterations_so_far=1)

        prompt = mock_provider(ctx).calls[0]["messages"][-1]["content"]
        assert "- Official results list 2:04:31. (confidence: 92%)" in prompt
        assert DEFAULT_QUESTION in prompt
