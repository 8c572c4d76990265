"""
Verdict Judge

Renders YES / NO / UNCERTAIN from the researcher's facts.

Never defaults to YES or NO: a generation failure, an output that does not
match the schema, or input with no usable evidence all produce UNCERTAIN.
Every pass increments the caller's iteration counter, failed passes included.
"""

from __future__ import annotations

from typing import Annotated, Any, Sequence, TYPE_CHECKING, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agents.base import AgentResult, BaseAgent
from core.llm import JUDGE_POLICY, decode_strict
from core.schemas import Decision, Fact, OracleException, Sentiment, Speaker, Verdict

from .prompts import SYSTEM_PROMPT, USER_PROMPT_TEMPLATE

if TYPE_CHECKING:
    from agents.context import AgentContext

POSITIVE_THRESHOLD = 70


class JudgeResponse(BaseModel):
    """Wire shape of the model's answer."""

    model_config = ConfigDict(extra="ignore")

    decision: Decision
    reasoning: str = ""
    confidence: Annotated[float, Field(ge=0, le=100)] = 0
    key_evidence: Union[str, list[str]] = ""

    @field_validator("decision", mode="before")
    @classmethod
    def normalize_decision(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v


class VerdictJudge(BaseAgent):
    """
    Judge node of the resolution workflow.
    """

    name = "VerdictJudge"
    speaker = Speaker.JUDGE
    failure_label = "Error rendering verdict"

    def __init__(self, *, max_iterations: int = 3) -> None:
        self.max_iterations = max_iterations

    def build_prompt(self, question: str, facts: Sequence[Fact], iteration: int) -> str:
        lines = "\n".join(f"- {f.text} (confidence: {f.confidence}%)" for f in facts)
        return USER_PROMPT_TEMPLATE.format(
            question=question,
            facts=lines or "- (none)",
            iteration=iteration,
            max_iterations=self.max_iterations,
        )

    def run(
        self,
        ctx: "AgentContext",
        question: str,
        facts: Sequence[Fact],
        iterations_so_far: int = 0,
    ) -> AgentResult:
        """
        Judge ``facts``.

        Returns:
            AgentResult with a Verdict whose ``iteration`` is
            ``iterations_so_far + 1``
        """
        iteration = iterations_so_far + 1
        ctx.emit(Speaker.JUDGE, f"Evaluating {len(facts)} facts...")

        if not facts or all(f.confidence == 0 for f in facts):
            verdict = Verdict.uncertain("No usable evidence to judge", iteration)
            self._emit_verdict(ctx, verdict)
            return AgentResult(output=verdict, metadata={"agent": self.name, "skipped_model": True})

        if ctx.generation is None:
            return self._fail(ctx, "No generation client configured", iteration)

        try:
            raw = ctx.generation.generate(
                self.build_prompt(question, facts, iteration),
                system_prompt=SYSTEM_PROMPT,
                policy=JUDGE_POLICY,
            )
            response = decode_strict(raw, JudgeResponse)
        except OracleException as e:
            return self._fail(ctx, e.message, iteration)
        except Exception as e:
            return self._fail(ctx, str(e), iteration)

        key_evidence = response.key_evidence
        if isinstance(key_evidence, str):
            key_evidence = [key_evidence] if key_evidence else []

        verdict = Verdict(
            decision=response.decision,
            reasoning=response.reasoning,
            confidence=round(response.confidence),
            key_evidence=key_evidence,
            iteration=iteration,
        )
        self._emit_verdict(ctx, verdict)
        return AgentResult(
            output=verdict,
            metadata={
                "agent": self.name,
                "decision": verdict.decision.value,
                "confidence": verdict.confidence,
                "iteration": iteration,
            },
        )

    @staticmethod
    def _emit_verdict(ctx: "AgentContext", verdict: Verdict) -> None:
        ctx.emit(
            Speaker.JUDGE,
            f"VERDICT: {verdict.decision.value}",
            Sentiment.NEUTRAL if verdict.decision == Decision.UNCERTAIN else Sentiment.POSITIVE,
        )
        ctx.emit(
            Speaker.JUDGE,
            f"Confidence: {verdict.confidence}%",
            Sentiment.POSITIVE if verdict.confidence > POSITIVE_THRESHOLD else Sentiment.NEUTRAL,
        )
        if verdict.key_evidence:
            ctx.emit(Speaker.JUDGE, f"Key Evidence: {verdict.key_evidence[0][:100]}")

    def _fail(self, ctx: "AgentContext", error: str, iteration: int) -> AgentResult:
        return self.fail(
            ctx, error, Verdict.uncertain("Error in judgment process", iteration), iteration=iteration
        )
