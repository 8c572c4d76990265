"""
Reconsideration Judge

Judge step: UPHOLD, ANNOTATE or OVERTURN. Defaults to UPHOLD on any
failure. Guard rails on OVERTURN are applied by the orchestrator.
"""

from __future__ import annotations

from typing import Annotated, Any, Optional, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agents.base import AgentResult, BaseAgent
from core.llm import JUDGE_POLICY, decode_strict
from core.schemas import (
    EvidenceAnalysis,
    OracleException,
    Recommendation,
    ReconsiderationRequest,
    Sentiment,
    Speaker,
)

from .prompts import JUDGE_PROMPT_TEMPLATE, JUDGE_SYSTEM_PROMPT

if TYPE_CHECKING:
    from agents.context import AgentContext


class ReconsiderationJudgment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    recommendation: Recommendation = Recommendation.UPHOLD
    confidence_level: Annotated[float, Field(ge=0, le=100)] = 50
    reasoning: str = ""
    annotation_note: Optional[str] = None

    @field_validator("recommendation", mode="before")
    @classmethod
    def normalize(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v

    @classmethod
    def uphold(cls, reasoning: str, confidence: float = 0) -> "ReconsiderationJudgment":
        return cls(
            recommendation=Recommendation.UPHOLD,
            confidence_level=confidence,
            reasoning=reasoning,
        )


class ReconsiderationJudge(BaseAgent):
    name = "ReconsiderationJudge"
    speaker = Speaker.JUDGE
    failure_label = "Judgment error, defaulting to UPHOLD"

    def run(
        self,
        ctx: "AgentContext",
        request: ReconsiderationRequest,
        analysis: EvidenceAnalysis,
    ) -> AgentResult:
        ctx.emit(Speaker.JUDGE, "Evaluating reconsideration request...")

        if ctx.generation is None:
            return self._fail(ctx, "No generation client configured")

        prompt = JUDGE_PROMPT_TEMPLATE.format(
            original_outcome=request.original_outcome,
            original_reasoning=request.original_reasoning or "(not provided)",
            facts="\n".join(f"- {f.text}" for f in analysis.facts),
            credibility=analysis.credibility_score,
            contradicts="yes" if analysis.contradicts_original else "no",
            analysis=analysis.analysis or "(none)",
        )
        try:
            raw = ctx.generation.generate(
                prompt, system_prompt=JUDGE_SYSTEM_PROMPT, policy=JUDGE_POLICY
            )
            judgment = decode_strict(raw, ReconsiderationJudgment)
        except OracleException as e:
            return self._fail(ctx, e.message)
        except Exception as e:
            return self._fail(ctx, str(e))

        ctx.emit(
            Speaker.JUDGE,
            f"Verdict: {judgment.recommendation.value}. Confidence: {round(judgment.confidence_level)}%",
            Sentiment.NEGATIVE if judgment.recommendation == Recommendation.OVERTURN else Sentiment.POSITIVE,
        )
        return AgentResult(
            output=judgment,
            metadata={"agent": self.name, "recommendation": judgment.recommendation.value},
        )

    def _fail(self, ctx: "AgentContext", error: str) -> AgentResult:
        return self.fail(ctx, error, ReconsiderationJudgment.uphold("Error in judgment process"))
