"""
Reconsideration Evidence Analyzer

Analyze step: what does the newly submitted evidence say, how credible is
it, and does it contradict the settled outcome?
"""

from __future__ import annotations

from typing import Annotated, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from agents.base import AgentResult, BaseAgent
from core.llm import RESEARCH_POLICY, decode_strict
from core.schemas import (
    EvidenceAnalysis,
    Fact,
    OracleException,
    ReconsiderationRequest,
    Sentiment,
    Speaker,
)

from .prompts import ANALYZE_PROMPT_TEMPLATE, ANALYZE_SYSTEM_PROMPT

if TYPE_CHECKING:
    from agents.context import AgentContext


class AnalyzeResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    facts: list[str]
    contradicts_original: bool = False
    credibility_score: Annotated[float, Field(ge=0, le=100)] = 0
    warrants_reconsideration: bool = False
    analysis: str = ""


def failed_analysis(reason: str) -> EvidenceAnalysis:
    return EvidenceAnalysis(
        facts=[Fact(text="Unable to analyze evidence", confidence=0)],
        analysis=f"Analysis failed: {reason}",
        failed=True,
    )


class ReconsiderationAnalyzer(BaseAgent):
    name = "ReconsiderationAnalyzer"
    speaker = Speaker.RESEARCHER
    failure_label = "Evidence analysis error"

    def run(self, ctx: "AgentContext", request: ReconsiderationRequest) -> AgentResult:
        ctx.emit(Speaker.RESEARCHER, "Analyzing new evidence for reconsideration...")

        if ctx.generation is None:
            return self._fail(ctx, "No generation client configured")

        prompt = ANALYZE_PROMPT_TEMPLATE.format(
            market_id=request.market_id,
            question=request.question or "(not provided)",
            original_outcome=request.original_outcome,
            original_reasoning=request.original_reasoning or "(not provided)",
            evidence_cid=request.evidence_cid,
            evidence_description=request.evidence_description or "(no description)",
            submitter=request.submitter,
        )
        try:
            raw = ctx.generation.generate(
                prompt, system_prompt=ANALYZE_SYSTEM_PROMPT, policy=RESEARCH_POLICY
            )
            response = decode_strict(raw, AnalyzeResponse)
        except OracleException as e:
            return self._fail(ctx, e.message)
        except Exception as e:
            return self._fail(ctx, str(e))

        credibility = round(response.credibility_score)
        analysis = EvidenceAnalysis(
            facts=[Fact(text=text, confidence=credibility) for text in response.facts],
            contradicts_original=response.contradicts_original,
            credibility_score=credibility,
            warrants_reconsideration=response.warrants_reconsideration,
            analysis=response.analysis,
        )
        ctx.emit(
            Speaker.RESEARCHER,
            f"Found {len(analysis.facts)} new facts. Credibility: {credibility}%",
            Sentiment.POSITIVE if analysis.warrants_reconsideration else Sentiment.NEUTRAL,
        )
        return AgentResult(
            output=analysis,
            metadata={"agent": self.name, "fact_count": len(analysis.facts)},
        )

    def _fail(self, ctx: "AgentContext", error: str) -> AgentResult:
        return self.fail(ctx, error, failed_analysis(error))
