"""
Reconsideration Orchestrator

Advisory review of a settled market in light of new evidence:

    ANALYZE -> JUDGE -> DONE

The result is a recommendation (UPHOLD / ANNOTATE / OVERTURN) for a human
reviewer. Nothing here writes to the ledger or the market store.

Guard rails:
- Analyze failed or found no facts: UPHOLD, the judge model is not consulted
- OVERTURN needs credibility >= the configured minimum AND a direct
  contradiction of the original outcome; otherwise it is downgraded
"""

from __future__ import annotations

import logging
import secrets
from typing import Optional

from agents.context import AgentContext
from agents.reconsideration import (
    ReconsiderationAnalyzer,
    ReconsiderationJudge,
    ReconsiderationJudgment,
    failed_analysis,
)
from core.config.runtime import ReconsiderationConfig
from core.schemas.logs import Sentiment, Speaker, Workflow
from core.schemas.reconsideration import (
    EvidenceAnalysis,
    Recommendation,
    ReconsiderationRequest,
    ReconsiderationResult,
    SuggestedOutcome,
)

from orchestrator.state_machine import ReconsiderationState, check_reconsideration_transition

logger = logging.getLogger(__name__)


def confidence_delta(recommendation: Recommendation, confidence: float) -> int:
    """How far the recommendation moves confidence in the original outcome."""
    if recommendation == Recommendation.OVERTURN:
        return -round(confidence)
    if recommendation == Recommendation.ANNOTATE:
        return round((confidence - 50) / 2)
    return 0


def suggested_outcome(recommendation: Recommendation, original_outcome: str) -> SuggestedOutcome:
    if recommendation != Recommendation.OVERTURN:
        return SuggestedOutcome.UNCHANGED
    return SuggestedOutcome.NO if original_outcome == "YES" else SuggestedOutcome.YES


def apply_overturn_guard(
    judgment: ReconsiderationJudgment,
    analysis: EvidenceAnalysis,
    min_credibility: int,
) -> ReconsiderationJudgment:
    """Downgrade an OVERTURN the analysis does not support."""
    if judgment.recommendation != Recommendation.OVERTURN:
        return judgment
    if analysis.credibility_score >= min_credibility and analysis.contradicts_original:
        return judgment
    downgraded = (
        Recommendation.ANNOTATE if analysis.warrants_reconsideration else Recommendation.UPHOLD
    )
    note = judgment.annotation_note
    if downgraded == Recommendation.ANNOTATE and not note:
        note = judgment.reasoning
    return judgment.model_copy(update={"recommendation": downgraded, "annotation_note": note})


def new_request_id(timestamp_ms: int) -> str:
    return f"recon_{timestamp_ms}_{secrets.token_hex(4)}"


class ReconsiderationOrchestrator:
    """
    Runs reconsideration workflows.

    ``ctx.generation`` is re-paced with the reconsideration pacing delay.
    """

    def __init__(
        self,
        ctx: AgentContext,
        *,
        config: Optional[ReconsiderationConfig] = None,
        analyzer: Optional[ReconsiderationAnalyzer] = None,
        judge: Optional[ReconsiderationJudge] = None,
    ) -> None:
        self.config = config or ReconsiderationConfig()
        if ctx.generation is not None:
            ctx = ctx.with_generation(ctx.generation.with_pacing(self.config.pacing_delay_s))
        self.ctx = ctx
        self.analyzer = analyzer or ReconsiderationAnalyzer()
        self.judge = judge or ReconsiderationJudge()

    def reconsider(self, request: ReconsiderationRequest) -> ReconsiderationResult:
        ctx = self.ctx.for_market(request.market_id, Workflow.RECONSIDERATION)
        started = ctx.now()
        start = ctx.emit(Speaker.SYSTEM, f"Reconsideration request received for market {request.market_id}")
        logger.info("Reconsideration requested for %s by %s", request.market_id, request.submitter)

        state = ReconsiderationState.ANALYZE
        analysis = self._analyze(ctx, request)

        if analysis.failed or not analysis.facts:
            state = check_reconsideration_transition(state, ReconsiderationState.DONE)
            reason = "Evidence analysis failed" if analysis.failed else "No new facts found in the evidence"
            judgment = ReconsiderationJudgment.uphold(f"{reason}; original decision stands.")
            ctx.emit(Speaker.JUDGE, f"{reason}. Defaulting to UPHOLD.")
        else:
            state = check_reconsideration_transition(state, ReconsiderationState.JUDGE)
            judgment = self._judge(ctx, request, analysis)
            state = check_reconsideration_transition(state, ReconsiderationState.DONE)

        if judgment.recommendation == Recommendation.ANNOTATE and judgment.annotation_note:
            ctx.emit(Speaker.JUDGE, f"Annotation: {judgment.annotation_note}")

        result = ReconsiderationResult(
            request_id=new_request_id(int(started.timestamp() * 1000)),
            market_id=request.market_id,
            recommendation=judgment.recommendation,
            confidence_delta=confidence_delta(judgment.recommendation, judgment.confidence_level),
            new_outcome=suggested_outcome(judgment.recommendation, request.original_outcome),
            analysis=analysis,
            reasoning=judgment.reasoning,
            annotation=(
                judgment.annotation_note
                if judgment.recommendation == Recommendation.ANNOTATE
                else None
            ),
            logs=[
                e for e in ctx.logs.for_market(request.market_id, workflow=Workflow.RECONSIDERATION)
                if e.seq >= start.seq
            ],
            timestamp=started,
        )
        ctx.emit(
            Speaker.SYSTEM,
            f"Reconsideration complete: {result.recommendation.value} "
            f"(confidence delta {result.confidence_delta:+d})",
            Sentiment.NEGATIVE if result.recommendation == Recommendation.OVERTURN else Sentiment.NEUTRAL,
        )
        return result

    def _analyze(self, ctx: AgentContext, request: ReconsiderationRequest) -> EvidenceAnalysis:
        try:
            return self.analyzer.run(ctx, request).output
        except Exception as e:
            logger.exception("Reconsideration analyzer raised for %s", request.market_id)
            return failed_analysis(str(e))

    def _judge(
        self,
        ctx: AgentContext,
        request: ReconsiderationRequest,
        analysis: EvidenceAnalysis,
    ) -> ReconsiderationJudgment:
        try:
            judgment = self.judge.run(ctx, request, analysis).output
        except Exception:
            logger.exception("Reconsideration judge raised for %s", request.market_id)
            judgment = ReconsiderationJudgment.uphold("Error in judgment process")

        guarded = apply_overturn_guard(judgment, analysis, self.config.overturn_min_credibility)
        if guarded.recommendation != judgment.recommendation:
            ctx.emit(
                Speaker.JUDGE,
                f"OVERTURN not supported (credibility {analysis.credibility_score}%, "
                f"contradicts original: {analysis.contradicts_original}); "
                f"downgraded to {guarded.recommendation.value}",
            )
        return guarded
