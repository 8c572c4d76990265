"""
Resolution Orchestrator

Drives one market through the resolution state machine:

    RESEARCH -> JUDGE -> (RESEARCH | SETTLE) -> DONE

The researcher and judge alternate until the judge returns a terminal
decision or the iteration cap is reached. SETTLE anchors the transcript and
commits the outcome; an UNCERTAIN decision is settled as "unresolved" with
no ledger action.

Only one workflow may own a market at a time (``MarketStore.begin_resolution``).
Whatever happens inside the workflow, the market leaves it either Resolved
or back in Open.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union, TYPE_CHECKING

from agents.context import AgentContext
from agents.judge import VerdictJudge
from agents.researcher import EvidenceAnalyzer, ResearchFindings, fetch_source_content
from core.config.runtime import ResolutionConfig
from core.schemas.evidence import EvidenceItem
from core.schemas.logs import Sentiment, Speaker, Workflow
from core.schemas.market import Market, MarketStatus
from core.schemas.verdict import Verdict

from orchestrator.anchoring import TranscriptAnchorer, build_transcript
from orchestrator.settlement import SettlementExecutor
from orchestrator.side_effects import SideEffectDispatcher
from orchestrator.state_machine import (
    STATE_MARKET_STATUS,
    ResolutionRun,
    ResolutionState,
    SettlementStatus,
    next_after_judge,
)

if TYPE_CHECKING:
    from core.store.markets import MarketStore

logger = logging.getLogger(__name__)


def merge_evidence(
    stored: Sequence[EvidenceItem],
    submitted: Sequence[Union[EvidenceItem, str]],
) -> list[EvidenceItem]:
    """
    Stored evidence first, then trigger-time evidence not already stored.

    Bare strings are treated as CIDs / URLs submitted with the trigger.
    """
    merged = list(stored)
    seen = {item.cid for item in merged}
    for item in submitted:
        if isinstance(item, str):
            item = EvidenceItem(cid=item, description="Evidence submitted with resolution request")
        if item.cid not in seen:
            merged.append(item)
            seen.add(item.cid)
    return merged


class ResolutionOrchestrator:
    """
    Runs resolution workflows.

    Usage:
        orchestrator = ResolutionOrchestrator(ctx, markets, anchorer, settlement)
        run = orchestrator.resolve("market-1")
    """

    def __init__(
        self,
        ctx: AgentContext,
        markets: "MarketStore",
        anchorer: TranscriptAnchorer,
        settlement: SettlementExecutor,
        *,
        side_effects: Optional[SideEffectDispatcher] = None,
        config: Optional[ResolutionConfig] = None,
        researcher: Optional[EvidenceAnalyzer] = None,
        judge: Optional[VerdictJudge] = None,
    ) -> None:
        self.ctx = ctx
        self.markets = markets
        self.anchorer = anchorer
        self.settlement = settlement
        self.side_effects = side_effects
        self.config = config or ResolutionConfig()
        self.researcher = researcher or EvidenceAnalyzer()
        self.judge = judge or VerdictJudge(max_iterations=self.config.max_iterations)

    def resolve(
        self,
        market_id: str,
        *,
        question: Optional[str] = None,
        evidence: Sequence[Union[EvidenceItem, str]] = (),
    ) -> ResolutionRun:
        """
        Resolve a market end to end.

        Raises:
            MarketNotFoundError: unknown market
            ResolutionInProgressError: another workflow owns the market
            MarketAlreadyResolvedError: the market is already settled
        """
        market = self.markets.begin_resolution(market_id)
        ctx = self.ctx.for_market(market_id, Workflow.RESOLUTION)

        run = ResolutionRun(
            market_id=market_id,
            question=question or market.question,
            evidence=merge_evidence(market.evidence, evidence),
            started_at=ctx.now(),
        )
        ctx.emit(Speaker.SYSTEM, f"Starting resolution for market {market_id}")
        logger.info("Resolution started for %s (%d evidence items)", market_id, len(run.evidence))

        try:
            if self.config.fetch_source and market.source_url:
                run.source_content = fetch_source_content(
                    ctx, market.source_url, self.config.source_content_chars
                )
            while not run.done:
                if run.state == ResolutionState.RESEARCH:
                    self._research(ctx, run)
                    run.advance(ResolutionState.JUDGE)
                elif run.state == ResolutionState.JUDGE:
                    run.advance(self._judge(ctx, run))
                elif run.state == ResolutionState.SETTLE:
                    self._settle(ctx, run)
                    run.advance(ResolutionState.DONE)
        except Exception as e:
            logger.exception("Resolution workflow failed for %s", market_id)
            run.add_error(str(e))
            ctx.emit(Speaker.SYSTEM, f"Resolution error: {e}", Sentiment.NEGATIVE)
            if run.settlement is None:
                run.settlement = SettlementStatus.FAILED
        finally:
            self._release(market_id, run)
            run.finished_at = ctx.now()

        ctx.emit(
            Speaker.SYSTEM,
            f"Resolution finished: {run.decision.value} after {run.iterations} iteration(s) "
            f"({run.settlement.value if run.settlement else 'no settlement'})",
        )
        return run

    # -- nodes ---------------------------------------------------------------

    def _enter(self, market_id: str, state: ResolutionState) -> None:
        self.markets.set_status(market_id, STATE_MARKET_STATUS[state])

    def _research(self, ctx: AgentContext, run: ResolutionRun) -> None:
        self._enter(run.market_id, ResolutionState.RESEARCH)
        market = self.markets.get(run.market_id)
        try:
            result = self.researcher.run(
                ctx,
                run.question,
                evidence=run.evidence,
                source_content=run.source_content,
                source_url=market.source_url,
            )
            findings: ResearchFindings = result.output
        except Exception as e:
            logger.exception("Researcher raised for %s", run.market_id)
            findings = ResearchFindings.unverified(str(e))
        if findings.degraded:
            run.add_error(f"research: {findings.summary}")
        run.facts = list(findings.facts)

    def _judge(self, ctx: AgentContext, run: ResolutionRun) -> ResolutionState:
        self._enter(run.market_id, ResolutionState.JUDGE)
        try:
            verdict: Verdict = self.judge.run(ctx, run.question, run.facts, run.iterations).output
        except Exception:
            logger.exception("Judge raised for %s", run.market_id)
            verdict = Verdict.uncertain("Error in judgment process", run.iterations + 1)
        run.iterations = verdict.iteration
        run.verdicts.append(verdict)

        target = next_after_judge(verdict, self.config.max_iterations)
        if target == ResolutionState.RESEARCH:
            ctx.emit(
                Speaker.JUDGE,
                f"Uncertain after iteration {run.iterations}/{self.config.max_iterations}, "
                "requesting further research",
            )
        return target

    def _settle(self, ctx: AgentContext, run: ResolutionRun) -> None:
        market = self.markets.get(run.market_id)
        if market.status == MarketStatus.RESOLVED:
            run.settlement = SettlementStatus.REFUSED
            ctx.emit(Speaker.EXECUTOR, "Settlement refused: market already resolved", Sentiment.NEGATIVE)
            return

        verdict = run.verdict
        if verdict is None or not verdict.decision.is_terminal:
            run.settlement = self.settlement.settle(
                run.market_id, run.decision, anchor=None
            ).status
            return

        self._enter(run.market_id, ResolutionState.SETTLE)
        ctx.emit(Speaker.EXECUTOR, f"Processing resolution for market {run.market_id}...")

        bundle = build_transcript(
            market,
            run.facts,
            verdict,
            ctx.logs,
            question=run.question,
            evidence=run.evidence,
            log_window=self.config.transcript_log_window,
            timestamp=ctx.now(),
        )
        run.anchor = self.anchorer.anchor(bundle)

        outcome = self.settlement.settle(run.market_id, verdict.decision, run.anchor)
        run.settlement = outcome.status
        run.outcome = outcome.outcome
        run.signature = outcome.signature
        run.distribution = outcome.distribution
        if outcome.error:
            run.add_error(outcome.error)

        if outcome.status == SettlementStatus.COMMITTED and self.side_effects is not None:
            self.side_effects.dispatch(self.markets.get(run.market_id), run.anchor)

    def _release(self, market_id: str, run: ResolutionRun) -> None:
        """Leave the market Resolved or back in Open."""
        market: Market = self.markets.get(market_id)
        if not market.status.in_flight:
            return
        if run.settlement == SettlementStatus.ALREADY_RESOLVED and market.status == MarketStatus.EXECUTING:
            self.markets.set_status(market_id, MarketStatus.RESOLVED)
            return
        self.markets.set_status(market_id, MarketStatus.OPEN)
