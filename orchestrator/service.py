"""
Oracle Service

Facade wiring the stores, agents, orchestrators and adapters together. The
HTTP API and the CLI talk to this class only.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from datetime import datetime
from typing import Any, Callable, Optional, Sequence, Union

from agents.context import AgentContext
from core.audit import AuditLog
from core.config import RuntimeConfig, get_default_config
from core.crypto.hashing import local_cid
from core.http import HttpClient
from core.ledger import InMemoryLedger, LedgerClient, create_ledger, derive_market_address
from core.schemas.errors import ContentStoreError, LedgerError, MarketNotFoundError
from core.schemas.evidence import EvidenceItem
from core.schemas.logs import LogEntry, Sentiment, Speaker, Workflow
from core.schemas.market import Market, MarketStatus
from core.schemas.reconsideration import ReconsiderationRequest, ReconsiderationResult
from core.schemas.stake import DistributionResult
from core.storage import ContentStore, create_content_store
from core.store import LogStore, MarketStore

from orchestrator.anchoring import TranscriptAnchorer
from orchestrator.reconsideration import ReconsiderationOrchestrator
from orchestrator.resolution import ResolutionOrchestrator
from orchestrator.scheduler import ResolutionScheduler, ScheduledResolution
from orchestrator.settlement import RewardDistributor, SettlementExecutor
from orchestrator.side_effects import ProofCertificateEffect, SideEffectDispatcher
from orchestrator.state_machine import ResolutionRun

logger = logging.getLogger(__name__)

# Placeholder CID prefix for evidence that could not be pinned
EVIDENCE_CID_PREFIX = "bafkreie"


class OracleService:
    """
    Usage:
        service = OracleService.from_config(RuntimeConfig.from_env())
        service.register_market("m1", "Will it rain in Paris tomorrow?")
        run = service.resolve("m1")
    """

    def __init__(
        self,
        config: Optional[RuntimeConfig] = None,
        *,
        ctx: Optional[AgentContext] = None,
        ledger: Optional[LedgerClient] = None,
        content_store: Optional[ContentStore] = None,
        markets: Optional[MarketStore] = None,
        logs: Optional[LogStore] = None,
        audit: Optional[AuditLog] = None,
        scheduler: Optional[ResolutionScheduler] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config or get_default_config()
        self.logs = logs or (ctx.logs if ctx else LogStore(window=self.config.resolution.log_window))
        self.markets = markets or MarketStore()
        self.http = HttpClient.from_config(self.config.http, proxy=self.config.proxy)
        self.ledger = ledger or create_ledger(self.config.ledger, http=self.http)
        self.content_store = content_store or create_content_store(self.config.storage, http=self.http)
        self.audit = audit or AuditLog(self.config.settlement.audit_log_path)
        self.ctx = ctx or AgentContext.create(self.config, logs=self.logs, sleep=sleep)

        distributor = RewardDistributor(
            self.ledger,
            self.logs,
            self.audit,
            payout_multiplier=self.config.settlement.payout_multiplier,
            disburse_delay_s=self.config.settlement.disburse_delay_s,
            sleep=sleep,
        )
        self.settlement = SettlementExecutor(
            self.ledger, self.markets, self.logs, self.audit, distributor
        )
        self.anchorer = TranscriptAnchorer(self.content_store, self.logs, audit=self.audit)
        self.side_effects = SideEffectDispatcher(
            self.logs, [ProofCertificateEffect(self.content_store)]
        )
        self.resolution = ResolutionOrchestrator(
            self.ctx,
            self.markets,
            self.anchorer,
            self.settlement,
            side_effects=self.side_effects,
            config=self.config.resolution,
        )
        self.reconsideration = ReconsiderationOrchestrator(
            self.ctx, config=self.config.reconsideration
        )
        self.scheduler = scheduler or ResolutionScheduler(self.resolve)
        self._reconsiderations: deque[ReconsiderationResult] = deque(
            maxlen=self.config.reconsideration.log_window
        )
        self._recon_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: RuntimeConfig, **kwargs: Any) -> "OracleService":
        return cls(config, **kwargs)

    # -- markets -------------------------------------------------------------

    def register_market(
        self,
        market_id: str,
        question: str,
        *,
        source_url: Optional[str] = None,
        creator: Optional[str] = None,
        ledger_address: Optional[str] = None,
    ) -> Market:
        """
        Register a market with the oracle.

        The in-memory ledger also gets a matching open market account.
        """
        address = ledger_address or derive_market_address(market_id, self.config.ledger.program_id)
        market = self.markets.create(
            Market(
                market_id=market_id,
                ledger_address=address,
                question=question,
                source_url=source_url,
                creator=creator,
            )
        )
        if isinstance(self.ledger, InMemoryLedger):
            self.ledger.open_market(address)
        self.logs.append(
            Speaker.SYSTEM, f"Market registered: {question[:80]}", market_id=market_id
        )
        return market

    def get_market(self, market_id: str) -> Market:
        return self.markets.get(market_id)

    def list_markets(self, status: Optional[MarketStatus] = None) -> list[Market]:
        return self.markets.list(status)

    def refresh_stakes(self, market_id: str) -> Market:
        """Recompute stake totals from the ledger. Ledger errors leave totals as they were."""
        market = self.markets.get(market_id)
        try:
            stakes = self.ledger.query_stakes(market.ledger_address)
        except LedgerError as e:
            logger.warning("Could not read stakes for %s: %s", market_id, e)
            return market
        yes_total = sum(s.amount for s in stakes if s.direction)
        no_total = sum(s.amount for s in stakes if not s.direction)
        return self.markets.update_stakes(market_id, yes_total, no_total)

    def dispute(self, market_id: str) -> Market:
        market = self.markets.mark_disputed(market_id)
        self.logs.append(
            Speaker.SYSTEM,
            "Resolution disputed; flagged for review",
            sentiment=Sentiment.NEGATIVE,
            market_id=market_id,
        )
        return market

    # -- evidence ------------------------------------------------------------

    def submit_evidence(
        self,
        market_id: str,
        *,
        cid: Optional[str] = None,
        content: Optional[bytes] = None,
        description: str = "",
        submitter: str = "anonymous",
        filename: Optional[str] = None,
    ) -> EvidenceItem:
        """
        Attach evidence to a market. Raw ``content`` is pinned first; when the
        content store is unavailable a local placeholder CID is used.
        """
        if not self.markets.exists(market_id):
            raise MarketNotFoundError(market_id)
        if cid is None:
            if content is None:
                raise ValueError("Either cid or content is required")
            try:
                cid = self.content_store.pin(content, name=filename or "evidence.bin")
            except ContentStoreError as e:
                cid = local_cid(content, prefix=EVIDENCE_CID_PREFIX)
                logger.warning("Evidence pin failed for %s, using %s: %s", market_id, cid, e.message)

        item = EvidenceItem(
            cid=cid,
            description=description,
            submitter=submitter,
            filename=filename,
        )
        self.markets.append_evidence(market_id, item)
        self.logs.append(
            Speaker.SYSTEM,
            f"New evidence submitted by {submitter}: {description[:60] or cid}",
            sentiment=Sentiment.POSITIVE,
            market_id=market_id,
        )
        return item

    # -- resolution ----------------------------------------------------------

    def resolve(
        self,
        market_id: str,
        *,
        question: Optional[str] = None,
        evidence: Sequence[Union[EvidenceItem, str]] = (),
    ) -> ResolutionRun:
        run = self.resolution.resolve(market_id, question=question, evidence=evidence)
        if run.committed:
            self.refresh_stakes(market_id)
        return run

    def schedule_resolution(
        self,
        market_id: str,
        *,
        run_at: Optional[datetime] = None,
        delay_s: Optional[float] = None,
    ) -> ScheduledResolution:
        if not self.markets.exists(market_id):
            raise MarketNotFoundError(market_id)
        self.scheduler.start()
        return self.scheduler.schedule(market_id, run_at=run_at, delay_s=delay_s)

    def cancel_scheduled(self, market_id: str) -> bool:
        return self.scheduler.cancel(market_id)

    def distribute_rewards(self, market_id: str) -> Optional[DistributionResult]:
        """
        Re-run reward distribution for a resolved market. Winners already
        paid are skipped.
        """
        market = self.markets.get(market_id)
        if market.status != MarketStatus.RESOLVED:
            raise ValueError(f"Market {market_id} is not resolved (status={market.status.value})")
        return self.settlement.distribute(market_id, market.ledger_address, market.outcome)

    def distribution(self, market_id: str) -> Optional[DistributionResult]:
        return self.markets.get(market_id).last_distribution

    # -- reconsideration -----------------------------------------------------

    def reconsider(self, request: ReconsiderationRequest) -> ReconsiderationResult:
        market = self.markets.find(request.market_id)
        if market is not None:
            updates: dict[str, Any] = {}
            if not request.ledger_address:
                updates["ledger_address"] = market.ledger_address
            if not request.question:
                updates["question"] = market.question
            if updates:
                request = request.model_copy(update=updates)

        result = self.reconsideration.reconsider(request)
        with self._recon_lock:
            self._reconsiderations.append(result)
        return result

    def reconsiderations(self, limit: Optional[int] = None) -> list[ReconsiderationResult]:
        with self._recon_lock:
            results = list(self._reconsiderations)
        return results[-limit:] if limit else results

    # -- observability -------------------------------------------------------

    def recent_logs(self, limit: Optional[int] = None, workflow: Optional[Workflow] = None) -> list[LogEntry]:
        return self.logs.recent(limit, workflow=workflow)

    def market_logs(self, market_id: str, limit: Optional[int] = None) -> list[LogEntry]:
        if not self.markets.exists(market_id):
            raise MarketNotFoundError(market_id)
        return self.logs.for_market(market_id, limit)

    def stats(self) -> dict[str, Any]:
        stats = self.markets.stats()
        stats["scheduled_resolutions"] = len(self.scheduler.pending())
        stats["reconsiderations"] = len(self.reconsiderations())
        stats["log_entries"] = len(self.logs)
        return stats

    def health(self) -> dict[str, Any]:
        return {
            "status": "ok",
            "llm_provider": self.config.llm.provider,
            "llm_configured": self.ctx.generation is not None,
            "ledger_backend": self.config.ledger.backend,
            "storage_backend": self.config.storage.backend,
            "scheduler_running": self.scheduler.running,
        }

    def close(self) -> None:
        self.scheduler.shutdown()
        self.http.close()
