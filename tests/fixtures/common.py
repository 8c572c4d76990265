"""
Common test fixtures shared by all modules.

Provides factory functions for the oracle's building blocks:
- canned model outputs (research, judge, reconsideration)
- RuntimeConfig with zero delays and the mock provider
- OracleService over in-memory ledger, content store and audit log
- FlakyLedger for scripting disbursement failures
"""

import json
from typing import Any, Optional, Sequence

from agents.context import AgentContext
from core.audit import AuditLog
from core.config import (
    GenerationConfig,
    LLMConfig,
    ReconsiderationConfig,
    ResolutionConfig,
    RuntimeConfig,
    SettlementConfig,
)
from core.ledger import InMemoryLedger
from core.schemas.errors import LedgerError, LedgerErrorKind
from core.storage import InMemoryContentStore
from orchestrator.service import OracleService


DEFAULT_QUESTION = "Will the Paris marathon on 2026-04-05 be won in under 2h05m?"


# =============================================================================
# Model output factories
# =============================================================================

def research_json(
    facts: Optional[Sequence[str]] = None,
    confidences: Optional[Sequence[Optional[float]]] = None,
    summary: str = "Official timing results reviewed.",
) -> str:
    if facts is None:
        facts = [
            "Official results list the winning time as 2:04:31.",
            "The race was held on 2026-04-05 as scheduled.",
        ]
    payload: dict[str, Any] = {"facts": list(facts), "sources": [], "summary": summary}
    if confidences is None:
        confidences = [90] * len(facts)
    payload["confidences"] = list(confidences)
    return json.dumps(payload)


def judge_json(
    decision: str = "YES",
    confidence: float = 85,
    reasoning: str = "Official results confirm the winning time.",
    key_evidence: Any = "Official results list the winning time as 2:04:31.",
) -> str:
    return json.dumps({
        "decision": decision,
        "reasoning": reasoning,
        "confidence": confidence,
        "key_evidence": key_evidence,
    })


def analyze_json(
    facts: Optional[Sequence[str]] = None,
    contradicts: bool = True,
    credibility: float = 90,
    warrants: bool = True,
    analysis: str = "The submitted document is the federation's certified result.",
) -> str:
    return json.dumps({
        "facts": list(facts) if facts is not None else ["Certified result shows 2:05:12."],
        "contradicts_original": contradicts,
        "credibility_score": credibility,
        "warrants_reconsideration": warrants,
        "analysis": analysis,
    })


def recon_judgment_json(
    recommendation: str = "OVERTURN",
    confidence: float = 80,
    reasoning: str = "Certified timing contradicts the original outcome.",
    annotation_note: Optional[str] = None,
) -> str:
    payload: dict[str, Any] = {
        "recommendation": recommendation,
        "confidence_level": confidence,
        "reasoning": reasoning,
    }
    if annotation_note is not None:
        payload["annotation_note"] = annotation_note
    return json.dumps(payload)


# =============================================================================
# Config / service factories
# =============================================================================

def make_config(max_iterations: int = 3, **settlement: Any) -> RuntimeConfig:
    """RuntimeConfig over the mock provider with every delay set to zero."""
    return RuntimeConfig(
        llm=LLMConfig(provider="mock", api_key="test-key"),
        generation=GenerationConfig(pacing_delay_s=0.0, quota_wait_s=0.0, retry_backoff_s=0.0),
        resolution=ResolutionConfig(max_iterations=max_iterations, fetch_source=False),
        settlement=SettlementConfig(disburse_delay_s=0.0, **settlement),
        reconsideration=ReconsiderationConfig(pacing_delay_s=0.0),
    )


def make_service(
    llm_responses: Optional[list] = None,
    *,
    ledger: Optional[InMemoryLedger] = None,
    content_store: Optional[InMemoryContentStore] = None,
    audit: Optional[AuditLog] = None,
    config: Optional[RuntimeConfig] = None,
) -> OracleService:
    """OracleService wired to in-memory backends and a scripted mock model."""
    return OracleService(
        config or make_config(),
        ctx=AgentContext.create_mock(llm_responses=llm_responses or []),
        ledger=ledger or InMemoryLedger(),
        content_store=content_store or InMemoryContentStore(),
        audit=audit or AuditLog(),
        sleep=lambda _s: None,
    )


def mock_provider(service_or_ctx: Any):
    """The MockProvider behind a service's (or context's) generation client."""
    ctx = getattr(service_or_ctx, "ctx", service_or_ctx)
    return ctx.generation.llm.provider


def register_with_stakes(
    service: OracleService,
    market_id: str = "marathon-2026",
    stakes: Sequence[tuple[str, int, bool]] = (),
    question: str = DEFAULT_QUESTION,
):
    """Register a market and place ``(user, amount, direction)`` stakes on the in-memory ledger."""
    market = service.register_market(market_id, question)
    for user, amount, direction in stakes:
        service.ledger.place_stake(market.ledger_address, user, amount, direction)
    return service.refresh_stakes(market_id)


class FlakyLedger(InMemoryLedger):
    """InMemoryLedger whose disbursements to ``failing_users`` are rejected."""

    def __init__(self, failing_users: Sequence[str] = (), **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.failing_users = set(failing_users)

    def heal(self) -> None:
        self.failing_users.clear()

    def disburse(self, market_address: str, user: str, amount: int) -> str:
        if user in self.failing_users:
            self.disburse_calls.append((market_address, user, amount))
            raise LedgerError("Transaction simulation failed", LedgerErrorKind.OTHER)
        return super().disburse(market_address, user, amount)
