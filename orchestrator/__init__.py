"""
Orchestrator

Resolution and reconsideration workflows plus the settlement machinery
they hand off to.

Public API:
- ResolutionOrchestrator: RESEARCH -> JUDGE -> SETTLE -> DONE
- ReconsiderationOrchestrator: ANALYZE -> JUDGE -> DONE (advisory only)
- TranscriptAnchorer: canonical transcript -> content store CID + digest
- SettlementExecutor / RewardDistributor: ledger commit and payouts
- ResolutionScheduler: deferred resolutions
- OracleService: facade used by the API and CLI
"""

from orchestrator.anchoring import TranscriptAnchorer, build_transcript
from orchestrator.reconsideration import (
    ReconsiderationOrchestrator,
    apply_overturn_guard,
    confidence_delta,
    suggested_outcome,
)
from orchestrator.resolution import ResolutionOrchestrator, merge_evidence
from orchestrator.scheduler import ResolutionScheduler, ScheduledResolution
from orchestrator.service import OracleService
from orchestrator.settlement import (
    RewardDistributor,
    SettlementExecutor,
    SettlementOutcome,
    decision_to_outcome,
    winning_stakes,
)
from orchestrator.side_effects import (
    ProofCertificateEffect,
    SideEffectDispatcher,
    SideEffectResult,
    proof_certificate_metadata,
)
from orchestrator.state_machine import (
    RECONSIDERATION_TRANSITIONS,
    RESOLUTION_TRANSITIONS,
    ReconsiderationState,
    ResolutionRun,
    ResolutionState,
    SettlementStatus,
    next_after_judge,
)

__all__ = [
    "OracleService",
    "ProofCertificateEffect",
    "RECONSIDERATION_TRANSITIONS",
    "RESOLUTION_TRANSITIONS",
    "ReconsiderationOrchestrator",
    "ReconsiderationState",
    "ResolutionOrchestrator",
    "ResolutionRun",
    "ResolutionScheduler",
    "ResolutionState",
    "RewardDistributor",
    "ScheduledResolution",
    "SettlementExecutor",
    "SettlementOutcome",
    "SettlementStatus",
    "SideEffectDispatcher",
    "SideEffectResult",
    "TranscriptAnchorer",
    "apply_overturn_guard",
    "build_transcript",
    "confidence_delta",
    "decision_to_outcome",
    "merge_evidence",
    "next_after_judge",
    "proof_certificate_metadata",
    "suggested_outcome",
    "winning_stakes",
]
