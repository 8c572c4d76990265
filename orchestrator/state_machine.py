"""
Workflow State Machines

Explicit states and transition tables for the two workflows:

- resolution: RESEARCH -> JUDGE -> (RESEARCH | SETTLE) -> DONE
- reconsideration: ANALYZE -> JUDGE -> DONE

``ResolutionRun`` holds the artifacts a resolution accumulates as it moves
through the machine; the orchestrator is the only writer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from core.schemas.errors import InvalidTransitionError
from core.schemas.evidence import EvidenceItem, Fact
from core.schemas.market import MarketStatus, Outcome
from core.schemas.stake import DistributionResult
from core.schemas.transcript import AnchorResult
from core.schemas.verdict import Decision, Verdict


class ResolutionState(str, Enum):
    RESEARCH = "research"
    JUDGE = "judge"
    SETTLE = "settle"
    DONE = "done"


RESOLUTION_TRANSITIONS: dict[ResolutionState, frozenset[ResolutionState]] = {
    ResolutionState.RESEARCH: frozenset({ResolutionState.JUDGE}),
    ResolutionState.JUDGE: frozenset({ResolutionState.RESEARCH, ResolutionState.SETTLE}),
    ResolutionState.SETTLE: frozenset({ResolutionState.DONE}),
    ResolutionState.DONE: frozenset(),
}

# Market status shown while the workflow sits in each state
STATE_MARKET_STATUS: dict[ResolutionState, MarketStatus] = {
    ResolutionState.RESEARCH: MarketStatus.RESEARCHING,
    ResolutionState.JUDGE: MarketStatus.JUDGING,
    ResolutionState.SETTLE: MarketStatus.EXECUTING,
}


def next_after_judge(verdict: Verdict, max_iterations: int) -> ResolutionState:
    """
    JUDGE -> RESEARCH only while the verdict is UNCERTAIN and the
    iteration cap has not been reached; otherwise SETTLE.
    """
    if verdict.decision == Decision.UNCERTAIN and verdict.iteration < max_iterations:
        return ResolutionState.RESEARCH
    return ResolutionState.SETTLE


class SettlementStatus(str, Enum):
    """How the SETTLE node ended."""
    COMMITTED = "committed"          # outcome written to the ledger
    UNRESOLVED = "unresolved"        # UNCERTAIN after the cap, no ledger action
    ALREADY_RESOLVED = "already_resolved"
    FAILED = "failed"                # ledger rejected or unreachable
    REFUSED = "refused"              # market was already Resolved locally


@dataclass
class ResolutionRun:
    """
    Artifacts of one resolution workflow.
    """

    market_id: str
    question: str
    evidence: list[EvidenceItem] = field(default_factory=list)

    state: ResolutionState = ResolutionState.RESEARCH
    history: list[ResolutionState] = field(default_factory=lambda: [ResolutionState.RESEARCH])
    iterations: int = 0
    source_content: Optional[str] = None

    facts: list[Fact] = field(default_factory=list)
    verdicts: list[Verdict] = field(default_factory=list)

    settlement: Optional[SettlementStatus] = None
    outcome: Outcome = Outcome.UNSET
    anchor: Optional[AnchorResult] = None
    signature: Optional[str] = None
    distribution: Optional[DistributionResult] = None
    errors: list[str] = field(default_factory=list)

    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def verdict(self) -> Optional[Verdict]:
        return self.verdicts[-1] if self.verdicts else None

    @property
    def decision(self) -> Decision:
        return self.verdict.decision if self.verdict else Decision.UNCERTAIN

    @property
    def done(self) -> bool:
        return self.state == ResolutionState.DONE

    @property
    def committed(self) -> bool:
        return self.settlement == SettlementStatus.COMMITTED

    def advance(self, target: ResolutionState) -> None:
        if target not in RESOLUTION_TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                self.state.value, target.value, details={"market_id": self.market_id}
            )
        self.state = target
        self.history.append(target)

    def add_error(self, error: str) -> None:
        self.errors.append(error)

    def summary(self) -> dict:
        return {
            "market_id": self.market_id,
            "decision": self.decision.value,
            "iterations": self.iterations,
            "settlement": self.settlement.value if self.settlement else None,
            "outcome": self.outcome.value,
            "transcript_cid": self.anchor.cid if self.anchor else None,
            "transcript_pinned": self.anchor.pinned if self.anchor else None,
            "signature": self.signature,
            "distribution": self.distribution.model_dump() if self.distribution else None,
            "errors": list(self.errors),
        }


class ReconsiderationState(str, Enum):
    ANALYZE = "analyze"
    JUDGE = "judge"
    DONE = "done"


RECONSIDERATION_TRANSITIONS: dict[ReconsiderationState, frozenset[ReconsiderationState]] = {
    ReconsiderationState.ANALYZE: frozenset({ReconsiderationState.JUDGE, ReconsiderationState.DONE}),
    ReconsiderationState.JUDGE: frozenset({ReconsiderationState.DONE}),
    ReconsiderationState.DONE: frozenset(),
}


def check_reconsideration_transition(
    source: ReconsiderationState, target: ReconsiderationState
) -> ReconsiderationState:
    if target not in RECONSIDERATION_TRANSITIONS[source]:
        raise InvalidTransitionError(source.value, target.value)
    return target
