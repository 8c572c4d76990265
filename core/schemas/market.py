"""
Schemas & Canonicalization
File: market.py

Purpose: Market lifecycle state tracked by the oracle.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .evidence import EvidenceItem
from .stake import DistributionResult


class MarketStatus(str, Enum):
    OPEN = "Open"
    RESEARCHING = "Researching"
    JUDGING = "Judging"
    EXECUTING = "Executing"
    RESOLVED = "Resolved"
    DISPUTED = "Disputed"

    @property
    def in_flight(self) -> bool:
        """True while a resolution workflow owns the market."""
        return self in (MarketStatus.RESEARCHING, MarketStatus.JUDGING, MarketStatus.EXECUTING)

    @property
    def settled(self) -> bool:
        return self in (MarketStatus.RESOLVED, MarketStatus.DISPUTED)


class Outcome(str, Enum):
    UNSET = "Unset"
    YES = "Yes"
    NO = "No"

    def as_ledger_value(self) -> int:
        """Outcome encoding used by the ledger: Yes -> 1, No -> 0."""
        if self is Outcome.UNSET:
            raise ValueError("Unset outcome has no ledger encoding")
        return 1 if self is Outcome.YES else 0


class Market(BaseModel):
    """
    A prediction market known to the oracle.

    Status is driven by the resolution orchestrator; outcome and transcript
    digest are written by the settlement executor only. Once Resolved the
    only allowed change is Resolved -> Disputed.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    market_id: str = Field(..., min_length=1)
    ledger_address: str = Field(..., min_length=1)
    question: str = Field(..., min_length=1)
    source_url: str | None = None
    creator: str | None = None
    status: MarketStatus = MarketStatus.OPEN
    outcome: Outcome = Outcome.UNSET
    yes_stake_total: int = Field(default=0, ge=0)
    no_stake_total: int = Field(default=0, ge=0)
    evidence: list[EvidenceItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    resolved_at: datetime | None = None
    transcript_cid: str | None = None
    transcript_digest: str | None = None
    last_distribution: DistributionResult | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def evidence_count(self) -> int:
        return len(self.evidence)
