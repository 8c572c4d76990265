"""
Schemas & Canonicalization
File: reconsideration.py

Purpose: Advisory reconsideration of a settled market in light of new evidence.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .evidence import Fact
from .logs import LogEntry


class Recommendation(str, Enum):
    UPHOLD = "UPHOLD"
    ANNOTATE = "ANNOTATE"
    OVERTURN = "OVERTURN"


class SuggestedOutcome(str, Enum):
    YES = "YES"
    NO = "NO"
    UNCHANGED = "UNCHANGED"


class ReconsiderationRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    market_id: str = Field(..., min_length=1)
    ledger_address: str | None = None
    question: str = ""
    original_outcome: Literal["YES", "NO"]
    original_reasoning: str = ""
    evidence_cid: str = Field(..., min_length=1)
    evidence_description: str = ""
    submitter: str = "anonymous"

    @field_validator("original_outcome", mode="before")
    @classmethod
    def normalize_outcome(cls, v):
        return v.strip().upper() if isinstance(v, str) else v


class EvidenceAnalysis(BaseModel):
    """Output of the Analyze step."""

    model_config = ConfigDict(extra="forbid")

    facts: list[Fact] = Field(default_factory=list)
    contradicts_original: bool = False
    credibility_score: int = Field(default=0, ge=0, le=100)
    warrants_reconsideration: bool = False
    analysis: str = ""
    failed: bool = False


class ReconsiderationResult(BaseModel):
    """
    Advisory only: never written to the ledger by the oracle.
    """

    model_config = ConfigDict(extra="forbid")

    request_id: str
    market_id: str
    recommendation: Recommendation = Recommendation.UPHOLD
    confidence_delta: int = Field(default=0, ge=-100, le=100)
    new_outcome: SuggestedOutcome = SuggestedOutcome.UNCHANGED
    analysis: EvidenceAnalysis = Field(default_factory=EvidenceAnalysis)
    reasoning: str = ""
    annotation: str | None = None
    logs: list[LogEntry] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
