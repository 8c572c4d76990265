"""
API Request Models

Pydantic models for API request validation.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator


class CreateMarketRequest(BaseModel):
    """Request body for POST /markets."""

    market_id: str = Field(..., min_length=1, max_length=128)
    question: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="The claim the market resolves",
    )
    source_url: str | None = Field(default=None, description="Resolution source fetched during research")
    creator: str | None = None
    ledger_address: str | None = Field(
        default=None,
        description="Ledger account of the market; derived from market_id when omitted",
    )


class ResolveRequest(BaseModel):
    """Request body for POST /resolve."""

    market_id: str = Field(..., min_length=1)
    question: str | None = Field(
        default=None,
        description="Overrides the stored question for this resolution",
    )
    evidence: list[str] = Field(
        default_factory=list,
        description="Additional evidence CIDs / URLs merged with stored evidence",
    )


class ScheduleRequest(BaseModel):
    """Request body for POST /resolve/schedule."""

    market_id: str = Field(..., min_length=1)
    run_at: datetime | None = Field(default=None, description="When to resolve (UTC)")
    delay_s: float | None = Field(default=None, ge=0, description="Seconds from now")

    @model_validator(mode="after")
    def check_when(self) -> "ScheduleRequest":
        if self.run_at is None and self.delay_s is None:
            raise ValueError("run_at or delay_s is required")
        return self


class ReconsiderRequest(BaseModel):
    """Request body for POST /reconsider."""

    market_id: str = Field(..., min_length=1)
    original_outcome: Literal["YES", "NO"]
    original_reasoning: str = ""
    evidence_cid: str = Field(..., min_length=1)
    evidence_description: str = ""
    submitter: str = "anonymous"
    question: str = ""
