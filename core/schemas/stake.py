"""
Schemas & Canonicalization
File: stake.py

Purpose: Stake snapshots read from the ledger and reward distribution reports.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, model_validator


class StakeRecord(BaseModel):
    """
    A user's stake on one side of a market. Read-only to the oracle.

    ``direction`` is True for a Yes stake.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    user: str = Field(..., min_length=1)
    market_address: str = Field(..., min_length=1)
    amount: int = Field(..., ge=0, description="Stake in base units")
    direction: bool
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class DisbursementFailure(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user: str
    amount: int
    error: str


class DistributionResult(BaseModel):
    """
    Counts for one reward distribution run.

    ``total`` is the number of winners this run attempted; winners skipped
    because an earlier run already paid them are counted in ``already_paid``
    only.
    """

    model_config = ConfigDict(extra="forbid")

    distributed: int = 0
    failed: int = 0
    total: int = 0
    already_paid: int = 0
    amount_disbursed: int = 0
    failures: list[DisbursementFailure] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_counts(self) -> "DistributionResult":
        if self.distributed + self.failed != self.total:
            raise ValueError("distributed + failed must equal total")
        return self
