"""
API Response Models

Pydantic models for API response serialization.
"""

from typing import Any

from pydantic import BaseModel, Field

from core.schemas import (
    DistributionResult,
    EvidenceItem,
    LogEntry,
    Market,
    ReconsiderationResult,
)


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "prophecy-oracle-api"
    version: str = "v1"
    details: dict[str, Any] = Field(default_factory=dict)


class MarketResponse(BaseModel):
    ok: bool = True
    market: Market


class MarketListResponse(BaseModel):
    ok: bool = True
    markets: list[Market] = Field(default_factory=list)
    count: int = 0


class EvidenceResponse(BaseModel):
    """Response for POST /evidence."""

    ok: bool = True
    market_id: str
    evidence: EvidenceItem
    url: str = Field(..., description="Gateway URL of the evidence")
    evidence_count: int = 0


class ResolveSummary(BaseModel):
    """Summary of one resolution workflow."""

    market_id: str
    decision: str = Field(..., description="YES, NO or UNCERTAIN")
    iterations: int
    settlement: str | None = None
    outcome: str
    transcript_cid: str | None = None
    transcript_pinned: bool | None = None
    signature: str | None = None
    distribution: DistributionResult | None = None
    errors: list[str] = Field(default_factory=list)


class ResolveResponse(BaseModel):
    """Response for POST /resolve."""

    ok: bool = Field(..., description="Whether the workflow completed without a settlement failure")
    summary: ResolveSummary
    reasoning: str = ""
    confidence: int = 0
    market: Market


class ScheduleResponse(BaseModel):
    ok: bool = True
    market_id: str
    job_id: str | None = None
    run_at: str | None = None
    cancelled: bool | None = None


class ReconsiderResponse(BaseModel):
    ok: bool = True
    result: ReconsiderationResult


class ReconsiderationListResponse(BaseModel):
    ok: bool = True
    results: list[ReconsiderationResult] = Field(default_factory=list)
    logs: list[LogEntry] = Field(default_factory=list)


class LogsResponse(BaseModel):
    ok: bool = True
    market_id: str | None = None
    logs: list[LogEntry] = Field(default_factory=list)
    count: int = 0


class DistributionResponse(BaseModel):
    ok: bool = True
    market_id: str
    distribution: DistributionResult | None = None


class StatsResponse(BaseModel):
    ok: bool = True
    stats: dict[str, Any] = Field(default_factory=dict)


class ErrorDetail(BaseModel):
    """Error detail information."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail
