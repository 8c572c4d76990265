"""API request and response models."""

from api.models.requests import (
    CreateMarketRequest,
    ReconsiderRequest,
    ResolveRequest,
    ScheduleRequest,
)
from api.models.responses import (
    DistributionResponse,
    ErrorDetail,
    ErrorResponse,
    EvidenceResponse,
    HealthResponse,
    LogsResponse,
    MarketListResponse,
    MarketResponse,
    ReconsiderationListResponse,
    ReconsiderResponse,
    ResolveResponse,
    ResolveSummary,
    ScheduleResponse,
    StatsResponse,
)

__all__ = [
    "CreateMarketRequest",
    "ReconsiderRequest",
    "ResolveRequest",
    "ScheduleRequest",
    "DistributionResponse",
    "ErrorDetail",
    "ErrorResponse",
    "EvidenceResponse",
    "HealthResponse",
    "LogsResponse",
    "MarketListResponse",
    "MarketResponse",
    "ReconsiderationListResponse",
    "ReconsiderResponse",
    "ResolveResponse",
    "ResolveSummary",
    "ScheduleResponse",
    "StatsResponse",
]
