"""
Health & Stats Routes
"""

from fastapi import APIRouter, Depends

from api.deps import get_service
from api.models.responses import HealthResponse, StatsResponse
from orchestrator.service import OracleService


router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(service: OracleService = Depends(get_service)) -> HealthResponse:
    """
    Health check endpoint.

    Returns service status and configured backends for liveness probes.
    """
    return HealthResponse(ok=True, details=service.health())


@router.get("/", response_model=HealthResponse)
def root() -> HealthResponse:
    """
    Root endpoint - liveness only.
    """
    return HealthResponse(ok=True)


@router.get("/stats", response_model=StatsResponse)
def stats(service: OracleService = Depends(get_service)) -> StatsResponse:
    return StatsResponse(stats=service.stats())
