"""
Resolution Routes

Trigger a resolution now, or schedule / cancel a deferred one. A market that
is already being resolved, or already settled, answers 409.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from api.deps import get_service
from api.errors import NotFoundError
from api.models.requests import ResolveRequest, ScheduleRequest
from api.models.responses import ResolveResponse, ResolveSummary, ScheduleResponse
from orchestrator.service import OracleService
from orchestrator.state_machine import SettlementStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resolve", tags=["resolution"])


@router.post("", response_model=ResolveResponse)
def resolve(
    request: ResolveRequest,
    service: OracleService = Depends(get_service),
) -> ResolveResponse:
    """
    Run the resolution workflow synchronously and return its summary.
    """
    run = service.resolve(request.market_id, question=request.question, evidence=request.evidence)
    verdict = run.verdict
    return ResolveResponse(
        ok=run.settlement not in (SettlementStatus.FAILED, SettlementStatus.REFUSED),
        summary=ResolveSummary(**run.summary()),
        reasoning=verdict.reasoning if verdict else "",
        confidence=verdict.confidence if verdict else 0,
        market=service.get_market(request.market_id),
    )


@router.post("/schedule", response_model=ScheduleResponse, status_code=202)
def schedule(
    request: ScheduleRequest,
    service: OracleService = Depends(get_service),
) -> ScheduleResponse:
    scheduled = service.schedule_resolution(
        request.market_id, run_at=request.run_at, delay_s=request.delay_s
    )
    return ScheduleResponse(**scheduled.to_dict())


@router.delete("/schedule/{market_id}", response_model=ScheduleResponse)
def cancel_schedule(market_id: str, service: OracleService = Depends(get_service)) -> ScheduleResponse:
    """Cancel a pending scheduled resolution. Started resolutions are not interrupted."""
    if not service.cancel_scheduled(market_id):
        raise NotFoundError(
            f"No pending scheduled resolution for {market_id}",
            details={"market_id": market_id},
        )
    return ScheduleResponse(market_id=market_id, cancelled=True)
