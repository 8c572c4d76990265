"""
Reconsideration Routes

Advisory review of a settled market. Results are never written to the
ledger.
"""

from fastapi import APIRouter, Depends, Query

from api.deps import get_service
from api.models.requests import ReconsiderRequest
from api.models.responses import ReconsiderationListResponse, ReconsiderResponse
from core.schemas import ReconsiderationRequest, Workflow
from orchestrator.service import OracleService


router = APIRouter(prefix="/reconsider", tags=["reconsideration"])


@router.post("", response_model=ReconsiderResponse)
def reconsider(
    request: ReconsiderRequest,
    service: OracleService = Depends(get_service),
) -> ReconsiderResponse:
    result = service.reconsider(
        ReconsiderationRequest(
            market_id=request.market_id,
            question=request.question,
            original_outcome=request.original_outcome,
            original_reasoning=request.original_reasoning,
            evidence_cid=request.evidence_cid,
            evidence_description=request.evidence_description,
            submitter=request.submitter,
        )
    )
    return ReconsiderResponse(result=result)


@router.get("/logs", response_model=ReconsiderationListResponse)
def reconsideration_logs(
    limit: int = Query(default=100, ge=1, le=1000),
    service: OracleService = Depends(get_service),
) -> ReconsiderationListResponse:
    return ReconsiderationListResponse(
        results=service.reconsiderations(limit),
        logs=service.recent_logs(limit, workflow=Workflow.RECONSIDERATION),
    )
