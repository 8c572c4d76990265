"""
Log Stream Routes

Bounded trailing windows of the observable log stream, globally or per
market. Clients poll with ``since`` to fetch only new entries.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.deps import get_service
from api.errors import InvalidRequestError
from api.models.responses import LogsResponse
from core.schemas import Workflow
from orchestrator.service import OracleService


router = APIRouter(prefix="/logs", tags=["logs"])


def _workflow(value: Optional[str]) -> Optional[Workflow]:
    if value is None:
        return None
    try:
        return Workflow(value)
    except ValueError:
        raise InvalidRequestError(
            f"Unknown workflow: {value}",
            details={"allowed": [w.value for w in Workflow]},
        )


@router.get("", response_model=LogsResponse)
def recent_logs(
    limit: int = Query(default=50, ge=1, le=1000),
    workflow: Optional[str] = None,
    since: Optional[int] = Query(default=None, ge=0),
    service: OracleService = Depends(get_service),
) -> LogsResponse:
    if since is not None:
        logs = service.logs.since(since)
        wf = _workflow(workflow)
        if wf is not None:
            logs = [e for e in logs if e.workflow == wf]
        logs = logs[-limit:]
    else:
        logs = service.recent_logs(limit, workflow=_workflow(workflow))
    return LogsResponse(logs=logs, count=len(logs))


@router.get("/{market_id}", response_model=LogsResponse)
def market_logs(
    market_id: str,
    limit: int = Query(default=50, ge=1, le=1000),
    since: Optional[int] = Query(default=None, ge=0),
    service: OracleService = Depends(get_service),
) -> LogsResponse:
    logs = service.market_logs(market_id, limit)
    if since is not None:
        logs = [e for e in logs if e.seq > since]
    return LogsResponse(market_id=market_id, logs=logs, count=len(logs))
