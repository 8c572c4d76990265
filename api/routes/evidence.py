"""
Evidence Route

Multipart evidence submission: either an uploaded file (pinned to the
content store) or the CID of content pinned elsewhere.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool

from api.deps import get_service
from api.errors import InvalidRequestError
from api.models.responses import EvidenceResponse
from orchestrator.service import OracleService


router = APIRouter(tags=["evidence"])

MAX_EVIDENCE_BYTES = 10 * 1024 * 1024


@router.post("/evidence", response_model=EvidenceResponse, status_code=201)
async def submit_evidence(
    market_id: str = Form(..., min_length=1, description="Market the evidence belongs to"),
    file: Optional[UploadFile] = File(default=None, description="Evidence file"),
    cid: Optional[str] = Form(default=None, description="CID of already pinned evidence"),
    description: str = Form(default=""),
    submitter: str = Form(default="anonymous"),
    service: OracleService = Depends(get_service),
) -> EvidenceResponse:
    """
    Submit evidence for a market.

    Provide ``file`` or ``cid``; evidence is append-only.
    """
    if file is None and not cid:
        raise InvalidRequestError("Either a file or a cid is required")

    content: Optional[bytes] = None
    filename: Optional[str] = None
    if file is not None:
        content = await file.read()
        filename = file.filename
        if not content:
            raise InvalidRequestError("Uploaded file is empty")
        if len(content) > MAX_EVIDENCE_BYTES:
            raise InvalidRequestError(
                "Uploaded file is too large",
                details={"max_bytes": MAX_EVIDENCE_BYTES, "size": len(content)},
            )

    item = await run_in_threadpool(
        service.submit_evidence,
        market_id,
        cid=None if content is not None else cid,
        content=content,
        description=description,
        submitter=submitter,
        filename=filename,
    )
    return EvidenceResponse(
        market_id=market_id,
        evidence=item,
        url=service.content_store.url_for(item.cid),
        evidence_count=service.get_market(market_id).evidence_count,
    )
