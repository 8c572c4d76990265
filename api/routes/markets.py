"""
Market Routes

Register, list and inspect markets; dispute a resolution; inspect or re-run
reward distribution.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from api.deps import get_service
from api.errors import InvalidRequestError
from api.models.requests import CreateMarketRequest
from api.models.responses import DistributionResponse, MarketListResponse, MarketResponse
from core.schemas import MarketStatus
from orchestrator.service import OracleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/markets", tags=["markets"])


@router.post("", response_model=MarketResponse, status_code=201)
def create_market(
    request: CreateMarketRequest,
    service: OracleService = Depends(get_service),
) -> MarketResponse:
    market = service.register_market(
        request.market_id,
        request.question,
        source_url=request.source_url,
        creator=request.creator,
        ledger_address=request.ledger_address,
    )
    return MarketResponse(market=market)


@router.get("", response_model=MarketListResponse)
def list_markets(
    status: Optional[str] = None,
    service: OracleService = Depends(get_service),
) -> MarketListResponse:
    status_filter = None
    if status:
        try:
            status_filter = MarketStatus(status)
        except ValueError:
            raise InvalidRequestError(
                f"Unknown market status: {status}",
                details={"allowed": [s.value for s in MarketStatus]},
            )
    markets = service.list_markets(status_filter)
    return MarketListResponse(markets=markets, count=len(markets))


@router.get("/{market_id}", response_model=MarketResponse)
def get_market(market_id: str, service: OracleService = Depends(get_service)) -> MarketResponse:
    return MarketResponse(market=service.refresh_stakes(market_id))


@router.post("/{market_id}/dispute", response_model=MarketResponse)
def dispute_market(market_id: str, service: OracleService = Depends(get_service)) -> MarketResponse:
    """Flag a resolved market for review (Resolved -> Disputed)."""
    return MarketResponse(market=service.dispute(market_id))


@router.get("/{market_id}/distribution", response_model=DistributionResponse)
def get_distribution(
    market_id: str,
    service: OracleService = Depends(get_service),
) -> DistributionResponse:
    return DistributionResponse(market_id=market_id, distribution=service.distribution(market_id))


@router.post("/{market_id}/distribute", response_model=DistributionResponse)
def rerun_distribution(
    market_id: str,
    service: OracleService = Depends(get_service),
) -> DistributionResponse:
    """Re-run reward distribution; winners already paid are skipped."""
    try:
        distribution = service.distribute_rewards(market_id)
    except ValueError as e:
        raise InvalidRequestError(str(e))
    return DistributionResponse(
        ok=distribution is not None and distribution.failed == 0,
        market_id=market_id,
        distribution=distribution,
    )
