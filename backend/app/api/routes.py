"""REST API routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.config import get_settings
from app.services.analysis_service import AnalysisResult, AnalysisService
from core.models import Action, Timeframe

logger = logging.getLogger(__name__)

router = APIRouter()


def get_analysis_service(request: Request) -> AnalysisService:
    """Analysis service created by the app lifespan."""
    return request.app.state.analysis_service


@router.get("/health")
async def health():
    """Health check endpoint."""
    settings = get_settings()
    return {
        "status": "healthy",
        "actions": [a.value for a in Action],
        "timeframes": [t.value for t in Timeframe],
        "max_limit": settings.max_limit,
    }


@router.get("/analysis/{action}", response_model=AnalysisResult)
async def run_analysis(
    action: str,
    inst_id: Optional[str] = Query(None, alias="instId", description="Instrument, e.g. BTC-USDT"),
    bar: Optional[str] = Query(None, description="Candle period: 1m/5m/15m/30m/1H/4H/1D"),
    limit: Optional[int] = Query(None, ge=1, description="Number of candles (max 300)"),
    service: AnalysisService = Depends(get_analysis_service),
):
    """
    Run one analysis action.

    Failures (unknown action, upstream error) come back as a result with
    ``success: false`` rather than an HTTP error.
    """
    return await service.execute(action, inst_id=inst_id, bar=bar, limit=limit)
