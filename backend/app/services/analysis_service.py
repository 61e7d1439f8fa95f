"""Analysis service: fetch candles, run the analyzer, wrap the outcome.

Every request ends in an ``AnalysisResult``. Unknown actions and
unsupported timeframes fail before any network call; upstream failures
fail the whole request and are not retried.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from app.clients.okx_rest import OkxApiError, OkxRestClient
from app.config import Settings, get_settings
from core.analyzer import TechnicalAnalyzer
from core.models import Action, Timeframe

logger = logging.getLogger(__name__)


class AnalysisResult(BaseModel):
    """Success/failure envelope returned to every caller."""

    success: bool
    data: Optional[dict[str, Any]] = None
    summary: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "AnalysisResult":
        return cls(success=False, error=error)


class AnalysisService:
    """Runs one analysis action against live OKX candles."""

    def __init__(
        self,
        client: OkxRestClient,
        analyzer: TechnicalAnalyzer | None = None,
        settings: Settings | None = None,
    ):
        self.client = client
        self.analyzer = analyzer or TechnicalAnalyzer()
        self.settings = settings or get_settings()

    def _clamp_limit(self, limit: int | None) -> int:
        if limit is None:
            limit = self.settings.default_limit
        return max(1, min(limit, self.settings.max_limit))

    async def execute(
        self,
        action: str,
        inst_id: str | None = None,
        bar: str | None = None,
        limit: int | None = None,
    ) -> AnalysisResult:
        """
        Run ``action`` for an instrument.

        Args:
            action: One of kline, ma, rsi, macd, signal
            inst_id: Instrument, defaults to settings.default_inst_id
            bar: Candle period, defaults to settings.default_bar
            limit: Candle count, clamped to 1..settings.max_limit

        Returns:
            AnalysisResult with the report in ``data`` on success
        """
        inst_id = inst_id or self.settings.default_inst_id
        bar = bar or self.settings.default_bar
        limit = self._clamp_limit(limit)

        try:
            requested = Action(action)
        except ValueError:
            logger.warning("Unknown analysis action: %s", action)
            return AnalysisResult.failure(f"Unknown action: {action}")

        try:
            Timeframe(bar)
        except ValueError:
            logger.warning("Unsupported timeframe: %s", bar)
            return AnalysisResult.failure(f"Unsupported timeframe: {bar}")

        logger.info(
            "OKX analysis: action=%s inst_id=%s bar=%s limit=%d",
            requested.value, inst_id, bar, limit,
        )

        try:
            klines = await self.client.get_candles(inst_id, bar, limit)
        except (OkxApiError, httpx.HTTPError) as e:
            message = str(e) or type(e).__name__
            logger.error("OKX analysis failed for %s %s: %s", inst_id, bar, message)
            return AnalysisResult.failure(message)

        report = self.analyzer.analyze(requested, klines, inst_id, bar)

        return AnalysisResult(
            success=True,
            data=report.model_dump(mode="json", by_alias=True, exclude={"summary"}),
            summary=report.summary,
        )
