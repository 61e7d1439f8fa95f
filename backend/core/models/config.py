"""Indicator configuration models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class IndicatorConfig(BaseModel):
    """Indicator periods used by the analysis engine."""

    model_config = ConfigDict(frozen=True)

    # Simple moving averages, reported as ma5/ma10/ma20
    ma_periods: tuple[int, int, int] = (5, 10, 20)

    # Wilder RSI
    rsi_period: int = 14

    # MACD (fast EMA, slow EMA, signal EMA)
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9


DEFAULT_INDICATOR_CONFIG = IndicatorConfig()
