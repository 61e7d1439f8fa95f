"""Technical indicators (pure math, no I/O)."""

from core.indicators.indicators import (
    IndicatorSeries,
    MACDSeries,
    ema,
    sma,
    rsi,
    macd,
    round_price,
    value_at,
    IndicatorCalculator,
)

__all__ = [
    "IndicatorSeries",
    "MACDSeries",
    "ema",
    "sma",
    "rsi",
    "macd",
    "round_price",
    "value_at",
    "IndicatorCalculator",
]
