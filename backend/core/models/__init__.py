"""Core data models."""

from core.models.kline import Kline, Price, Timeframe, closes_of
from core.models.config import DEFAULT_INDICATOR_CONFIG, IndicatorConfig
from core.models.report import (
    MAX_SCORE,
    Action,
    IndicatorSnapshot,
    KlineReport,
    MACDReport,
    MACDSignal,
    MAReport,
    MATrend,
    Recommendation,
    RSIReport,
    RSISignal,
    ScoreCard,
    SignalReport,
)

__all__ = [
    "Kline",
    "Price",
    "Timeframe",
    "closes_of",
    "IndicatorConfig",
    "DEFAULT_INDICATOR_CONFIG",
    "MAX_SCORE",
    "Action",
    "IndicatorSnapshot",
    "KlineReport",
    "MACDReport",
    "MACDSignal",
    "MAReport",
    "MATrend",
    "Recommendation",
    "RSIReport",
    "RSISignal",
    "ScoreCard",
    "SignalReport",
]
