"""Indicator snapshot and report models.

Every numeric field is a ``Decimal`` rounded to 2 places, or ``None`` when the
indicator has not enough history yet. Decimals serialize to JSON numbers.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from core.models.kline import Kline, Price

MAX_SCORE = 10


class Action(str, Enum):
    """Analysis actions a caller can request."""

    KLINE = "kline"
    MA = "ma"
    RSI = "rsi"
    MACD = "macd"
    SIGNAL = "signal"


class Recommendation(str, Enum):
    """Composite score categories, strongest first."""

    STRONG_BULLISH = "strong bullish"
    MODERATELY_BULLISH = "moderately bullish"
    NEUTRAL = "neutral"
    MODERATELY_BEARISH = "moderately bearish"
    STRONG_BEARISH = "strong bearish"

    @classmethod
    def from_score(cls, score: int) -> "Recommendation":
        if score >= 6:
            return cls.STRONG_BULLISH
        if score >= 3:
            return cls.MODERATELY_BULLISH
        if score >= 0:
            return cls.NEUTRAL
        if score >= -3:
            return cls.MODERATELY_BEARISH
        return cls.STRONG_BEARISH


class MATrend(str, Enum):
    BULLISH_ALIGNMENT = "bullish alignment"
    BEARISH_ALIGNMENT = "bearish alignment"
    RANGING = "ranging"


class RSISignal(str, Enum):
    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"
    STRONG = "strong"
    WEAK = "weak"
    NEUTRAL = "neutral"


class MACDSignal(str, Enum):
    GOLDEN_CROSS = "golden cross"
    DEATH_CROSS = "death cross"
    BULLISH_MOMENTUM = "bullish momentum"
    BEARISH_MOMENTUM = "bearish momentum"
    WAIT = "wait"


class IndicatorSnapshot(BaseModel):
    """All indicator values at the latest index, plus the prior MACD values.

    ``prev_*`` fields are not part of the reported snapshot; the scorer and
    the MACD crossover label need them.
    """

    model_config = ConfigDict(frozen=True)

    price: Optional[Price] = None
    ma5: Optional[Price] = None
    ma10: Optional[Price] = None
    ma20: Optional[Price] = None
    rsi14: Optional[Price] = None
    macd_dif: Optional[Price] = None
    macd_dea: Optional[Price] = None
    macd_hist: Optional[Price] = None
    prev_macd_dif: Optional[Price] = None
    prev_macd_dea: Optional[Price] = None
    prev_macd_hist: Optional[Price] = None

    def indicators(self) -> dict[str, Optional[Decimal]]:
        """Latest indicator values keyed the way reports expose them."""
        return {
            "ma5": self.ma5,
            "ma10": self.ma10,
            "ma20": self.ma20,
            "rsi": self.rsi14,
            "macdDif": self.macd_dif,
            "macdDea": self.macd_dea,
            "macdHist": self.macd_hist,
        }


class ScoreCard(BaseModel):
    """Outcome of the composite scoring rules."""

    model_config = ConfigDict(frozen=True)

    score: int
    max_score: int = MAX_SCORE
    reasons: list[str]
    recommendation: Recommendation


class _Report(BaseModel):
    """Reports serialize with camelCase keys (instId, maxScore)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class KlineReport(_Report):
    inst_id: str
    bar: str
    count: int
    latest: Optional[Kline] = None
    klines: list[Kline]
    summary: str


class MAReport(_Report):
    inst_id: str
    price: Optional[Price] = None
    ma5: Optional[Price] = None
    ma10: Optional[Price] = None
    ma20: Optional[Price] = None
    trend: MATrend
    summary: str


class RSIReport(_Report):
    inst_id: str
    rsi: Optional[Price] = None
    signal: RSISignal
    summary: str


class MACDReport(_Report):
    inst_id: str
    dif: Optional[Price] = None
    dea: Optional[Price] = None
    hist: Optional[Price] = None
    signal: MACDSignal
    summary: str


class SignalReport(_Report):
    """Composite buy/sell report."""

    inst_id: str
    bar: str
    price: Optional[Price] = None
    score: int
    max_score: int = MAX_SCORE
    indicators: dict[str, Optional[Price]]
    reasons: list[str]
    recommendation: Recommendation
    summary: str
