"""Composite buy/sell scoring over the latest indicator snapshot.

Rules are evaluated in a fixed order and fire independently. A rule whose
inputs include an undefined (``None``) value does not fire: it neither
changes the score nor adds a reason.

    1. price > MA5                +1
    2. price > MA10               +1
    3. price > MA20               +1
    4. MA5 > MA10                 +1
    5. RSI < 30 +2 | RSI > 70 -2 | RSI > 50 +1   (first match only)
    6. DIF > DEA                  +1
    7. HIST > 0                   +1
    8. HIST > previous HIST       +1

``max_score`` is reported as 10 although the rules above top out at 9.
"""

import logging
from decimal import Decimal

from core.models import IndicatorSnapshot, Recommendation, ScoreCard

logger = logging.getLogger(__name__)

RSI_OVERSOLD = Decimal("30")
RSI_OVERBOUGHT = Decimal("70")
RSI_MIDLINE = Decimal("50")

REASON_PRICE_ABOVE_MA5 = "价格>MA5"
REASON_PRICE_ABOVE_MA10 = "价格>MA10"
REASON_PRICE_ABOVE_MA20 = "价格>MA20"
REASON_MA5_ABOVE_MA10 = "MA5>MA10"
REASON_RSI_OVERSOLD = "RSI超卖"
REASON_RSI_OVERBOUGHT = "RSI超买"
REASON_RSI_STRONG = "RSI偏强"
REASON_MACD_GOLDEN = "MACD金叉"
REASON_MACD_HIST_POSITIVE = "MACD柱>0"
REASON_MACD_STRENGTHENING = "MACD增强"


def _above(a: Decimal | None, b: Decimal | None) -> bool:
    """``a > b`` where either side may be undefined (never fires then)."""
    return a is not None and b is not None and a > b


class SignalScorer:
    """Turns an ``IndicatorSnapshot`` into a ``ScoreCard``."""

    def score(self, snapshot: IndicatorSnapshot) -> ScoreCard:
        points = 0
        reasons: list[str] = []

        def fire(weight: int, reason: str) -> None:
            nonlocal points
            points += weight
            reasons.append(reason)

        # MA trend
        if _above(snapshot.price, snapshot.ma5):
            fire(1, REASON_PRICE_ABOVE_MA5)
        if _above(snapshot.price, snapshot.ma10):
            fire(1, REASON_PRICE_ABOVE_MA10)
        if _above(snapshot.price, snapshot.ma20):
            fire(1, REASON_PRICE_ABOVE_MA20)
        if _above(snapshot.ma5, snapshot.ma10):
            fire(1, REASON_MA5_ABOVE_MA10)

        # RSI
        rsi = snapshot.rsi14
        if rsi is not None:
            if rsi < RSI_OVERSOLD:
                fire(2, REASON_RSI_OVERSOLD)
            elif rsi > RSI_OVERBOUGHT:
                fire(-2, REASON_RSI_OVERBOUGHT)
            elif rsi > RSI_MIDLINE:
                fire(1, REASON_RSI_STRONG)

        # MACD
        if _above(snapshot.macd_dif, snapshot.macd_dea):
            fire(1, REASON_MACD_GOLDEN)
        if _above(snapshot.macd_hist, Decimal("0")):
            fire(1, REASON_MACD_HIST_POSITIVE)
        if _above(snapshot.macd_hist, snapshot.prev_macd_hist):
            fire(1, REASON_MACD_STRENGTHENING)

        recommendation = Recommendation.from_score(points)
        logger.debug("Score %d (%s): %s", points, recommendation.value, reasons)

        return ScoreCard(
            score=points,
            reasons=reasons,
            recommendation=recommendation,
        )
