"""Per-action analysis reports built from an ordered kline sequence.

This module is pure business logic with no I/O. The caller fetches klines
(oldest first) and picks the report it needs; each report is built fresh
from the sequence it is given.
"""

from decimal import Decimal

from core.indicators import IndicatorCalculator
from core.models import (
    DEFAULT_INDICATOR_CONFIG,
    Action,
    IndicatorConfig,
    IndicatorSnapshot,
    Kline,
    KlineReport,
    MACDReport,
    MACDSignal,
    MAReport,
    MATrend,
    MAX_SCORE,
    RSIReport,
    RSISignal,
    SignalReport,
    closes_of,
)
from core.signal_scorer import RSI_MIDLINE, RSI_OVERBOUGHT, RSI_OVERSOLD, SignalScorer

# Number of most recent klines echoed back in a kline report
RECENT_KLINES = 10

Report = KlineReport | MAReport | RSIReport | MACDReport | SignalReport


def _fmt(value: Decimal | None) -> str:
    return "n/a" if value is None else str(value)


def _strictly_descending(*values: Decimal | None) -> bool:
    if any(v is None for v in values):
        return False
    return all(a > b for a, b in zip(values, values[1:]))


def ma_trend(snapshot: IndicatorSnapshot) -> MATrend:
    """Classify price/MA ordering: price > MA5 > MA10 > MA20 or the reverse."""
    ordered = (snapshot.price, snapshot.ma5, snapshot.ma10, snapshot.ma20)
    if _strictly_descending(*ordered):
        return MATrend.BULLISH_ALIGNMENT
    if _strictly_descending(*reversed(ordered)):
        return MATrend.BEARISH_ALIGNMENT
    return MATrend.RANGING


def rsi_signal(value: Decimal | None) -> RSISignal:
    if value is None:
        return RSISignal.NEUTRAL
    if value > RSI_OVERBOUGHT:
        return RSISignal.OVERBOUGHT
    if value < RSI_OVERSOLD:
        return RSISignal.OVERSOLD
    if value > RSI_MIDLINE:
        return RSISignal.STRONG
    return RSISignal.WEAK


def macd_signal(snapshot: IndicatorSnapshot) -> MACDSignal:
    """Detect a DIF/DEA cross between the previous and latest index.

    Falls back to histogram momentum when no cross happened. Nothing that
    needs the previous index fires on a single-candle series.
    """
    dif, dea, hist = snapshot.macd_dif, snapshot.macd_dea, snapshot.macd_hist
    prev_dif, prev_dea = snapshot.prev_macd_dif, snapshot.prev_macd_dea
    prev_hist = snapshot.prev_macd_hist

    if None in (dif, dea, hist, prev_dif, prev_dea, prev_hist):
        return MACDSignal.WAIT

    if dif > dea and prev_dif <= prev_dea:
        return MACDSignal.GOLDEN_CROSS
    if dif < dea and prev_dif >= prev_dea:
        return MACDSignal.DEATH_CROSS
    if hist > 0 and hist > prev_hist:
        return MACDSignal.BULLISH_MOMENTUM
    if hist < 0 and hist < prev_hist:
        return MACDSignal.BEARISH_MOMENTUM
    return MACDSignal.WAIT


class TechnicalAnalyzer:
    """Builds indicator reports for one instrument and bar."""

    def __init__(
        self,
        config: IndicatorConfig = DEFAULT_INDICATOR_CONFIG,
        scorer: SignalScorer | None = None,
    ):
        self.calculator = IndicatorCalculator(config)
        self.scorer = scorer or SignalScorer()

    def snapshot(self, klines: list[Kline]) -> IndicatorSnapshot:
        return self.calculator.calculate_latest(closes_of(klines))

    def kline_report(self, klines: list[Kline], inst_id: str, bar: str) -> KlineReport:
        latest = klines[-1] if klines else None
        if latest is None:
            summary = f"{inst_id} {bar} klines: no data"
        else:
            summary = (
                f"{inst_id} {bar} klines: latest close {latest.close}, "
                f"{len(klines)} candles"
            )
        return KlineReport(
            inst_id=inst_id,
            bar=bar,
            count=len(klines),
            latest=latest,
            klines=klines[-RECENT_KLINES:],
            summary=summary,
        )

    def ma_report(self, klines: list[Kline], inst_id: str) -> MAReport:
        snap = self.snapshot(klines)
        trend = ma_trend(snap)
        return MAReport(
            inst_id=inst_id,
            price=snap.price,
            ma5=snap.ma5,
            ma10=snap.ma10,
            ma20=snap.ma20,
            trend=trend,
            summary=(
                f"{inst_id}: price {_fmt(snap.price)}, MA5={_fmt(snap.ma5)}, "
                f"MA10={_fmt(snap.ma10)}, MA20={_fmt(snap.ma20)}, {trend.value}"
            ),
        )

    def rsi_report(self, klines: list[Kline], inst_id: str) -> RSIReport:
        snap = self.snapshot(klines)
        signal = rsi_signal(snap.rsi14)
        return RSIReport(
            inst_id=inst_id,
            rsi=snap.rsi14,
            signal=signal,
            summary=f"{inst_id} RSI(14): {_fmt(snap.rsi14)}, {signal.value}",
        )

    def macd_report(self, klines: list[Kline], inst_id: str) -> MACDReport:
        snap = self.snapshot(klines)
        signal = macd_signal(snap)
        return MACDReport(
            inst_id=inst_id,
            dif=snap.macd_dif,
            dea=snap.macd_dea,
            hist=snap.macd_hist,
            signal=signal,
            summary=(
                f"{inst_id} MACD: DIF={_fmt(snap.macd_dif)}, DEA={_fmt(snap.macd_dea)}, "
                f"HIST={_fmt(snap.macd_hist)}, {signal.value}"
            ),
        )

    def signal_report(self, klines: list[Kline], inst_id: str, bar: str) -> SignalReport:
        snap = self.snapshot(klines)
        card = self.scorer.score(snap)
        return SignalReport(
            inst_id=inst_id,
            bar=bar,
            price=snap.price,
            score=card.score,
            max_score=card.max_score,
            indicators=snap.indicators(),
            reasons=card.reasons,
            recommendation=card.recommendation,
            summary=(
                f"{inst_id} composite score: {card.score}/{MAX_SCORE}, "
                f"{card.recommendation.value}"
            ),
        )

    def analyze(self, action: Action, klines: list[Kline], inst_id: str, bar: str) -> Report:
        """Build the report for ``action``."""
        if action is Action.KLINE:
            return self.kline_report(klines, inst_id, bar)
        if action is Action.MA:
            return self.ma_report(klines, inst_id)
        if action is Action.RSI:
            return self.rsi_report(klines, inst_id)
        if action is Action.MACD:
            return self.macd_report(klines, inst_id)
        return self.signal_report(klines, inst_id, bar)
