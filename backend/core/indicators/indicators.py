"""Technical indicators for the analysis engine.

Arithmetic runs in float64, the same way the charting side computes these
series, and every published value is rounded to 2 decimals with
``round_price``. Multi-stage indicators (MACD) round at each stage boundary
and feed the rounded value into the next stage, so outputs are reproducible
bit-for-bit.

Series are aligned index-for-index with the input. Indices without enough
history hold ``None``.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple, Sequence

import numpy as np

from core.models import DEFAULT_INDICATOR_CONFIG, IndicatorConfig, IndicatorSnapshot

IndicatorSeries = list[Decimal | None]

_CENT = Decimal("0.01")
_ZERO = Decimal("0.00")

# Sentinel relative strength used when the average loss is zero
RS_ZERO_LOSS = 100.0


def round_price(value: float) -> Decimal:
    """Round the exact binary value of ``value`` half away from zero to 2 places."""
    rounded = Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)
    # -0.00 collapses to 0.00
    return rounded if rounded else _ZERO


def _as_floats(values: Sequence[Decimal | float]) -> np.ndarray:
    return np.array([float(v) for v in values], dtype=np.float64)


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")


# =============================================================================
# Moving averages
# =============================================================================

def sma(values: Sequence[Decimal | float], period: int) -> IndicatorSeries:
    """
    Calculate Simple Moving Average.

    Args:
        values: Sequence of close prices, oldest first
        period: Window length

    Returns:
        List of SMA values rounded to 2 places, ``None`` for the first
        ``period - 1`` indices
    """
    _check_period(period)
    arr = _as_floats(values)
    result: IndicatorSeries = [None] * len(arr)

    for i in range(period - 1, len(arr)):
        # Left-to-right accumulation, not np.sum (pairwise)
        total = 0.0
        for v in arr[i - period + 1 : i + 1]:
            total += v
        result[i] = round_price(total / period)

    return result


def ema(values: Sequence[Decimal | float], period: int) -> list[float]:
    """
    Calculate Exponential Moving Average.

    Seeded with the first raw value, so it is defined from index 0 and
    never rounded. Callers round where they publish.

    Args:
        values: Sequence of values
        period: EMA period, smoothing constant k = 2 / (period + 1)

    Returns:
        List of EMA values, same length as input
    """
    _check_period(period)
    arr = _as_floats(values)
    k = 2 / (period + 1)

    result: list[float] = []
    for i, v in enumerate(arr):
        if i == 0:
            result.append(float(v))
        else:
            result.append(float(v * k + result[i - 1] * (1 - k)))

    return result


# =============================================================================
# RSI (Wilder smoothing)
# =============================================================================

class _WilderState(NamedTuple):
    """Running gain/loss carried from one index to the next.

    Holds plain sums until the seed index, smoothed averages afterwards.
    """

    gain: float = 0.0
    loss: float = 0.0


def _rsi_from_averages(avg_gain: float, avg_loss: float) -> Decimal:
    rs = RS_ZERO_LOSS if avg_loss == 0 else avg_gain / avg_loss
    return round_price(100 - 100 / (1 + rs))


def _wilder_step(
    state: _WilderState, index: int, change: float, period: int
) -> tuple[_WilderState, Decimal | None]:
    """Fold one price change into the RSI state and emit the value at ``index``."""
    gain = change if change > 0 else 0.0
    loss = -change if change < 0 else 0.0

    if index < period:
        return _WilderState(state.gain + gain, state.loss + loss), None

    if index == period:
        avg_gain = (state.gain + gain) / period
        avg_loss = (state.loss + loss) / period
    else:
        avg_gain = (state.gain * (period - 1) + gain) / period
        avg_loss = (state.loss * (period - 1) + loss) / period

    return _WilderState(avg_gain, avg_loss), _rsi_from_averages(avg_gain, avg_loss)


def rsi(closes: Sequence[Decimal | float], period: int = 14) -> IndicatorSeries:
    """
    Calculate Relative Strength Index with Wilder smoothing.

    Index 0 and indices below ``period`` are ``None``. At ``period`` the
    averages are seeded from the plain sums; afterwards each average is
    smoothed from the previous index's average.

    A zero average loss uses a relative strength of 100, so a series that
    only rises settles at 99.01 rather than 100.

    Args:
        closes: Sequence of close prices, oldest first
        period: RSI period

    Returns:
        List of RSI values rounded to 2 places
    """
    _check_period(period)
    arr = _as_floats(closes)
    result: IndicatorSeries = [None] * len(arr)

    state = _WilderState()
    for i in range(1, len(arr)):
        state, result[i] = _wilder_step(state, i, float(arr[i] - arr[i - 1]), period)

    return result


# =============================================================================
# MACD
# =============================================================================

class MACDSeries(NamedTuple):
    """DIF, DEA and histogram series, each rounded to 2 places."""

    dif: list[Decimal]
    dea: list[Decimal]
    hist: list[Decimal]


def macd(
    closes: Sequence[Decimal | float],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MACDSeries:
    """
    MACD (Moving Average Convergence Divergence).

    DIF = round(EMA_fast - EMA_slow)
    DEA = round(EMA_signal(DIF))   (EMA over the rounded DIF)
    HIST = round((DIF - DEA) * 2)

    Returns: (dif, dea, hist)
    """
    fast_ema = ema(closes, fast_period)
    slow_ema = ema(closes, slow_period)

    dif = [round_price(f - s) for f, s in zip(fast_ema, slow_ema)]
    dea = [round_price(v) for v in ema(dif, signal_period)]
    hist = [round_price((float(d) - float(s)) * 2) for d, s in zip(dif, dea)]

    return MACDSeries(dif, dea, hist)


# =============================================================================
# IndicatorCalculator class
# =============================================================================

def value_at(series: Sequence[Decimal | None], offset: int = 1) -> Decimal | None:
    """Value ``offset`` positions from the end, ``None`` if out of range."""
    if offset < 1 or len(series) < offset:
        return None
    return series[-offset]


class IndicatorCalculator:
    """Calculator for all indicators used by the reports and the scorer."""

    def __init__(self, config: IndicatorConfig = DEFAULT_INDICATOR_CONFIG):
        self.config = config

    def calculate_all(self, closes: Sequence[Decimal]) -> dict[str, list]:
        """
        Calculate every indicator series for the given closes.

        Args:
            closes: Close prices, oldest first

        Returns:
            Dict of series aligned with ``closes``
        """
        ma_fast, ma_mid, ma_slow = self.config.ma_periods
        macd_series = macd(
            closes,
            self.config.macd_fast,
            self.config.macd_slow,
            self.config.macd_signal,
        )

        return {
            "ma5": sma(closes, ma_fast),
            "ma10": sma(closes, ma_mid),
            "ma20": sma(closes, ma_slow),
            "rsi14": rsi(closes, self.config.rsi_period),
            "macd_dif": macd_series.dif,
            "macd_dea": macd_series.dea,
            "macd_hist": macd_series.hist,
        }

    def calculate_latest(self, closes: Sequence[Decimal]) -> IndicatorSnapshot:
        """
        Calculate indicators for the latest bar only.

        An empty sequence yields a snapshot with every field ``None``.
        """
        if not closes:
            return IndicatorSnapshot()

        series = self.calculate_all(closes)

        return IndicatorSnapshot(
            price=closes[-1],
            ma5=value_at(series["ma5"]),
            ma10=value_at(series["ma10"]),
            ma20=value_at(series["ma20"]),
            rsi14=value_at(series["rsi14"]),
            macd_dif=value_at(series["macd_dif"]),
            macd_dea=value_at(series["macd_dea"]),
            macd_hist=value_at(series["macd_hist"]),
            prev_macd_dif=value_at(series["macd_dif"], 2),
            prev_macd_dea=value_at(series["macd_dea"], 2),
            prev_macd_hist=value_at(series["macd_hist"], 2),
        )
