"""Technical indicators and statistical primitives.

Every function here is pure and never raises on degenerate input:
short series, zero variance and zero risk distance all map to an explicit
fallback value (0, 50 or None) documented per function.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from signal_core.models.signal import PositionSizing
from signal_core.models.snapshot import Candle

# RSI value meaning "uncertain"
RSI_NEUTRAL = 50.0


@dataclass(slots=True, frozen=True)
class BollingerBands:
    """Bollinger Bands of the most recent window."""

    upper: float
    middle: float
    lower: float

    @property
    def width(self) -> float:
        """Band width relative to the middle band (0 if middle is 0)."""
        if self.middle == 0:
            return 0.0
        return (self.upper - self.lower) / self.middle


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=np.float64)


# =============================================================================
# Price indicators
# =============================================================================

def true_range(candles: Sequence[Candle]) -> list[float]:
    """
    Calculate True Range for every candle after the first.

    TR = max(high - low, abs(high - prev_close), abs(low - prev_close))
    """
    result = []
    for prev, cur in zip(candles, candles[1:]):
        result.append(max(
            cur.high - cur.low,
            abs(cur.high - prev.close),
            abs(cur.low - prev.close),
        ))
    return result


def atr(candles: Sequence[Candle], period: int = 14) -> float:
    """
    Calculate the latest Average True Range with Wilder's smoothing.

    Seed is the mean of the first ``period`` true ranges, then
    ``atr = (atr * (period - 1) + tr) / period``.

    Returns:
        ATR value, or 0.0 with fewer than ``period + 1`` candles.
    """
    if period <= 0 or len(candles) < period + 1:
        return 0.0

    tr = _as_array(true_range(candles))
    value = float(np.mean(tr[:period]))
    for tr_value in tr[period:]:
        value = (value * (period - 1) + float(tr_value)) / period
    return value


def vwap(candles: Sequence[Candle]) -> float:
    """
    Volume Weighted Average Price using typical price (h + l + c) / 3.

    Returns:
        VWAP, or 0.0 for empty input or zero total volume.
    """
    if not candles:
        return 0.0

    typical = _as_array([(c.high + c.low + c.close) / 3 for c in candles])
    volumes = _as_array([c.volume for c in candles])
    total_volume = float(volumes.sum())
    if total_volume <= 0:
        return 0.0
    return float((typical * volumes).sum() / total_volume)


def rsi(closes: Sequence[float], period: int = 14) -> float:
    """
    Latest Wilder RSI.

    Returns:
        RSI in [0, 100]; 50 on insufficient data or a numeric fault.
    """
    if period <= 0 or len(closes) < period + 1:
        return RSI_NEUTRAL

    with np.errstate(all="ignore"):
        deltas = np.diff(_as_array(closes))
        gains = np.where(deltas > 0, deltas, 0.0)
        losses = np.where(deltas < 0, -deltas, 0.0)

        avg_gain = float(np.mean(gains[:period]))
        avg_loss = float(np.mean(losses[:period]))
        for gain, loss in zip(gains[period:], losses[period:]):
            avg_gain = (avg_gain * (period - 1) + float(gain)) / period
            avg_loss = (avg_loss * (period - 1) + float(loss)) / period

    if not (math.isfinite(avg_gain) and math.isfinite(avg_loss)):
        return RSI_NEUTRAL
    if avg_loss == 0:
        return 100.0 if avg_gain > 0 else RSI_NEUTRAL

    rs = avg_gain / avg_loss
    value = 100.0 - 100.0 / (1.0 + rs)
    return value if math.isfinite(value) else RSI_NEUTRAL


def bollinger_bands(
    closes: Sequence[float],
    period: int = 20,
    std_dev: float = 2.0,
) -> BollingerBands | None:
    """
    Bollinger Bands over the last ``period`` closes (population std).

    Returns:
        BollingerBands, or None with fewer than ``period`` closes.
    """
    if period <= 0 or len(closes) < period:
        return None

    window = _as_array(closes[-period:])
    middle = float(window.mean())
    sd = float(window.std())
    if not (math.isfinite(middle) and math.isfinite(sd)):
        return None
    return BollingerBands(
        upper=middle + std_dev * sd,
        middle=middle,
        lower=middle - std_dev * sd,
    )


# =============================================================================
# Statistics
# =============================================================================

def z_score(value: float, series: Sequence[float]) -> float:
    """
    Standardised deviation of ``value`` from the series mean.

    Returns:
        (value - mean) / std, or 0.0 for an empty or constant series
        (no signal). Never NaN or infinite.
    """
    if len(series) == 0:
        return 0.0

    arr = _as_array(series)
    sd = float(arr.std())
    if sd == 0 or not math.isfinite(sd):
        return 0.0
    result = (value - float(arr.mean())) / sd
    return result if math.isfinite(result) else 0.0


def correlation(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Pearson correlation of two equal-length series.

    Returns:
        Correlation in [-1, 1]; 0.0 if lengths differ, fewer than two
        points, or either series is constant.
    """
    if len(a) != len(b) or len(a) < 2:
        return 0.0

    x = _as_array(a)
    y = _as_array(b)
    dx = x - x.mean()
    dy = y - y.mean()
    denominator = math.sqrt(float((dx * dx).sum()) * float((dy * dy).sum()))
    if denominator == 0 or not math.isfinite(denominator):
        return 0.0
    return float((dx * dy).sum()) / denominator


def percentile_value(series: Sequence[float], pct: float) -> float:
    """
    Element at index floor(n * pct / 100) of the sorted series.

    Returns:
        The percentile element, or 0.0 for an empty series.
    """
    if len(series) == 0:
        return 0.0
    ordered = np.sort(_as_array(series))
    index = int(math.floor(len(ordered) * pct / 100))
    index = min(max(index, 0), len(ordered) - 1)
    return float(ordered[index])


def pct_returns(closes: Sequence[float]) -> list[float]:
    """Simple returns between consecutive closes (skips zero prices)."""
    return [
        (cur - prev) / prev
        for prev, cur in zip(closes, closes[1:])
        if prev != 0
    ]


# =============================================================================
# Risk arithmetic
# =============================================================================

def position_size(
    balance: float,
    risk_pct: float,
    entry: float,
    stop_loss: float,
) -> PositionSizing:
    """
    Size a position so that hitting the stop loses ``risk_pct`` of balance.

    size = (balance * risk_pct / 100) / |entry - stop_loss|

    Returns:
        PositionSizing with size rounded to 8 decimals and max_loss to 2;
        size=0 and max_loss=0 when entry equals stop_loss.
    """
    risk_per_unit = abs(entry - stop_loss)
    if risk_per_unit == 0:
        return PositionSizing(size=0.0, max_loss=0.0)

    risk_amount = balance * (risk_pct / 100)
    return PositionSizing(
        size=round(risk_amount / risk_per_unit, 8),
        max_loss=round(risk_amount, 2),
    )
