"""Detector, ensemble and risk configuration models.

All configuration is frozen after construction and safe to share between
concurrent analyses.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Aggregation weight per detector name
DEFAULT_DETECTOR_WEIGHTS: dict[str, float] = {
    "momentum_breakout": 1.2,
    "vwap_pullback": 1.1,
    "volatility_squeeze": 1.0,
    "orderbook_sweep": 0.9,
    "rsi_momentum": 0.8,
    "volume_spike": 1.0,
    "correlation_break": 0.7,
}

# Local hour ranges "start-end" (end exclusive) -> confidence multiplier.
# A range with start > end wraps past midnight.
DEFAULT_TIME_OF_DAY_MULTIPLIERS: dict[str, float] = {
    "04-10": 1.1,  # early Asia
    "10-16": 1.0,  # late Asia / early Europe
    "16-20": 0.9,  # Europe / US overlap
    "20-23": 0.8,  # late US
    "23-04": 0.3,  # late night
}

DEFAULT_TIMEZONE = "Asia/Ho_Chi_Minh"

_HOUR_RANGE = re.compile(r"^\s*(\d{1,2})\s*[-–]\s*(\d{1,2})\s*$")


def parse_hour_range(key: str) -> tuple[int, int]:
    """Parse "HH-HH" into (start, end) hours.

    Raises:
        ValueError: If the key is malformed or an hour is outside 0..24.
    """
    match = _HOUR_RANGE.match(key)
    if match is None:
        raise ValueError(f"Invalid hour range '{key}' (expected 'HH-HH')")
    start, end = int(match.group(1)), int(match.group(2))
    if not (0 <= start <= 24 and 0 <= end <= 24):
        raise ValueError(f"Hour range '{key}' out of bounds")
    return start, end


# =============================================================================
# Detector parameters
# =============================================================================

class _Params(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class MomentumBreakoutParams(_Params):
    breakout_period: int = 20
    volume_multiplier: float = 1.5
    min_breakout_pct: float = 1.0
    volume_z_threshold: float = 1.0
    breakdown_factor: float = 0.99


class VwapPullbackParams(_Params):
    vwap_window: int = 50
    vwap_delta: float = 0.002  # max distance from VWAP as a fraction
    volume_window: int = 10
    volume_uptick: float = 1.2


class VolatilitySqueezeParams(_Params):
    bb_period: int = 20
    bb_std_dev: float = 2.0
    squeeze_percentile: float = 10.0
    volume_window: int = 20
    volume_z_threshold: float = 0.5


class OrderbookSweepParams(_Params):
    depth: int = 3
    imbalance_threshold: float = 0.3
    score_multiplier: float = 150.0


class RsiMomentumParams(_Params):
    period: int = 14
    oversold: float = 30.0
    overbought: float = 70.0
    base_score: float = 50.0
    score_per_point: float = 2.5


class VolumeSpikeParams(_Params):
    window: int = 20
    z_threshold: float = 2.0


class CorrelationBreakParams(_Params):
    lookback_period: int = 24
    recent_window: int = 5
    volatility_ratio: float = 2.0


class DetectorConfig(_Params):
    """Parameters for every detector plus the weights attached to verdicts."""

    weights: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_DETECTOR_WEIGHTS))
    momentum_breakout: MomentumBreakoutParams = Field(default_factory=MomentumBreakoutParams)
    vwap_pullback: VwapPullbackParams = Field(default_factory=VwapPullbackParams)
    volatility_squeeze: VolatilitySqueezeParams = Field(default_factory=VolatilitySqueezeParams)
    orderbook_sweep: OrderbookSweepParams = Field(default_factory=OrderbookSweepParams)
    rsi_momentum: RsiMomentumParams = Field(default_factory=RsiMomentumParams)
    volume_spike: VolumeSpikeParams = Field(default_factory=VolumeSpikeParams)
    correlation_break: CorrelationBreakParams = Field(default_factory=CorrelationBreakParams)

    def weight_for(self, name: str) -> float:
        return self.weights.get(name, 1.0)


# =============================================================================
# Ensemble / levels / risk
# =============================================================================

class EnsembleConfig(_Params):
    """Immutable configuration of the ensemble aggregator."""

    min_confidence: float = Field(default=60.0, ge=0.0, le=100.0)
    min_detector_agreement: int = Field(default=2, ge=1)
    time_of_day_multiplier: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_TIME_OF_DAY_MULTIPLIERS)
    )
    # Verdicts at or below this score do not count toward agreement
    material_score_threshold: float = 40.0
    confluence_bonus_per_family: float = 5.0
    max_confluence_bonus: float = 20.0
    timezone: str = DEFAULT_TIMEZONE

    @field_validator("time_of_day_multiplier")
    @classmethod
    def _check_ranges(cls, value: dict[str, float]) -> dict[str, float]:
        for key in value:
            parse_hour_range(key)
        return value


class LevelsConfig(_Params):
    """Entry / stop / target generation parameters."""

    atr_period: int = 14
    atr_timeframes: tuple[str, ...] = ("15m", "1h", "4h")
    min_atr_bars: int = 15
    default_atr_pct: float = 0.02
    sl_atr_mult: float = 0.8
    rr_ratio: float = 1.5
    entry_nudge_pct: float = 0.1
    entry_detector_min_score: float = 50.0
    strong_score: float = 70.0
    tp_expansion_pct: float = 10.0
    expansion_families: tuple[str, ...] = ("momentum", "volume")
    min_bars_15m: int = 10
    fallback_risk_pct: float = 2.0


class RiskConfig(_Params):
    """Risk-account configuration for position sizing."""

    balance: float = Field(default=1000.0, ge=0.0)
    risk_percent: float = Field(default=2.0, ge=0.0, le=100.0)
