"""Snapshot, verdict, decision and configuration models."""

from signal_core.models.snapshot import (
    TF_1M,
    TF_15M,
    TF_1H,
    TF_4H,
    TIMEFRAMES,
    Candle,
    MarketSnapshot,
    OrderBook,
    Ticker,
)
from signal_core.models.signal import (
    AgreementStats,
    Decision,
    DecisionDirection,
    DecisionExplain,
    DetectorVerdict,
    Direction,
    MetaScoreBreakdown,
    PositionSizing,
    TradeLevels,
)
from signal_core.models.config import (
    DEFAULT_DETECTOR_WEIGHTS,
    DEFAULT_TIME_OF_DAY_MULTIPLIERS,
    DEFAULT_TIMEZONE,
    CorrelationBreakParams,
    DetectorConfig,
    EnsembleConfig,
    LevelsConfig,
    MomentumBreakoutParams,
    OrderbookSweepParams,
    RiskConfig,
    RsiMomentumParams,
    VolatilitySqueezeParams,
    VolumeSpikeParams,
    VwapPullbackParams,
    parse_hour_range,
)

__all__ = [
    "TF_1M",
    "TF_15M",
    "TF_1H",
    "TF_4H",
    "TIMEFRAMES",
    "Candle",
    "MarketSnapshot",
    "OrderBook",
    "Ticker",
    "AgreementStats",
    "Decision",
    "DecisionDirection",
    "DecisionExplain",
    "DetectorVerdict",
    "Direction",
    "MetaScoreBreakdown",
    "PositionSizing",
    "TradeLevels",
    "DEFAULT_DETECTOR_WEIGHTS",
    "DEFAULT_TIME_OF_DAY_MULTIPLIERS",
    "DEFAULT_TIMEZONE",
    "CorrelationBreakParams",
    "DetectorConfig",
    "EnsembleConfig",
    "LevelsConfig",
    "MomentumBreakoutParams",
    "OrderbookSweepParams",
    "RiskConfig",
    "RsiMomentumParams",
    "VolatilitySqueezeParams",
    "VolumeSpikeParams",
    "VwapPullbackParams",
    "parse_hour_range",
]
