"""Ensemble configuration loaded from ensemble.yaml.

Supports:
- Detector weights and per-detector parameters
- Time-of-day multiplier table (ordered "HH-HH" ranges, wraparound allowed)
- Decision thresholds, optionally overridden by environment settings
- Backward compatible: no YAML file = built-in defaults
"""

import logging
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, model_validator

from signal_core.models import (
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

logger = logging.getLogger(__name__)


class DetectorParamsEntry(BaseModel):
    """The ``detectors:`` section of the YAML config."""

    model_config = ConfigDict(extra="forbid")

    momentum_breakout: MomentumBreakoutParams = Field(default_factory=MomentumBreakoutParams)
    vwap_pullback: VwapPullbackParams = Field(default_factory=VwapPullbackParams)
    volatility_squeeze: VolatilitySqueezeParams = Field(default_factory=VolatilitySqueezeParams)
    orderbook_sweep: OrderbookSweepParams = Field(default_factory=OrderbookSweepParams)
    rsi_momentum: RsiMomentumParams = Field(default_factory=RsiMomentumParams)
    volume_spike: VolumeSpikeParams = Field(default_factory=VolumeSpikeParams)
    correlation_break: CorrelationBreakParams = Field(default_factory=CorrelationBreakParams)


class EnsembleFileConfig(BaseModel):
    """Top-level ensemble.yaml configuration."""

    model_config = ConfigDict(extra="forbid")

    min_confidence: float = 60.0
    min_detector_agreement: int = 2
    material_score_threshold: float = 40.0
    timezone: str = DEFAULT_TIMEZONE
    weights: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_DETECTOR_WEIGHTS))
    time_of_day: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_TIME_OF_DAY_MULTIPLIERS)
    )
    detectors: DetectorParamsEntry = Field(default_factory=DetectorParamsEntry)
    levels: LevelsConfig = Field(default_factory=LevelsConfig)
    risk: RiskConfig = Field(default_factory=RiskConfig)

    @model_validator(mode="after")
    def _validate(self):
        unknown = set(self.weights) - set(DEFAULT_DETECTOR_WEIGHTS)
        if unknown:
            raise ValueError(f"weights reference unknown detectors: {', '.join(sorted(unknown))}")
        for key in self.time_of_day:
            parse_hour_range(key)
        return self

    def to_ensemble_config(self) -> EnsembleConfig:
        return EnsembleConfig(
            min_confidence=self.min_confidence,
            min_detector_agreement=self.min_detector_agreement,
            time_of_day_multiplier=dict(self.time_of_day),
            material_score_threshold=self.material_score_threshold,
            timezone=self.timezone,
        )

    def to_detector_config(self) -> DetectorConfig:
        return DetectorConfig(
            weights=dict(self.weights),
            **{name: getattr(self.detectors, name) for name in DetectorParamsEntry.model_fields},
        )


def load_ensemble_config(path: Path | str | None = None) -> EnsembleFileConfig:
    """Load ensemble config from YAML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    """
    if not path:
        return EnsembleFileConfig()

    config_path = Path(path)
    load_dotenv(config_path.parent / ".env", override=False)

    if not config_path.exists():
        logger.info("No ensemble config found at %s, using defaults", config_path)
        return EnsembleFileConfig()

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    config = EnsembleFileConfig(**raw)
    logger.info(
        "Loaded ensemble config: min_confidence=%.1f, min_agreement=%d, %d time ranges",
        config.min_confidence,
        config.min_detector_agreement,
        len(config.time_of_day),
    )
    return config
