"""Flat feature vector describing one analysis, for external models."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from signal_core.ensemble.levels import LevelsGenerator
from signal_core.models import TF_15M, DetectorVerdict, Direction, MarketSnapshot

_DIRECTION_SIGN = {Direction.LONG: 1, Direction.SHORT: -1, Direction.NEUTRAL: 0}


def build_feature_vector(
    verdicts: Sequence[DetectorVerdict],
    snapshot: MarketSnapshot,
    when: datetime,
    levels: LevelsGenerator | None = None,
) -> dict[str, float]:
    """Detector scores and signed directions plus market and time features."""
    features: dict[str, float] = {}
    for verdict in verdicts:
        features[f"detector_{verdict.name}"] = verdict.score
        features[f"detector_{verdict.name}_direction"] = _DIRECTION_SIGN[verdict.direction]

    candles = snapshot.get(TF_15M)
    price = snapshot.last_price
    atr_pct = (levels or LevelsGenerator()).average_atr_pct(snapshot)

    features["price"] = price
    features["volume"] = candles[-1].volume if candles else 0.0
    features["atr"] = atr_pct * price
    features["volatility"] = atr_pct
    features["hour_of_day"] = when.hour
    features["day_of_week"] = when.weekday()
    return features
