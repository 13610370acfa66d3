"""Ensemble decision: aggregation, time-of-day weighting, levels and sizing."""

from signal_core.ensemble.aggregator import EnsembleAggregator
from signal_core.ensemble.features import build_feature_vector
from signal_core.ensemble.levels import LevelsGenerator
from signal_core.ensemble.sizing import PositionSizer
from signal_core.ensemble.time_of_day import Clock, TimeOfDayTable, hour_in_range, local_clock

__all__ = [
    "EnsembleAggregator",
    "build_feature_vector",
    "LevelsGenerator",
    "PositionSizer",
    "Clock",
    "TimeOfDayTable",
    "hour_in_range",
    "local_clock",
]
