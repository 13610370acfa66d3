"""Detector suite.

Public API:
- Detector: Protocol that all detectors implement
- BaseDetector: Base class providing the fault boundary
- DetectorSuite / run_all_detectors: evaluate every detector in order
"""

from signal_core.detectors.protocol import (
    INSUFFICIENT_DATA,
    BaseDetector,
    Detector,
    InsufficientData,
)
from signal_core.detectors.momentum_breakout import MomentumBreakoutDetector
from signal_core.detectors.vwap_pullback import VwapPullbackDetector
from signal_core.detectors.volatility_squeeze import VolatilitySqueezeDetector
from signal_core.detectors.orderbook_sweep import OrderbookSweepDetector
from signal_core.detectors.rsi_momentum import RsiMomentumDetector
from signal_core.detectors.volume_spike import VolumeSpikeDetector
from signal_core.detectors.correlation_break import CorrelationBreakDetector
from signal_core.detectors.suite import DEFAULT_DETECTORS, DetectorSuite, run_all_detectors

__all__ = [
    "INSUFFICIENT_DATA",
    "BaseDetector",
    "Detector",
    "InsufficientData",
    "MomentumBreakoutDetector",
    "VwapPullbackDetector",
    "VolatilitySqueezeDetector",
    "OrderbookSweepDetector",
    "RsiMomentumDetector",
    "VolumeSpikeDetector",
    "CorrelationBreakDetector",
    "DEFAULT_DETECTORS",
    "DetectorSuite",
    "run_all_detectors",
]
