"""Detector suite: runs every registered detector over one snapshot.

Detectors are registered explicitly in a fixed order. The order only
affects the order of verdicts in the explain payload, never the score.
"""

from __future__ import annotations

import logging
from typing import Iterable

from signal_core.detectors.correlation_break import CorrelationBreakDetector
from signal_core.detectors.momentum_breakout import MomentumBreakoutDetector
from signal_core.detectors.orderbook_sweep import OrderbookSweepDetector
from signal_core.detectors.protocol import Detector
from signal_core.detectors.rsi_momentum import RsiMomentumDetector
from signal_core.detectors.volatility_squeeze import VolatilitySqueezeDetector
from signal_core.detectors.volume_spike import VolumeSpikeDetector
from signal_core.detectors.vwap_pullback import VwapPullbackDetector
from signal_core.models import DetectorConfig, DetectorVerdict, MarketSnapshot

logger = logging.getLogger(__name__)

DEFAULT_DETECTORS: tuple[type, ...] = (
    MomentumBreakoutDetector,
    VwapPullbackDetector,
    VolatilitySqueezeDetector,
    OrderbookSweepDetector,
    RsiMomentumDetector,
    VolumeSpikeDetector,
    CorrelationBreakDetector,
)


class DetectorSuite:
    """Ordered, immutable collection of detectors."""

    def __init__(self, detectors: Iterable[Detector] | None = None):
        if detectors is None:
            detectors = [cls() for cls in DEFAULT_DETECTORS]
        self._detectors: tuple[Detector, ...] = tuple(detectors)

        names = [d.name for d in self._detectors]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise ValueError(f"Duplicate detector names: {', '.join(sorted(duplicates))}")

    @property
    def names(self) -> list[str]:
        return [d.name for d in self._detectors]

    def __len__(self) -> int:
        return len(self._detectors)

    def run(self, snapshot: MarketSnapshot, config: DetectorConfig | None = None) -> list[DetectorVerdict]:
        """Evaluate every detector and attach its configured weight."""
        config = config or DetectorConfig()
        verdicts = []
        for detector in self._detectors:
            try:
                verdict = detector.evaluate(snapshot, config)
            except Exception as exc:
                logger.warning("Detector %s raised on %s: %s", detector.name, snapshot.symbol, exc)
                verdict = DetectorVerdict.neutral(
                    detector.name, f"Detector error: {exc}", family=detector.family
                )
            verdicts.append(verdict.with_weight(config.weight_for(detector.name)))

        logger.debug(
            "%s: %d/%d detectors directional",
            snapshot.symbol,
            sum(1 for v in verdicts if v.is_directional),
            len(verdicts),
        )
        return verdicts


def run_all_detectors(
    snapshot: MarketSnapshot,
    config: DetectorConfig | None = None,
) -> list[DetectorVerdict]:
    """Run the default detector suite over a snapshot."""
    return DetectorSuite().run(snapshot, config)
