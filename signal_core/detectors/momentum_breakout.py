"""Momentum breakout detector.

- LONG: current 15m high clears the prior 20-bar high by min_breakout_pct
  with a volume spike
- SHORT: current close falls 1% below the prior 20-bar low with the same
  volume confirmation

The reported recent_high / recent_low are used downstream to adjust entry.
"""

from __future__ import annotations

import numpy as np

from signal_core.detectors.protocol import BaseDetector
from signal_core.indicators import z_score
from signal_core.models import TF_15M, DetectorConfig, DetectorVerdict, Direction, MarketSnapshot


class MomentumBreakoutDetector(BaseDetector):
    """Breakout / breakdown of the trailing 15m range on volume."""

    name = "momentum_breakout"
    family = "momentum"

    def detect(self, snapshot: MarketSnapshot, config: DetectorConfig) -> DetectorVerdict:
        params = config.momentum_breakout
        period = params.breakout_period
        candles = snapshot.get(TF_15M)
        self.require(len(candles) >= period + 5)

        current = candles[-1]
        prior = candles[-period - 1:-1]
        recent_high = max(c.high for c in prior)
        recent_low = min(c.low for c in prior)

        volumes = [c.volume for c in candles[-period:]]
        volume_ma = float(np.mean(volumes))
        volume_z = z_score(current.volume, volumes)

        breakout_pct = (current.high - recent_high) / recent_high * 100
        is_breakout = current.high >= recent_high * (1 + params.min_breakout_pct / 100)
        has_volume_spike = (
            volume_z > params.volume_z_threshold
            and current.volume > volume_ma * params.volume_multiplier
        )

        metadata = {
            "recent_high": recent_high,
            "recent_low": recent_low,
            "volume_z_score": volume_z,
            "breakout_pct": breakout_pct if is_breakout else 0.0,
        }

        if is_breakout and has_volume_spike:
            volume_strength = min(volume_z, 3.0) / 3.0 * 100
            score = min(100.0, (breakout_pct * 0.6 + volume_strength * 0.4) * 2)
            return self.verdict(
                score,
                Direction.LONG,
                f"Breakout: +{breakout_pct:.2f}% with volume spike (z: {volume_z:.2f})",
                metadata,
            )

        if current.close < recent_low * params.breakdown_factor and has_volume_spike:
            breakdown_pct = (recent_low - current.close) / recent_low * 100
            return self.verdict(
                min(100.0, breakdown_pct * 1.5),
                Direction.SHORT,
                f"Breakdown: -{breakdown_pct:.2f}% with volume spike (z: {volume_z:.2f})",
                metadata,
            )

        return self.neutral("No breakout detected", metadata)
