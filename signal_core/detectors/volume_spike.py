"""Volume spike detector.

A spike alone is not enough: the current 15m candle must also close
beyond the previous close and on the same side of its own midpoint.
"""

from __future__ import annotations

import numpy as np

from signal_core.detectors.protocol import BaseDetector
from signal_core.indicators import z_score
from signal_core.models import TF_15M, DetectorConfig, DetectorVerdict, Direction, MarketSnapshot


class VolumeSpikeDetector(BaseDetector):
    """Abnormal 15m volume with directional confirmation."""

    name = "volume_spike"
    family = "volume"

    def detect(self, snapshot: MarketSnapshot, config: DetectorConfig) -> DetectorVerdict:
        params = config.volume_spike
        candles = snapshot.get(TF_15M)
        self.require(len(candles) >= max(params.window, 2))

        current = candles[-1]
        prev_close = candles[-2].close
        volumes = [c.volume for c in candles[-params.window:]]
        volume_z = z_score(current.volume, volumes)
        price_change = (current.close - prev_close) / prev_close * 100

        is_bullish = current.close > prev_close and current.close > current.midpoint
        is_bearish = current.close < prev_close and current.close < current.midpoint

        metadata = {
            "volume_z_score": volume_z,
            "price_change": price_change,
            "current_volume": current.volume,
            "avg_volume": float(np.mean(volumes)),
        }

        if volume_z <= params.z_threshold:
            return self.neutral("No significant volume spike", metadata)

        if is_bullish:
            return self.verdict(
                min(100.0, volume_z * 20 + max(price_change, 0.0) * 10),
                Direction.LONG,
                f"Bullish volume spike: z-score {volume_z:.2f}, price +{price_change:.2f}%",
                metadata,
            )
        if is_bearish:
            return self.verdict(
                min(100.0, volume_z * 20 + abs(price_change) * 10),
                Direction.SHORT,
                f"Bearish volume spike: z-score {volume_z:.2f}, price {price_change:.2f}%",
                metadata,
            )

        return self.neutral(f"Volume spike (z: {volume_z:.2f}) but no clear direction", metadata)
