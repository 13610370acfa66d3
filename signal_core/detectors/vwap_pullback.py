"""VWAP pullback detector (LONG only).

Looks for price holding just above the 1m VWAP with a bullish reversal
bar and a volume uptick. There is no SHORT counterpart.
"""

from __future__ import annotations

import numpy as np

from signal_core.detectors.protocol import BaseDetector
from signal_core.indicators import vwap
from signal_core.models import TF_1M, DetectorConfig, DetectorVerdict, Direction, MarketSnapshot


class VwapPullbackDetector(BaseDetector):
    """Pullback into VWAP from above."""

    name = "vwap_pullback"
    family = "vwap"

    def detect(self, snapshot: MarketSnapshot, config: DetectorConfig) -> DetectorVerdict:
        params = config.vwap_pullback
        candles = snapshot.get(TF_1M)
        self.require(len(candles) >= params.vwap_window)

        current = candles[-1]
        vwap_value = vwap(candles[-params.vwap_window:])
        self.require(vwap_value > 0, "VWAP unavailable (zero volume)")

        price = current.close
        distance_pct = (price - vwap_value) / vwap_value * 100
        is_above = price > vwap_value
        is_near = abs(price - vwap_value) / vwap_value <= params.vwap_delta
        is_reversal = current.is_bullish and current.close > current.midpoint

        avg_volume = float(np.mean([c.volume for c in candles[-params.volume_window:]]))
        volume_ratio = current.volume / avg_volume if avg_volume > 0 else 0.0
        has_uptick = volume_ratio > params.volume_uptick

        metadata = {
            "vwap": vwap_value,
            "current_price": price,
            "vwap_distance": distance_pct,
            "volume_ratio": volume_ratio,
        }

        if is_above and is_near and is_reversal and has_uptick:
            volume_strength = min(volume_ratio, 3.0) / 3.0 * 100
            reversal_bps = (current.close - current.open) / current.open * 10_000
            score = min(100.0, abs(distance_pct) * 20 + volume_strength * 0.3 + reversal_bps * 2)
            return self.verdict(
                score,
                Direction.LONG,
                f"VWAP pullback: {distance_pct:.3f}% distance, volume {volume_ratio:.1f}x",
                metadata,
            )

        return self.neutral("No VWAP pullback setup", metadata)
