"""Volatility squeeze detector.

Flags a squeeze when the current Bollinger width on 15m sits at or below
the 10th percentile of every earlier window's width, then takes the
direction of a band breach confirmed by volume.
"""

from __future__ import annotations

from signal_core.detectors.protocol import BaseDetector
from signal_core.indicators import bollinger_bands, percentile_value, z_score
from signal_core.models import TF_15M, DetectorConfig, DetectorVerdict, Direction, MarketSnapshot


def historical_widths(closes: list[float], period: int, std_dev: float) -> list[float]:
    """Bollinger widths of every complete window before the current one."""
    widths = []
    for end in range(period, len(closes)):
        bands = bollinger_bands(closes[end - period:end], period, std_dev)
        if bands is not None:
            widths.append(bands.width)
    return widths


class VolatilitySqueezeDetector(BaseDetector):
    """Bollinger squeeze breakout."""

    name = "volatility_squeeze"
    family = "volatility"

    def detect(self, snapshot: MarketSnapshot, config: DetectorConfig) -> DetectorVerdict:
        params = config.volatility_squeeze
        candles = snapshot.get(TF_15M)
        self.require(len(candles) >= params.bb_period + 10)

        closes = [c.close for c in candles]
        bands = bollinger_bands(closes, params.bb_period, params.bb_std_dev)
        self.require(bands is not None and bands.middle != 0, "Cannot calculate Bollinger Bands")

        width = bands.width
        threshold = percentile_value(
            historical_widths(closes, params.bb_period, params.bb_std_dev),
            params.squeeze_percentile,
        )
        is_squeeze = threshold > 0 and width <= threshold

        price = closes[-1]
        above_upper = price > bands.upper
        below_lower = price < bands.lower

        volumes = [c.volume for c in candles]
        volume_z = z_score(volumes[-1], volumes[-params.volume_window:])
        squeeze_strength = (threshold - width) / threshold * 100 if is_squeeze else 0.0

        metadata = {
            "bb_width": width,
            "low_percentile_width": threshold,
            "squeeze_strength": squeeze_strength,
            "volume_z_score": volume_z,
        }

        if is_squeeze and (above_upper or below_lower) and volume_z > params.volume_z_threshold:
            volume_strength = min(volume_z, 3.0) / 3.0 * 100
            direction = Direction.LONG if above_upper else Direction.SHORT
            return self.verdict(
                min(100.0, squeeze_strength * 0.5 + volume_strength * 0.5),
                direction,
                f"Volatility squeeze breakout: {direction.value} with volume z-score {volume_z:.2f}",
                metadata,
            )

        return self.neutral("No volatility squeeze setup", metadata)
