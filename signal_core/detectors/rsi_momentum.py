"""Dual-timeframe RSI extreme detector.

Both the 15m and 1h RSI must agree: oversold on both -> LONG, overbought
on both -> SHORT.
"""

from __future__ import annotations

from signal_core.detectors.protocol import BaseDetector
from signal_core.indicators import rsi
from signal_core.models import TF_15M, TF_1H, DetectorConfig, DetectorVerdict, Direction, MarketSnapshot


class RsiMomentumDetector(BaseDetector):
    """RSI(14) extremes confirmed on 15m and 1h."""

    name = "rsi_momentum"
    family = "rsi"

    def detect(self, snapshot: MarketSnapshot, config: DetectorConfig) -> DetectorVerdict:
        params = config.rsi_momentum
        closes_15m = snapshot.closes(TF_15M)
        closes_1h = snapshot.closes(TF_1H)
        self.require(
            len(closes_15m) >= params.period + 1 and len(closes_1h) >= params.period + 1
        )

        rsi_15m = rsi(closes_15m, params.period)
        rsi_1h = rsi(closes_1h, params.period)
        metadata = {"rsi_15m": rsi_15m, "rsi_1h": rsi_1h}

        if rsi_15m < params.oversold and rsi_1h < params.oversold:
            distance = ((params.oversold - rsi_15m) + (params.oversold - rsi_1h)) / 2
            return self.verdict(
                min(100.0, params.base_score + distance * params.score_per_point),
                Direction.LONG,
                f"RSI oversold on 15m ({rsi_15m:.1f}) and 1h ({rsi_1h:.1f})",
                metadata,
            )

        if rsi_15m > params.overbought and rsi_1h > params.overbought:
            distance = ((rsi_15m - params.overbought) + (rsi_1h - params.overbought)) / 2
            return self.verdict(
                min(100.0, params.base_score + distance * params.score_per_point),
                Direction.SHORT,
                f"RSI overbought on 15m ({rsi_15m:.1f}) and 1h ({rsi_1h:.1f})",
                metadata,
            )

        return self.neutral("RSI not extreme on both timeframes", metadata)
