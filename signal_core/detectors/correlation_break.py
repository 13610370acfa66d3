"""Volatility regime-break detector on 1h returns.

A break is flagged when the volatility of the last few hourly returns is
more than ``volatility_ratio`` times the volatility of the whole series.
The verdict fades the recent move: a burst up is scored SHORT, a burst
down LONG, and a net-zero burst stays NEUTRAL.
"""

from __future__ import annotations

import numpy as np

from signal_core.detectors.protocol import BaseDetector
from signal_core.indicators import correlation, pct_returns
from signal_core.models import TF_1H, DetectorConfig, DetectorVerdict, Direction, MarketSnapshot


class CorrelationBreakDetector(BaseDetector):
    """Recent vs historical hourly volatility."""

    name = "correlation_break"
    family = "correlation"

    def detect(self, snapshot: MarketSnapshot, config: DetectorConfig) -> DetectorVerdict:
        params = config.correlation_break
        closes = snapshot.closes(TF_1H)
        self.require(
            len(closes) >= params.lookback_period * 2,
            "Insufficient data for correlation analysis",
        )

        returns = pct_returns(closes)
        self.require(len(returns) > params.recent_window)

        recent = returns[-params.recent_window:]
        recent_vol = float(np.std(recent))
        historical_vol = float(np.std(returns))
        ratio = recent_vol / historical_vol if historical_vol > 0 else 0.0
        recent_move = float(np.sum(recent))

        window = returns[-params.lookback_period:]
        metadata = {
            "recent_volatility": recent_vol,
            "historical_volatility": historical_vol,
            "volatility_ratio": ratio,
            "recent_return": recent_move * 100,
            "return_autocorrelation": correlation(window[:-1], window[1:]),
        }

        if ratio <= params.volatility_ratio:
            return self.neutral("Normal volatility regime", metadata)

        score = min(100.0, (ratio - 1) * 50)
        if recent_move > 0:
            direction = Direction.SHORT
        elif recent_move < 0:
            direction = Direction.LONG
        else:
            return self.neutral(f"Volatility regime break ({ratio:.2f}x) without net move", metadata)

        return self.verdict(
            score,
            direction,
            f"Volatility regime break ({ratio:.2f}x), fading {recent_move * 100:+.2f}% move",
            metadata,
        )
