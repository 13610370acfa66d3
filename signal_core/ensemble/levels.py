"""Entry / stop-loss / take-profit generation.

Stop distance comes from multi-timeframe ATR expressed as a fraction of
price:
- SL = entry -/+ sl_atr_mult * atr_pct * price
- TP = entry +/- rr_ratio * risk, expanded by tp_expansion_pct when a
  momentum or volume detector on the same side is strong

With too little 15m history the generator falls back to a fixed
percentage risk band at the same reward ratio.
"""

from __future__ import annotations

import logging
from typing import Sequence

from signal_core.indicators import atr
from signal_core.models import (
    TF_15M,
    DetectorVerdict,
    Direction,
    LevelsConfig,
    MarketSnapshot,
    TradeLevels,
)

logger = logging.getLogger(__name__)

PRICE_DECIMALS = 6


class LevelsGenerator:
    """Derives trade levels from the decision direction and volatility."""

    def __init__(self, config: LevelsConfig | None = None):
        self.config = config or LevelsConfig()

    def average_atr_pct(self, snapshot: MarketSnapshot) -> float:
        """Mean ATR / last close over the configured timeframes.

        Timeframes with fewer than ``min_atr_bars`` candles are skipped;
        returns ``default_atr_pct`` when none qualify.
        """
        values = []
        for timeframe in self.config.atr_timeframes:
            candles = snapshot.get(timeframe)
            if len(candles) < self.config.min_atr_bars:
                continue
            last_close = candles[-1].close
            if last_close <= 0:
                continue
            values.append(atr(candles, self.config.atr_period) / last_close)

        if not values:
            return self.config.default_atr_pct
        return sum(values) / len(values)

    def generate(
        self,
        direction: Direction,
        price: float,
        snapshot: MarketSnapshot,
        verdicts: Sequence[DetectorVerdict] = (),
    ) -> TradeLevels:
        """Build levels for a LONG or SHORT decision at ``price``.

        Raises:
            ValueError: If direction is NEUTRAL.
        """
        if direction == Direction.NEUTRAL:
            raise ValueError("Cannot generate levels for a NEUTRAL direction")

        if len(snapshot.get(TF_15M)) < self.config.min_bars_15m:
            return self._fallback(direction, price)

        is_long = direction == Direction.LONG
        cfg = self.config
        agreeing = sorted(
            (v for v in verdicts if v.direction == direction),
            key=lambda v: v.score,
            reverse=True,
        )

        entry = self._entry(direction, price, agreeing)

        atr_pct = self.average_atr_pct(snapshot)
        sl_distance = cfg.sl_atr_mult * atr_pct * price
        stop_loss = entry - sl_distance if is_long else entry + sl_distance
        risk = abs(entry - stop_loss)

        tp_distance = risk * cfg.rr_ratio
        take_profit = entry + tp_distance if is_long else entry - tp_distance

        strong = any(
            v.score > cfg.strong_score and v.family in cfg.expansion_families
            for v in agreeing
        )
        if strong:
            expansion = cfg.tp_expansion_pct / 100
            take_profit *= (1 + expansion) if is_long else (1 - expansion)

        rr = abs(take_profit - entry) / risk if risk > 0 else 0.0
        logger.debug(
            "Levels %s: entry=%.6f sl=%.6f tp=%.6f atr_pct=%.5f strong=%s",
            direction.value, entry, stop_loss, take_profit, atr_pct, strong,
        )
        return self._levels(entry, stop_loss, take_profit, rr)

    def _entry(self, direction: Direction, price: float, agreeing: Sequence[DetectorVerdict]) -> float:
        """Nudge entry toward a momentum detector's reported extreme."""
        cfg = self.config
        nudge = cfg.entry_nudge_pct / 100
        for verdict in agreeing:
            if verdict.family != "momentum" or verdict.score <= cfg.entry_detector_min_score:
                continue
            if direction == Direction.LONG and verdict.metadata.get("recent_high"):
                return min(price, float(verdict.metadata["recent_high"]) * (1 + nudge))
            if direction == Direction.SHORT and verdict.metadata.get("recent_low"):
                return max(price, float(verdict.metadata["recent_low"]) * (1 - nudge))
        return price

    def _fallback(self, direction: Direction, price: float) -> TradeLevels:
        risk = price * self.config.fallback_risk_pct / 100
        if direction == Direction.LONG:
            stop_loss, take_profit = price - risk, price + risk * self.config.rr_ratio
        else:
            stop_loss, take_profit = price + risk, price - risk * self.config.rr_ratio
        rr = self.config.rr_ratio if risk > 0 else 0.0
        return self._levels(price, stop_loss, take_profit, rr)

    @staticmethod
    def _levels(entry: float, stop_loss: float, take_profit: float, rr: float) -> TradeLevels:
        return TradeLevels(
            entry=round(entry, PRICE_DECIMALS),
            stop_loss=round(stop_loss, PRICE_DECIMALS),
            take_profit=round(take_profit, PRICE_DECIMALS),
            risk_reward_ratio=round(rr, 2),
        )
