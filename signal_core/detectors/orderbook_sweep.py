"""Order book imbalance detector over the top book levels."""

from __future__ import annotations

from signal_core.detectors.protocol import BaseDetector
from signal_core.models import DetectorConfig, DetectorVerdict, Direction, MarketSnapshot


class OrderbookSweepDetector(BaseDetector):
    """Directional pressure from bid/ask quantity imbalance."""

    name = "orderbook_sweep"
    family = "orderbook"

    def detect(self, snapshot: MarketSnapshot, config: DetectorConfig) -> DetectorVerdict:
        params = config.orderbook_sweep
        book = snapshot.order_book
        self.require(book is not None and not book.is_empty, "No orderbook data")

        bid_volume = book.bid_volume(params.depth)
        ask_volume = book.ask_volume(params.depth)
        self.require(bid_volume + ask_volume > 0, "Empty orderbook levels")
        imbalance = book.imbalance(params.depth)

        metadata = {
            "bid_volume": bid_volume,
            "ask_volume": ask_volume,
            "volume_imbalance": imbalance,
            "spread_pct": book.spread_pct,
        }

        if abs(imbalance) > params.imbalance_threshold:
            direction = Direction.LONG if imbalance > 0 else Direction.SHORT
            side = "bid" if imbalance > 0 else "ask"
            return self.verdict(
                min(100.0, abs(imbalance) * params.score_multiplier),
                direction,
                f"Orderbook {side} imbalance {imbalance:+.2f} over top {params.depth} levels",
                metadata,
            )

        return self.neutral("No significant orderbook imbalance", metadata)
