"""Market snapshot data models.

Snapshots are built once per analysis call and never mutated, so these
use frozen ``@dataclass(slots=True)`` with plain floats:
- float instead of Decimal for fast numpy arithmetic
- Unix timestamps (float) instead of datetime objects
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence

# Timeframes consumed by the detectors
TF_1M = "1m"
TF_15M = "15m"
TF_1H = "1h"
TF_4H = "4h"

TIMEFRAMES = (TF_1M, TF_15M, TF_1H, TF_4H)


@dataclass(slots=True, frozen=True)
class Candle:
    """Single OHLCV bar."""

    timestamp: float  # Unix timestamp in seconds
    open: float
    high: float
    low: float
    close: float
    volume: float

    @property
    def is_bullish(self) -> bool:
        """Check if this is a bullish (green) candle."""
        return self.close > self.open

    @property
    def midpoint(self) -> float:
        """Middle of the high/low range."""
        return (self.high + self.low) / 2


@dataclass(slots=True, frozen=True)
class OrderBook:
    """Order book levels as (price, quantity) pairs, best level first."""

    bids: tuple[tuple[float, float], ...] = ()
    asks: tuple[tuple[float, float], ...] = ()
    timestamp: float | None = None

    @property
    def is_empty(self) -> bool:
        return not self.bids or not self.asks

    def bid_volume(self, depth: int) -> float:
        """Total bid quantity over the top ``depth`` levels."""
        return sum(qty for _, qty in self.bids[:depth])

    def ask_volume(self, depth: int) -> float:
        """Total ask quantity over the top ``depth`` levels."""
        return sum(qty for _, qty in self.asks[:depth])

    def imbalance(self, depth: int = 3) -> float:
        """(bid - ask) / (bid + ask) over the top levels, 0 when both are empty."""
        bid_vol = self.bid_volume(depth)
        ask_vol = self.ask_volume(depth)
        total = bid_vol + ask_vol
        if total <= 0:
            return 0.0
        return (bid_vol - ask_vol) / total

    @property
    def spread_pct(self) -> float:
        """Best ask over best bid spread, in percent of the bid."""
        if self.is_empty or self.bids[0][0] <= 0:
            return 0.0
        best_bid = self.bids[0][0]
        best_ask = self.asks[0][0]
        return (best_ask - best_bid) / best_bid * 100


@dataclass(slots=True, frozen=True)
class Ticker:
    """Latest traded price."""

    last: float
    timestamp: float | None = None


@dataclass(slots=True, frozen=True)
class MarketSnapshot:
    """Multi-timeframe candles plus order book and ticker for one symbol.

    Timeframes have independent, possibly short, lengths. A missing
    timeframe reads as an empty sequence.
    """

    symbol: str
    candles: Mapping[str, Sequence[Candle]] = field(default_factory=dict)
    order_book: OrderBook | None = None
    ticker: Ticker | None = None

    def get(self, timeframe: str) -> Sequence[Candle]:
        """Return the candles for a timeframe (empty if absent)."""
        return self.candles.get(timeframe) or ()

    def closes(self, timeframe: str) -> list[float]:
        return [c.close for c in self.get(timeframe)]

    def volumes(self, timeframe: str) -> list[float]:
        return [c.volume for c in self.get(timeframe)]

    @property
    def last_price(self) -> float:
        """Last 15m close, else last 1h close, else ticker, else 0."""
        for timeframe in (TF_15M, TF_1H):
            candles = self.get(timeframe)
            if candles:
                return candles[-1].close
        if self.ticker is not None:
            return self.ticker.last
        return 0.0
