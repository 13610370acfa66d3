"""Converters from raw exchange payloads to snapshot models.

Raw payloads follow the common exchange-client shapes:
- OHLCV rows: ``[timestamp_ms, open, high, low, close, volume]``
- OHLCV dicts: ``{"timestamp", "open", "high", "low", "close", "volume"}``
- Order book: ``{"bids": [[price, qty], ...], "asks": [[price, qty], ...]}``
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from signal_core.models.snapshot import Candle, MarketSnapshot, OrderBook, Ticker


# =============================================================================
# Timestamp conversion helpers
# =============================================================================

def ms_to_seconds(ts: float) -> float:
    """Convert a millisecond timestamp to seconds (seconds pass through)."""
    ts = float(ts)
    # Anything past year 33658 in seconds is really milliseconds
    return ts / 1000.0 if ts > 1e12 else ts


# =============================================================================
# Candle conversions
# =============================================================================

def candle_from_raw(raw: Any) -> Candle:
    """Build a Candle from an OHLCV row or dict.

    Raises:
        ValueError: If the payload has the wrong shape.
    """
    if isinstance(raw, Mapping):
        return Candle(
            timestamp=ms_to_seconds(raw.get("timestamp", 0)),
            open=float(raw["open"]),
            high=float(raw["high"]),
            low=float(raw["low"]),
            close=float(raw["close"]),
            volume=float(raw.get("volume", 0.0)),
        )
    row = list(raw)
    if len(row) < 6:
        raise ValueError(f"OHLCV row needs 6 fields, got {len(row)}")
    return Candle(
        timestamp=ms_to_seconds(row[0]),
        open=float(row[1]),
        high=float(row[2]),
        low=float(row[3]),
        close=float(row[4]),
        volume=float(row[5]),
    )


def candles_from_raw(rows: Iterable[Any]) -> list[Candle]:
    """Convert OHLCV rows, sorted by timestamp."""
    candles = [candle_from_raw(r) for r in rows]
    candles.sort(key=lambda c: c.timestamp)
    return candles


# =============================================================================
# Order book / ticker conversions
# =============================================================================

def _levels(raw_levels: Iterable[Any]) -> tuple[tuple[float, float], ...]:
    return tuple((float(level[0]), float(level[1])) for level in raw_levels)


def order_book_from_raw(raw: Mapping[str, Any] | None) -> OrderBook | None:
    """Convert an order book dict; ``None`` passes through."""
    if raw is None:
        return None
    timestamp = raw.get("timestamp")
    return OrderBook(
        bids=_levels(raw.get("bids") or ()),
        asks=_levels(raw.get("asks") or ()),
        timestamp=ms_to_seconds(timestamp) if timestamp is not None else None,
    )


def ticker_from_raw(raw: Mapping[str, Any] | None) -> Ticker | None:
    """Convert a ticker dict (``last`` or ``price``); ``None`` passes through."""
    if raw is None:
        return None
    last = raw.get("last", raw.get("price"))
    if last is None:
        return None
    timestamp = raw.get("timestamp")
    return Ticker(
        last=float(last),
        timestamp=ms_to_seconds(timestamp) if timestamp is not None else None,
    )


# =============================================================================
# Snapshot conversion
# =============================================================================

def snapshot_from_raw(symbol: str, raw: Mapping[str, Any]) -> MarketSnapshot:
    """Build a MarketSnapshot from a dict keyed by timeframe.

    Accepts the candle lists either at the top level (``{"15m": [...]}``)
    or under a ``"candles"`` key. ``orderbook``/``order_book`` and
    ``ticker`` are optional.
    """
    candle_source = raw.get("candles", raw)
    candles: dict[str, list[Candle]] = {}
    for timeframe, rows in candle_source.items():
        if timeframe in ("orderbook", "order_book", "ticker", "symbol", "candles"):
            continue
        if isinstance(rows, list):
            candles[timeframe] = candles_from_raw(rows)

    book_raw = raw.get("order_book", raw.get("orderbook"))
    return MarketSnapshot(
        symbol=raw.get("symbol", symbol),
        candles=candles,
        order_book=order_book_from_raw(book_raw),
        ticker=ticker_from_raw(raw.get("ticker")),
    )
