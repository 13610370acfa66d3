"""Tests for raw payload converters and snapshot models."""

import pytest
from pydantic import ValidationError

from signal_core.models import (
    Candle,
    DetectorVerdict,
    Direction,
    MarketSnapshot,
    OrderBook,
    Ticker,
)
from signal_core.models.converters import (
    candle_from_raw,
    candles_from_raw,
    ms_to_seconds,
    order_book_from_raw,
    snapshot_from_raw,
    ticker_from_raw,
)


class TestTimestamps:
    def test_milliseconds_converted(self):
        assert ms_to_seconds(1_700_000_000_000) == 1_700_000_000.0

    def test_seconds_pass_through(self):
        assert ms_to_seconds(1_700_000_000) == 1_700_000_000.0


class TestCandleConversion:
    """Tests for candle_from_raw / candles_from_raw."""

    def test_from_row(self):
        c = candle_from_raw([1_700_000_000_000, "100", "101", "99", "100.5", "12.5"])
        assert c == Candle(1_700_000_000.0, 100.0, 101.0, 99.0, 100.5, 12.5)

    def test_from_dict(self):
        c = candle_from_raw({"timestamp": 60, "open": 1, "high": 2, "low": 0.5, "close": 1.5, "volume": 3})
        assert c.timestamp == 60.0
        assert c.close == 1.5
        assert c.is_bullish

    def test_short_row_rejected(self):
        with pytest.raises(ValueError, match="6 fields"):
            candle_from_raw([1, 2, 3])

    def test_sorted_by_timestamp(self):
        candles = candles_from_raw([
            [120, 1, 1, 1, 2, 1],
            [60, 1, 1, 1, 1, 1],
        ])
        assert [c.timestamp for c in candles] == [60.0, 120.0]


class TestBookAndTicker:
    def test_order_book(self):
        book = order_book_from_raw({"bids": [["100", "2"]], "asks": [["101", "3"]]})
        assert book.bids == ((100.0, 2.0),)
        assert book.asks == ((101.0, 3.0),)
        assert book.timestamp is None

    def test_order_book_none(self):
        assert order_book_from_raw(None) is None

    def test_ticker_last_or_price(self):
        assert ticker_from_raw({"last": 10}).last == 10.0
        assert ticker_from_raw({"price": "11"}).last == 11.0
        assert ticker_from_raw({}) is None
        assert ticker_from_raw(None) is None


class TestSnapshotConversion:
    """Tests for snapshot_from_raw."""

    def test_top_level_timeframes(self):
        snap = snapshot_from_raw("BTCUSDT", {
            "15m": [[0, 1, 1, 1, 1, 1], [900, 1, 2, 1, 2, 1]],
            "orderbook": {"bids": [[1, 1]], "asks": [[2, 1]]},
            "ticker": {"last": 3},
        })
        assert snap.symbol == "BTCUSDT"
        assert len(snap.get("15m")) == 2
        assert snap.order_book is not None
        assert snap.ticker.last == 3.0

    def test_nested_candles_and_symbol(self):
        snap = snapshot_from_raw("X", {
            "symbol": "ETHUSDT",
            "candles": {"1h": [[0, 1, 1, 1, 1, 1]]},
            "order_book": {"bids": [], "asks": []},
        })
        assert snap.symbol == "ETHUSDT"
        assert len(snap.get("1h")) == 1
        assert snap.order_book.is_empty

    def test_missing_timeframes_are_empty(self):
        snap = snapshot_from_raw("BTCUSDT", {})
        assert snap.get("4h") == ()
        assert snap.order_book is None
        assert snap.ticker is None


class TestSnapshotModel:
    """Tests for MarketSnapshot and OrderBook helpers."""

    def test_last_price_fallbacks(self):
        c15 = Candle(0, 1, 1, 1, 15.0, 1)
        c1h = Candle(0, 1, 1, 1, 60.0, 1)
        assert MarketSnapshot("X", {"15m": [c15], "1h": [c1h]}).last_price == 15.0
        assert MarketSnapshot("X", {"1h": [c1h]}).last_price == 60.0
        assert MarketSnapshot("X", ticker=Ticker(last=7.0)).last_price == 7.0
        assert MarketSnapshot("X").last_price == 0.0

    def test_order_book_imbalance(self):
        book = OrderBook(bids=((100, 3), (99, 1)), asks=((101, 1),))
        assert book.imbalance(depth=3) == pytest.approx(0.6)
        assert book.imbalance(depth=1) == pytest.approx(0.5)
        assert OrderBook().imbalance() == 0.0

    def test_candle_shape(self):
        c = Candle(0, open=100, high=110, low=95, close=98, volume=1)
        assert not c.is_bullish
        assert c.midpoint == 102.5


class TestDetectorVerdict:
    """Tests for the verdict model."""

    def test_family_defaults_to_name_prefix(self):
        assert DetectorVerdict(name="volume_spike").family == "volume"

    def test_explicit_family_kept(self):
        assert DetectorVerdict(name="volume_spike", family="flow").family == "flow"

    def test_score_bounds(self):
        with pytest.raises(ValidationError):
            DetectorVerdict(name="x_y", score=101)
        with pytest.raises(ValidationError):
            DetectorVerdict(name="x_y", score=-1)

    def test_neutral_helper(self):
        verdict = DetectorVerdict.neutral("rsi_momentum", "Insufficient data")
        assert verdict.direction == Direction.NEUTRAL
        assert verdict.score == 0
        assert not verdict.is_directional

    def test_immutable(self):
        verdict = DetectorVerdict(name="x_y", score=10)
        with pytest.raises(ValidationError):
            verdict.score = 20
        assert verdict.with_weight(2.0).weight == 2.0
        assert verdict.weight == 1.0
