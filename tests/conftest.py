"""Shared fixtures: candle and snapshot builders."""

from datetime import datetime

import pytest

from signal_core.models import Candle, MarketSnapshot

FIXED_NOON = datetime(2024, 1, 1, 12, 0)  # Monday, multiplier 1.0


def candle(
    close: float,
    *,
    open: float | None = None,
    high: float | None = None,
    low: float | None = None,
    volume: float = 100.0,
    ts: float = 0.0,
) -> Candle:
    open_ = close if open is None else open
    return Candle(
        timestamp=ts,
        open=open_,
        high=max(open_, close) if high is None else high,
        low=min(open_, close) if low is None else low,
        close=close,
        volume=volume,
    )


def series(closes: list[float], volume: float = 100.0, spread: float = 0.0, step: float = 900.0) -> list[Candle]:
    """Candles with open == close and a symmetric high/low spread."""
    return [
        candle(c, high=c + spread, low=c - spread, volume=volume, ts=i * step)
        for i, c in enumerate(closes)
    ]


def closes_from_returns(start: float, returns: list[float]) -> list[float]:
    closes = [start]
    for r in returns:
        closes.append(closes[-1] * (1 + r))
    return closes


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOON


@pytest.fixture
def make_candle():
    return candle


@pytest.fixture
def make_series():
    return series


@pytest.fixture
def make_closes():
    return closes_from_returns


@pytest.fixture
def short_snapshot():
    """Too little history for any detector; last price 100."""
    return MarketSnapshot(symbol="BTCUSDT", candles={"15m": series([100.0] * 5)})
