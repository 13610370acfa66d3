"""Technical indicators (pure math, no I/O)."""

from signal_core.indicators.indicators import (
    RSI_NEUTRAL,
    BollingerBands,
    atr,
    bollinger_bands,
    correlation,
    pct_returns,
    percentile_value,
    position_size,
    rsi,
    true_range,
    vwap,
    z_score,
)

__all__ = [
    "RSI_NEUTRAL",
    "BollingerBands",
    "atr",
    "bollinger_bands",
    "correlation",
    "pct_returns",
    "percentile_value",
    "position_size",
    "rsi",
    "true_range",
    "vwap",
    "z_score",
]
