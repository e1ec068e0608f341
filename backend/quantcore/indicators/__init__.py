"""Technical indicators and per-bar snapshots (pure math, no I/O)."""

from quantcore.indicators.indicators import (
    BollingerBands,
    DonchianChannel,
    IndicatorCalculator,
    KeltnerChannel,
    MacdResult,
    Series,
    SupertrendResult,
    atr,
    bollinger_bands,
    donchian,
    ema,
    highest,
    keltner,
    lowest,
    macd,
    pivot_high,
    pivot_low,
    rsi,
    sma,
    supertrend,
    true_range,
    vwap,
)
from quantcore.indicators.snapshot import build_snapshots, latest_snapshot

__all__ = [
    "BollingerBands",
    "DonchianChannel",
    "IndicatorCalculator",
    "KeltnerChannel",
    "MacdResult",
    "Series",
    "SupertrendResult",
    "atr",
    "bollinger_bands",
    "build_snapshots",
    "donchian",
    "ema",
    "highest",
    "keltner",
    "latest_snapshot",
    "lowest",
    "macd",
    "pivot_high",
    "pivot_low",
    "rsi",
    "sma",
    "supertrend",
    "true_range",
    "vwap",
]
