"""Candle factories shared by the test modules."""

from quantcore.models.candle import Candle

BAR_MS = 300_000


def make_candle(
    index: int = 0,
    open: float = 100.0,
    high: float | None = None,
    low: float | None = None,
    close: float = 100.0,
    volume: float = 10.0,
) -> Candle:
    """Build a Candle with sensible defaults."""
    if high is None:
        high = max(open, close) + 1.0
    if low is None:
        low = min(open, close) - 1.0
    return Candle(
        time=1_700_000_000_000 + index * BAR_MS,
        open=open,
        high=high,
        low=low,
        close=close,
        volume=volume,
    )


def flat_candles(count: int, price: float = 100.0) -> list[Candle]:
    """open == high == low == close for every bar."""
    return [
        make_candle(i, open=price, high=price, low=price, close=price, volume=10.0)
        for i in range(count)
    ]


def rising_candles(count: int, start: float = 100.0, step: float = 0.01) -> list[Candle]:
    """Strictly rising closes with small bullish bodies."""
    candles = []
    for i in range(count):
        close = start + step * i
        candles.append(
            make_candle(
                i,
                open=close - 0.005,
                high=close + 0.02,
                low=close - 0.025,
                close=close,
                volume=10.0,
            )
        )
    return candles
