"""Candle (OHLCV bar) data model."""

from pydantic import BaseModel, ConfigDict


class Candle(BaseModel):
    """One OHLCV bar. ``time`` is the bar open time in epoch milliseconds."""

    model_config = ConfigDict(frozen=True)

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @property
    def is_bullish(self) -> bool:
        """Check if this is a bullish (green) candle."""
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        """Check if this is a bearish (red) candle."""
        return self.close < self.open

    @property
    def body_size(self) -> float:
        """Get the absolute size of the candle body."""
        return abs(self.close - self.open)

    @property
    def range_size(self) -> float:
        """Get the full range (high - low) of the candle."""
        return self.high - self.low

    @property
    def typical_price(self) -> float:
        return (self.high + self.low + self.close) / 3
