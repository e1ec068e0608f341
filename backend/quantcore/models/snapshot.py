"""Per-bar indicator snapshot model."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class TrendDirection(str, Enum):
    """Supertrend direction."""

    UP = "up"
    DOWN = "down"


class IndicatorSnapshot(BaseModel):
    """All indicator values at one bar. ``None`` means not yet defined."""

    model_config = ConfigDict(frozen=True)

    time: int

    ema200: float | None = None
    ema50: float | None = None
    ema9: float | None = None
    ema21: float | None = None
    rsi: float | None = None
    atr: float | None = None

    bb_upper: float | None = None
    bb_middle: float | None = None
    bb_lower: float | None = None

    macd: float | None = None
    macd_signal: float | None = None
    macd_histogram: float | None = None

    vwap: float | None = None

    supertrend: float | None = None
    supertrend_direction: TrendDirection | None = None

    donchian_upper: float | None = None
    donchian_lower: float | None = None

    # Raw pivot markers sit on the pivot bar itself and need ``right``
    # future bars to exist; signals must use the confirmed values below.
    pivot_high: float | None = None
    pivot_low: float | None = None
    last_pivot_high: float | None = None
    last_pivot_low: float | None = None

    keltner_upper: float | None = None
    keltner_lower: float | None = None

    volume_sma: float | None = None

    # Bollinger bands inside Keltner channel
    squeeze: bool | None = None
