"""Strategy protocol defining the interface all entry variants implement.

This module provides:
- StrategyType: the closed set of selectable strategy variants
- Signal: the entry decision a variant returns for one bar
- EntryStrategy: runtime-checkable Protocol that variants must satisfy
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol, Sequence, runtime_checkable

from quantcore.models.candle import Candle
from quantcore.models.snapshot import IndicatorSnapshot
from quantcore.models.trade import Direction


class StrategyType(str, Enum):
    """Selectable strategy variants."""

    EMA_TREND_PULLBACK = "ema_trend_pullback"
    RSI_DIVERGENCE = "rsi_divergence"
    BOLLINGER_REVERSION = "bollinger_reversion"
    DONCHIAN_TURTLE = "donchian_turtle"
    VWAP_SCALPING = "vwap_scalping"
    MACD_EMA_TREND = "macd_ema_trend"
    SUPERTREND_ATR = "supertrend_atr"
    SMC_LIQUIDITY = "smc_liquidity"
    FIBONACCI_PULLBACK = "fibonacci_pullback"
    VOLATILITY_SQUEEZE = "volatility_squeeze"

    @property
    def label(self) -> str:
        """Human-readable strategy name."""
        return _LABELS[self]


_LABELS = {
    StrategyType.EMA_TREND_PULLBACK: "EMA Trend Pullback",
    StrategyType.RSI_DIVERGENCE: "RSI Divergence",
    StrategyType.BOLLINGER_REVERSION: "Bollinger Mean Reversion",
    StrategyType.DONCHIAN_TURTLE: "Donchian Turtle",
    StrategyType.VWAP_SCALPING: "VWAP Scalping",
    StrategyType.MACD_EMA_TREND: "MACD EMA Trend",
    StrategyType.SUPERTREND_ATR: "Supertrend ATR",
    StrategyType.SMC_LIQUIDITY: "SMC Liquidity Sweep",
    StrategyType.FIBONACCI_PULLBACK: "Fibonacci Pullback",
    StrategyType.VOLATILITY_SQUEEZE: "Volatility Squeeze",
}


class Signal(str, Enum):
    """Entry decision for one bar."""

    LONG = "long"
    SHORT = "short"
    NONE = "none"

    @property
    def direction(self) -> Direction | None:
        if self == Signal.LONG:
            return Direction.LONG
        if self == Signal.SHORT:
            return Direction.SHORT
        return None


@runtime_checkable
class EntryStrategy(Protocol):
    """Protocol that all strategy variants must implement.

    Variants are stateless: a decision depends only on the bar index, the
    candles and the indicator snapshots.
    """

    @property
    def name(self) -> str:
        """Unique strategy identifier (e.g., 'ema_trend_pullback')."""
        ...

    @property
    def lookback(self) -> int:
        """Number of earlier bars the rule reads (1 = previous bar)."""
        ...

    @property
    def required_indicators(self) -> tuple[str, ...]:
        """Snapshot fields this strategy reads.

        Example: ('ema200', 'ema50', 'rsi')
        """
        ...

    def evaluate(
        self,
        index: int,
        candles: Sequence[Candle],
        snapshots: Sequence[IndicatorSnapshot],
    ) -> Signal:
        """Decide whether bar ``index`` is a long or short entry.

        Returns Signal.NONE when any required value is undefined.
        """
        ...
