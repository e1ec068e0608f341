"""Trend-following variants.

- EMA Trend Pullback: pullback to EMA50 inside an EMA200 trend
- MACD EMA Trend: MACD/signal cross filtered by EMA200
- Supertrend ATR: Supertrend direction flip
- Fibonacci Pullback: 50%-61.8% retracement of the last 5 bars (long only)
"""

from __future__ import annotations

from typing import Sequence

from quantcore.models.candle import Candle
from quantcore.models.snapshot import IndicatorSnapshot, TrendDirection
from quantcore.strategy.base import BaseStrategy, defined
from quantcore.strategy.protocol import Signal, StrategyType
from quantcore.strategy.registry import register_strategy


@register_strategy(StrategyType.EMA_TREND_PULLBACK)
class EmaTrendPullback(BaseStrategy):
    """Buy pullbacks to EMA50 while price holds above EMA200.

    LONG: close > EMA200, close within 0.5% of EMA50, close > previous open,
    RSI > 50. SHORT mirrors it below EMA200 with RSI < 50.
    """

    strategy_type = StrategyType.EMA_TREND_PULLBACK
    lookback = 1
    required_indicators = ("ema200", "ema50", "rsi")

    pullback_tolerance = 0.005

    def _evaluate(
        self,
        index: int,
        candles: Sequence[Candle],
        snapshots: Sequence[IndicatorSnapshot],
    ) -> Signal:
        candle, prev = candles[index], candles[index - 1]
        snap = snapshots[index]
        if not defined(snap.ema200, snap.ema50, snap.rsi):
            return Signal.NONE

        if abs(candle.close - snap.ema50) >= candle.close * self.pullback_tolerance:
            return Signal.NONE

        if candle.close > snap.ema200 and candle.close > prev.open and snap.rsi > 50:
            return Signal.LONG
        if candle.close < snap.ema200 and candle.close < prev.open and snap.rsi < 50:
            return Signal.SHORT
        return Signal.NONE


@register_strategy(StrategyType.MACD_EMA_TREND)
class MacdEmaTrend(BaseStrategy):
    """Fresh MACD/signal crossover in the direction of the EMA200 trend."""

    strategy_type = StrategyType.MACD_EMA_TREND
    lookback = 1
    required_indicators = ("ema200", "macd", "macd_signal")

    def _evaluate(
        self,
        index: int,
        candles: Sequence[Candle],
        snapshots: Sequence[IndicatorSnapshot],
    ) -> Signal:
        close = candles[index].close
        snap, prev = snapshots[index], snapshots[index - 1]
        if not defined(
            snap.ema200, snap.macd, snap.macd_signal, prev.macd, prev.macd_signal
        ):
            return Signal.NONE

        crossed_up = prev.macd <= prev.macd_signal and snap.macd > snap.macd_signal
        crossed_down = prev.macd >= prev.macd_signal and snap.macd < snap.macd_signal

        if close > snap.ema200 and crossed_up:
            return Signal.LONG
        if close < snap.ema200 and crossed_down:
            return Signal.SHORT
        return Signal.NONE


@register_strategy(StrategyType.SUPERTREND_ATR)
class SupertrendAtr(BaseStrategy):
    """Enter on a fresh Supertrend direction flip."""

    strategy_type = StrategyType.SUPERTREND_ATR
    lookback = 1
    required_indicators = ("supertrend_direction",)

    def _evaluate(
        self,
        index: int,
        candles: Sequence[Candle],
        snapshots: Sequence[IndicatorSnapshot],
    ) -> Signal:
        current = snapshots[index].supertrend_direction
        previous = snapshots[index - 1].supertrend_direction
        if not defined(current, previous) or current == previous:
            return Signal.NONE
        return Signal.LONG if current == TrendDirection.UP else Signal.SHORT


@register_strategy(StrategyType.FIBONACCI_PULLBACK)
class FibonacciPullback(BaseStrategy):
    """Long-only retracement entry.

    Swing range = highest high / lowest low of the previous 5 bars. LONG when
    price is above EMA200, the close sits between the 61.8% and 50%
    retracement of that range and closes above the previous open.
    """

    strategy_type = StrategyType.FIBONACCI_PULLBACK
    lookback = 5
    required_indicators = ("ema200",)

    def _evaluate(
        self,
        index: int,
        candles: Sequence[Candle],
        snapshots: Sequence[IndicatorSnapshot],
    ) -> Signal:
        candle, prev = candles[index], candles[index - 1]
        ema200 = snapshots[index].ema200
        if ema200 is None or candle.close <= ema200:
            return Signal.NONE

        window = candles[index - self.lookback:index]
        swing_high = max(c.high for c in window)
        swing_low = min(c.low for c in window)
        swing = swing_high - swing_low
        if swing <= 0:
            return Signal.NONE

        fib_500 = swing_high - swing * 0.5
        fib_618 = swing_high - swing * 0.618
        if fib_618 <= candle.close <= fib_500 and candle.close > prev.open:
            return Signal.LONG
        return Signal.NONE
