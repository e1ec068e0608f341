"""Breakout and momentum variants.

- Donchian Turtle: close through the previous bar's 20-bar channel
- VWAP Scalping: EMA9/EMA21 cross on the right side of VWAP with volume
- Volatility Squeeze: Bollinger-in-Keltner squeeze releasing with momentum
"""

from __future__ import annotations

from typing import Sequence

from quantcore.models.candle import Candle
from quantcore.models.snapshot import IndicatorSnapshot
from quantcore.strategy.base import BaseStrategy, defined
from quantcore.strategy.protocol import Signal, StrategyType
from quantcore.strategy.registry import register_strategy


@register_strategy(StrategyType.DONCHIAN_TURTLE)
class DonchianTurtle(BaseStrategy):
    """Turtle breakout of the previous bar's Donchian channel."""

    strategy_type = StrategyType.DONCHIAN_TURTLE
    lookback = 1
    required_indicators = ("donchian_upper", "donchian_lower")

    def _evaluate(
        self,
        index: int,
        candles: Sequence[Candle],
        snapshots: Sequence[IndicatorSnapshot],
    ) -> Signal:
        close = candles[index].close
        prev_snap = snapshots[index - 1]
        if not defined(prev_snap.donchian_upper, prev_snap.donchian_lower):
            return Signal.NONE

        if close > prev_snap.donchian_upper:
            return Signal.LONG
        if close < prev_snap.donchian_lower:
            return Signal.SHORT
        return Signal.NONE


@register_strategy(StrategyType.VWAP_SCALPING)
class VwapScalping(BaseStrategy):
    """Fresh EMA9/EMA21 cross confirmed by VWAP side and above-average volume."""

    strategy_type = StrategyType.VWAP_SCALPING
    lookback = 1
    required_indicators = ("vwap", "ema9", "ema21", "volume_sma")

    def _evaluate(
        self,
        index: int,
        candles: Sequence[Candle],
        snapshots: Sequence[IndicatorSnapshot],
    ) -> Signal:
        candle = candles[index]
        snap, prev = snapshots[index], snapshots[index - 1]
        if not defined(
            snap.vwap, snap.ema9, snap.ema21, snap.volume_sma, prev.ema9, prev.ema21
        ):
            return Signal.NONE

        if candle.volume <= snap.volume_sma:
            return Signal.NONE

        crossed_up = prev.ema9 <= prev.ema21 and snap.ema9 > snap.ema21
        crossed_down = prev.ema9 >= prev.ema21 and snap.ema9 < snap.ema21

        if candle.close > snap.vwap and crossed_up:
            return Signal.LONG
        if candle.close < snap.vwap and crossed_down:
            return Signal.SHORT
        return Signal.NONE


@register_strategy(StrategyType.VOLATILITY_SQUEEZE)
class VolatilitySqueeze(BaseStrategy):
    """Trade the release of a Bollinger/Keltner squeeze.

    The previous bar must be in a squeeze and the current bar out of it.
    Direction comes from the close against the Bollinger middle band and
    must agree with growing MACD histogram momentum.
    """

    strategy_type = StrategyType.VOLATILITY_SQUEEZE
    lookback = 1
    required_indicators = ("squeeze", "bb_middle", "macd_histogram")

    def _evaluate(
        self,
        index: int,
        candles: Sequence[Candle],
        snapshots: Sequence[IndicatorSnapshot],
    ) -> Signal:
        close = candles[index].close
        snap, prev = snapshots[index], snapshots[index - 1]
        if not defined(
            snap.squeeze, prev.squeeze, snap.bb_middle,
            snap.macd_histogram, prev.macd_histogram,
        ):
            return Signal.NONE

        if not prev.squeeze or snap.squeeze:
            return Signal.NONE

        hist, prev_hist = snap.macd_histogram, prev.macd_histogram
        if close > snap.bb_middle and hist > 0 and hist > prev_hist:
            return Signal.LONG
        if close < snap.bb_middle and hist < 0 and hist < prev_hist:
            return Signal.SHORT
        return Signal.NONE
