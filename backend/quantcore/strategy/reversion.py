"""Mean-reversion and liquidity variants.

- RSI Divergence: price/RSI divergence against the bar 5 bars back
- Bollinger Mean Reversion: close back inside the band after an RSI extreme
- SMC Liquidity Sweep: wick through a confirmed pivot that closes back inside
"""

from __future__ import annotations

from typing import Sequence

from quantcore.models.candle import Candle
from quantcore.models.snapshot import IndicatorSnapshot
from quantcore.strategy.base import BaseStrategy, defined
from quantcore.strategy.protocol import Signal, StrategyType
from quantcore.strategy.registry import register_strategy


@register_strategy(StrategyType.RSI_DIVERGENCE)
class RsiDivergence(BaseStrategy):
    """Regular divergence between price and RSI.

    LONG: lower low than 5 bars ago, higher RSI than 5 bars ago, RSI < 35.
    SHORT: higher high than 5 bars ago, lower RSI than 5 bars ago, RSI > 65.
    """

    strategy_type = StrategyType.RSI_DIVERGENCE
    lookback = 5
    required_indicators = ("rsi",)

    oversold = 35.0
    overbought = 65.0

    def _evaluate(
        self,
        index: int,
        candles: Sequence[Candle],
        snapshots: Sequence[IndicatorSnapshot],
    ) -> Signal:
        ref = index - self.lookback
        candle, ref_candle = candles[index], candles[ref]
        rsi, ref_rsi = snapshots[index].rsi, snapshots[ref].rsi
        if not defined(rsi, ref_rsi):
            return Signal.NONE

        if candle.low < ref_candle.low and rsi > ref_rsi and rsi < self.oversold:
            return Signal.LONG
        if candle.high > ref_candle.high and rsi < ref_rsi and rsi > self.overbought:
            return Signal.SHORT
        return Signal.NONE


@register_strategy(StrategyType.BOLLINGER_REVERSION)
class BollingerReversion(BaseStrategy):
    """Fade a close outside the Bollinger band once price reclaims it."""

    strategy_type = StrategyType.BOLLINGER_REVERSION
    lookback = 1
    required_indicators = ("bb_upper", "bb_lower", "rsi")

    oversold = 30.0
    overbought = 70.0

    def _evaluate(
        self,
        index: int,
        candles: Sequence[Candle],
        snapshots: Sequence[IndicatorSnapshot],
    ) -> Signal:
        candle, prev = candles[index], candles[index - 1]
        snap, prev_snap = snapshots[index], snapshots[index - 1]

        if defined(prev_snap.bb_lower, prev_snap.rsi, snap.bb_lower):
            if (
                prev.close < prev_snap.bb_lower
                and prev_snap.rsi < self.oversold
                and candle.close > snap.bb_lower
            ):
                return Signal.LONG

        if defined(prev_snap.bb_upper, prev_snap.rsi, snap.bb_upper):
            if (
                prev.close > prev_snap.bb_upper
                and prev_snap.rsi > self.overbought
                and candle.close < snap.bb_upper
            ):
                return Signal.SHORT

        return Signal.NONE


@register_strategy(StrategyType.SMC_LIQUIDITY)
class SmcLiquiditySweep(BaseStrategy):
    """Liquidity sweep of the most recent confirmed pivot.

    SHORT: the previous bar traded above the last pivot high and closed back
    below it. LONG: the previous bar traded below the last pivot low and
    closed back above it. An outside bar sweeping both sides is ignored.
    """

    strategy_type = StrategyType.SMC_LIQUIDITY
    lookback = 1
    required_indicators = ("last_pivot_high", "last_pivot_low")

    def _evaluate(
        self,
        index: int,
        candles: Sequence[Candle],
        snapshots: Sequence[IndicatorSnapshot],
    ) -> Signal:
        prev = candles[index - 1]
        prev_snap = snapshots[index - 1]
        pivot_high, pivot_low = prev_snap.last_pivot_high, prev_snap.last_pivot_low

        swept_high = (
            pivot_high is not None
            and prev.high > pivot_high
            and prev.close < pivot_high
        )
        swept_low = (
            pivot_low is not None
            and prev.low < pivot_low
            and prev.close > pivot_low
        )

        if swept_high and not swept_low:
            return Signal.SHORT
        if swept_low and not swept_high:
            return Signal.LONG
        return Signal.NONE
