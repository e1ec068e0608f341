"""Entry/exit decisions for one selected strategy variant.

The engine is a pure function of (bar index, candles, snapshots, open
trade). It never holds position state; the PositionManager does.
"""

from __future__ import annotations

from typing import Sequence

from quantcore.models.candle import Candle
from quantcore.models.config import EntryMode
from quantcore.models.snapshot import IndicatorSnapshot
from quantcore.models.trade import Direction, Trade
from quantcore.strategy import EntryStrategy, Signal, StrategyType, create_strategy


class SignalEngine:
    """Evaluate the selected strategy variant bar by bar.

    Entry mode CONSERVATIVE only accepts a signal when the signal bar closes
    in the trade direction; AGGRESSIVE takes the variant signal as is. The
    same filter applies to exit signals so entries and exits stay symmetric.
    """

    def __init__(
        self,
        strategy_type: StrategyType | str,
        entry_mode: EntryMode = EntryMode.CONSERVATIVE,
    ):
        self.strategy: EntryStrategy = create_strategy(strategy_type)
        self.entry_mode = entry_mode

    def evaluate(
        self,
        index: int,
        candles: Sequence[Candle],
        snapshots: Sequence[IndicatorSnapshot],
    ) -> Signal:
        """Evaluate the variant at ``index`` regardless of open positions."""
        signal = self.strategy.evaluate(index, candles, snapshots)
        if signal == Signal.NONE or self.entry_mode == EntryMode.AGGRESSIVE:
            return signal

        candle = candles[index]
        if signal == Signal.LONG and not candle.is_bullish:
            return Signal.NONE
        if signal == Signal.SHORT and not candle.is_bearish:
            return Signal.NONE
        return signal

    def evaluate_entry(
        self,
        index: int,
        candles: Sequence[Candle],
        snapshots: Sequence[IndicatorSnapshot],
        open_trade: Trade | None = None,
    ) -> Signal:
        """Entry decision. Always NONE while a trade is open."""
        if open_trade is not None and open_trade.is_open:
            return Signal.NONE
        return self.evaluate(index, candles, snapshots)

    def evaluate_exit(
        self,
        index: int,
        candles: Sequence[Candle],
        snapshots: Sequence[IndicatorSnapshot],
        open_trade: Trade | None,
    ) -> bool:
        """True when the variant signals the opposite direction of ``open_trade``."""
        if open_trade is None or not open_trade.is_open:
            return False

        signal = self.evaluate(index, candles, snapshots)
        if open_trade.direction == Direction.LONG:
            return signal == Signal.SHORT
        return signal == Signal.LONG
