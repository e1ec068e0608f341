"""Shared plumbing for strategy variants."""

from __future__ import annotations

from typing import Sequence

from quantcore.models.candle import Candle
from quantcore.models.snapshot import IndicatorSnapshot
from quantcore.strategy.protocol import Signal, StrategyType


def defined(*values) -> bool:
    """True when no value is None."""
    return all(v is not None for v in values)


class BaseStrategy:
    """Base class for the built-in variants.

    Handles the lookback guard so subclasses only implement the rule.
    """

    strategy_type: StrategyType
    lookback: int = 1
    required_indicators: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.strategy_type.value

    @property
    def label(self) -> str:
        return self.strategy_type.label

    def evaluate(
        self,
        index: int,
        candles: Sequence[Candle],
        snapshots: Sequence[IndicatorSnapshot],
    ) -> Signal:
        if index < self.lookback or index >= min(len(candles), len(snapshots)):
            return Signal.NONE
        return self._evaluate(index, candles, snapshots)

    def _evaluate(
        self,
        index: int,
        candles: Sequence[Candle],
        snapshots: Sequence[IndicatorSnapshot],
    ) -> Signal:
        raise NotImplementedError
