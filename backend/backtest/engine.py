"""Bar-by-bar backtest engine.

Ties together the snapshot builder, SignalEngine, PositionManager and
StatsAggregator to replay one strategy variant over a candle sequence.

Processing order for each bar i >= 1:
1. Resolve the open trade against bar i (stop/target, signal exit, trailing)
2. If flat, evaluate the variant at bar i and enter at its close
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from quantcore.indicators import build_snapshots
from quantcore.models.candle import Candle
from quantcore.models.config import ExitMode, IndicatorConfig, StrategyParams
from quantcore.models.snapshot import IndicatorSnapshot
from quantcore.models.trade import Trade
from quantcore.signal_engine import SignalEngine
from quantcore.strategy import Signal, StrategyType

from backtest.position import PositionManager
from backtest.stats import DEFAULT_INITIAL_BALANCE, StatsAggregator, StrategyStats

logger = logging.getLogger(__name__)

MIN_BARS = 100


@dataclass
class BacktestResult:
    """Indicators, trades and stats of one backtest run."""

    strategy: StrategyType
    params: StrategyParams
    bars: int = 0
    indicators: list[IndicatorSnapshot] = field(default_factory=list)
    trades: list[Trade] = field(default_factory=list)
    stats: StrategyStats = field(default_factory=StrategyStats.empty)


class BacktestEngine:
    """Replay one strategy variant over a candle sequence.

    Each ``run`` builds its own snapshots and position state, so an engine
    can be reused and two runs over the same candles give identical results.
    """

    def __init__(
        self,
        strategy: StrategyType | str = StrategyType.EMA_TREND_PULLBACK,
        params: StrategyParams | None = None,
        indicator_config: IndicatorConfig | None = None,
        initial_balance: float = DEFAULT_INITIAL_BALANCE,
        min_bars: int = MIN_BARS,
    ):
        self.params = params or StrategyParams()
        self.indicator_config = indicator_config or IndicatorConfig()
        self.initial_balance = initial_balance
        self.min_bars = min_bars

        self._signals = SignalEngine(strategy, self.params.entry_mode)
        self.strategy = StrategyType(self._signals.strategy.name)

    def run(self, candles: Sequence[Candle]) -> BacktestResult:
        """Run the backtest.

        Args:
            candles: Validated candles in ascending time order

        Returns:
            BacktestResult; empty with all-zero stats below ``min_bars`` candles
        """
        candles = list(candles)
        if len(candles) < self.min_bars:
            logger.warning(
                f"Only {len(candles)} candles, need {self.min_bars}; "
                "returning empty result"
            )
            return BacktestResult(
                strategy=self.strategy, params=self.params, bars=len(candles)
            )

        snapshots = build_snapshots(candles, self.indicator_config)
        positions = PositionManager(self.params, strategy=self.strategy.value)
        check_exit_signal = self.params.exit_mode == ExitMode.SIGNAL

        for i in range(1, len(candles)):
            candle = candles[i]
            atr = snapshots[i].atr

            open_trade = positions.open_trade
            if open_trade is not None:
                exit_signal = check_exit_signal and self._signals.evaluate_exit(
                    i, candles, snapshots, open_trade
                )
                positions.update(candle, i, atr, exit_signal=exit_signal)

            signal = self._signals.evaluate_entry(
                i, candles, snapshots, positions.open_trade
            )
            if signal == Signal.NONE:
                continue
            if atr is None or atr <= 0:
                logger.debug(f"Skipping {signal.value} signal at bar {i}: ATR={atr}")
                continue
            positions.open_position(signal.direction, candle, i, atr)

        trades = positions.trades
        stats = StatsAggregator(self.initial_balance).calculate(
            trades, self.params.risk_percent
        )
        logger.info(
            f"{self.strategy.label}: {len(candles)} bars, {stats.total_trades} trades, "
            f"win rate {stats.win_rate:.1%}, net {stats.net_profit:+.2f}"
        )
        return BacktestResult(
            strategy=self.strategy,
            params=self.params,
            bars=len(candles),
            indicators=snapshots,
            trades=trades,
            stats=stats,
        )


def run_backtest(
    candles: Sequence[Candle],
    strategy: StrategyType | str = StrategyType.EMA_TREND_PULLBACK,
    params: StrategyParams | None = None,
    indicator_config: IndicatorConfig | None = None,
    initial_balance: float = DEFAULT_INITIAL_BALANCE,
) -> BacktestResult:
    """Run a single backtest with a throwaway engine."""
    engine = BacktestEngine(
        strategy=strategy,
        params=params,
        indicator_config=indicator_config,
        initial_balance=initial_balance,
    )
    return engine.run(candles)
