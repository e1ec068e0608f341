"""Backtesting system for candlestick strategy variants.

Only depends on quantcore/ for business logic; candles come from memory,
a file, or the synthetic generator.

Usage:
    python -m backtest --strategy ema_trend_pullback
    python -m backtest --list-strategies
"""

from backtest.engine import BacktestEngine, BacktestResult, run_backtest
from backtest.position import PositionManager
from backtest.stats import StatsAggregator, StrategyStats

__all__ = [
    "BacktestEngine",
    "BacktestResult",
    "PositionManager",
    "StatsAggregator",
    "StrategyStats",
    "run_backtest",
]
