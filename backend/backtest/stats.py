"""Statistics calculator for backtest results.

All figures are derived from the trade list on every call; nothing is
stored separately, so stats can never drift from their trades.

Conventions:
  pnl_percent  = price move of the trade in percent of entry
  net_profit   = initial_balance * sum(pnl_percent) / 100
  equity curve = initial_balance + cumulative net profit, in exit order
  max_drawdown = largest peak-to-trough decline of the equity curve, in %
  profit_factor = gross profit / gross loss (sums of pnl magnitudes)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from quantcore.models.trade import Trade, TradeStatus

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_BALANCE = 10_000.0


@dataclass
class StrategyStats:
    """Aggregate performance of one backtest run."""

    total_trades: int = 0
    win_rate: float = 0.0  # fraction of closed trades, 0..1
    profit_factor: float = 0.0
    max_drawdown: float = 0.0  # percent of peak equity
    net_profit: float = 0.0

    closed_trades: int = 0
    open_trades: int = 0
    wins: int = 0
    losses: int = 0
    gross_profit: float = 0.0
    gross_loss: float = 0.0
    expectancy_r: float = 0.0
    risk_adjusted_return: float = 0.0  # percent, risking risk_percent per trade
    equity_curve: list[float] = field(default_factory=list)

    @classmethod
    def empty(cls) -> StrategyStats:
        """All-zero stats for runs without enough data."""
        return cls()


class StatsAggregator:
    """Reduce a trade list into StrategyStats."""

    def __init__(self, initial_balance: float = DEFAULT_INITIAL_BALANCE):
        self.initial_balance = initial_balance

    def calculate(self, trades: list[Trade], risk_percent: float = 1.0) -> StrategyStats:
        closed = sorted(
            (t for t in trades if t.status == TradeStatus.CLOSED),
            key=lambda t: (t.exit_time, t.entry_time),
        )
        stats = StrategyStats(
            total_trades=len(trades),
            closed_trades=len(closed),
            open_trades=len(trades) - len(closed),
        )
        if not closed:
            stats.equity_curve = [self.initial_balance]
            return stats

        pnls = [t.pnl_percent for t in closed]
        stats.wins = sum(1 for p in pnls if p > 0)
        stats.losses = len(pnls) - stats.wins
        stats.win_rate = stats.wins / len(closed)

        stats.gross_profit = sum(p for p in pnls if p > 0)
        stats.gross_loss = -sum(p for p in pnls if p < 0)
        if stats.gross_loss > 0:
            stats.profit_factor = stats.gross_profit / stats.gross_loss
        elif stats.gross_profit > 0:
            stats.profit_factor = float("inf")

        stats.net_profit = self.initial_balance * sum(pnls) / 100
        stats.equity_curve = self._equity_curve(pnls)
        stats.max_drawdown = self._max_drawdown(stats.equity_curve)

        r_multiples = [t.r_multiple for t in closed if t.r_multiple is not None]
        if r_multiples:
            stats.expectancy_r = sum(r_multiples) / len(r_multiples)
            stats.risk_adjusted_return = sum(r_multiples) * risk_percent

        logger.debug(
            f"Stats: {stats.closed_trades} closed, win rate {stats.win_rate:.2%}, "
            f"PF {stats.profit_factor:.2f}, max DD {stats.max_drawdown:.2f}%"
        )
        return stats

    def _equity_curve(self, pnls: list[float]) -> list[float]:
        balance = self.initial_balance
        curve = [balance]
        for pnl in pnls:
            balance += self.initial_balance * pnl / 100
            curve.append(balance)
        return curve

    @staticmethod
    def _max_drawdown(curve: list[float]) -> float:
        peak = curve[0]
        max_dd = 0.0
        for balance in curve:
            if balance > peak:
                peak = balance
            if peak > 0:
                max_dd = max(max_dd, (peak - balance) / peak * 100)
        return max_dd
