"""Report formatting for backtest results.

Outputs results to console (formatted tables) and JSON files.
"""

from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from enum import Enum

from backtest.engine import BacktestResult


class ReportEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


def _format_time(ms: int | None) -> str:
    if ms is None:
        return "-"
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M")


def _round(value: float, digits: int) -> float | None:
    # inf profit factor has no JSON representation
    return round(value, digits) if math.isfinite(value) else None


class ReportFormatter:
    """Format backtest results for display and export."""

    @staticmethod
    def print_console(result: BacktestResult, recent: int = 20) -> None:
        """Print formatted report to console."""
        stats = result.stats
        params = result.params

        print("\n" + "=" * 70)
        print(f"  BACKTEST RESULTS - {result.strategy.label}")
        print("=" * 70)
        print(f"  Bars:           {result.bars}")
        print(
            f"  Params:         risk={params.risk_percent}% "
            f"stop={params.atr_stop_multiplier}xATR RR={params.reward_risk_ratio} "
            f"entry={params.entry_mode.value} exit={params.exit_mode.value}"
        )

        # Overall
        print("\n" + "-" * 70)
        print("  OVERALL")
        print("-" * 70)
        print(f"  Total trades:   {stats.total_trades}")
        print(f"  Closed / open:  {stats.closed_trades} / {stats.open_trades}")
        print(f"  Wins / losses:  {stats.wins} / {stats.losses}")
        print(f"  Win rate:       {stats.win_rate:.1%}")
        print(f"  Profit factor:  {stats.profit_factor:.2f}")
        print(f"  Max drawdown:   {stats.max_drawdown:.2f}%")
        print(f"  Net profit:     {stats.net_profit:+.2f}")
        print(f"  Expectancy:     {stats.expectancy_r:+.2f}R per trade")
        print(f"  Risk-sized:     {stats.risk_adjusted_return:+.2f}%")

        # Recent trades
        if result.trades:
            print("\n" + "-" * 70)
            print(f"  TRADES (last {recent})")
            print("-" * 70)
            print(
                f"  {'Entry time':<17} {'Dir':<6} {'Entry':>11} {'Exit':>11} "
                f"{'Reason':<14} {'PnL%':>8}"
            )
            for t in result.trades[-recent:]:
                exit_price = f"{t.exit_price:>11.2f}" if t.exit_price is not None else f"{'-':>11}"
                reason = t.exit_reason.value if t.exit_reason else t.status.value
                pnl = f"{t.pnl_percent:>+7.2f}%" if t.pnl_percent is not None else f"{'-':>8}"
                print(
                    f"  {_format_time(t.entry_time):<17} {t.direction.name:<6} "
                    f"{t.entry_price:>11.2f} {exit_price} {reason:<14} {pnl}"
                )

        print("\n" + "=" * 70)

    @staticmethod
    def to_dict(result: BacktestResult, include_indicators: bool = False) -> dict:
        """Convert results to JSON-serializable dict."""
        stats = result.stats
        data = {
            "metadata": {
                "strategy": result.strategy.value,
                "label": result.strategy.label,
                "bars": result.bars,
                "params": result.params.model_dump(mode="json"),
            },
            "stats": {
                "total_trades": stats.total_trades,
                "closed_trades": stats.closed_trades,
                "open_trades": stats.open_trades,
                "wins": stats.wins,
                "losses": stats.losses,
                "win_rate": round(stats.win_rate, 4),
                "profit_factor": _round(stats.profit_factor, 4),
                "max_drawdown": round(stats.max_drawdown, 4),
                "net_profit": round(stats.net_profit, 2),
                "gross_profit": round(stats.gross_profit, 4),
                "gross_loss": round(stats.gross_loss, 4),
                "expectancy_r": round(stats.expectancy_r, 4),
                "risk_adjusted_return": round(stats.risk_adjusted_return, 4),
                "equity_curve": [round(b, 2) for b in stats.equity_curve],
            },
            "trades": [t.model_dump(mode="json") for t in result.trades],
        }
        if include_indicators:
            data["indicators"] = [s.model_dump(mode="json") for s in result.indicators]
        return data

    @staticmethod
    def save_json(
        result: BacktestResult, filepath: str, include_indicators: bool = False
    ) -> None:
        """Save results to JSON file."""
        data = ReportFormatter.to_dict(result, include_indicators=include_indicators)
        with open(filepath, "w") as f:
            json.dump(data, f, indent=2, cls=ReportEncoder)
        print(f"\nResults saved to {filepath}")
