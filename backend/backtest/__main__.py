"""CLI entry point for the backtesting system.

Usage:
    python -m backtest --strategy donchian_turtle
    python -m backtest --input candles.csv --exit-mode trailing
    python -m backtest --bars 500 --seed 7 --output results.json
    python -m backtest --list-strategies
"""

import argparse
import logging
import sys

from quantcore.models.config import EntryMode, ExitMode, StrategyParams
from quantcore.strategy import StrategyType, list_strategies

from backtest.candles import CandleValidationError, generate_candles, load_candles
from backtest.config import get_backtest_settings
from backtest.engine import BacktestEngine
from backtest.report import ReportFormatter


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_backtest_settings()
    parser = argparse.ArgumentParser(
        description="Backtest a candlestick strategy variant",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m backtest --strategy supertrend_atr
  python -m backtest --input candles.json --strategy vwap_scalping --exit-mode signal
  python -m backtest --bars 1000 --seed 1 --rr 3 --output results.json
  python -m backtest --list-strategies
        """,
    )

    parser.add_argument(
        "--list-strategies",
        action="store_true",
        help="List available strategy variants",
    )

    # Candle source
    parser.add_argument(
        "--input", "-i",
        type=str,
        default=None,
        help="Candle file (.json or .csv); synthetic candles when omitted",
    )
    parser.add_argument(
        "--bars",
        type=int,
        default=settings.synthetic_bars,
        help=f"Synthetic candle count (default: {settings.synthetic_bars})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=settings.synthetic_seed,
        help=f"Synthetic candle seed (default: {settings.synthetic_seed})",
    )

    # Strategy parameters
    parser.add_argument(
        "--strategy", "-s",
        type=str,
        choices=[t.value for t in StrategyType],
        default=settings.strategy.value,
        help=f"Strategy variant (default: {settings.strategy.value})",
    )
    parser.add_argument("--risk", type=float, default=settings.risk_percent,
                        help="Risk per trade in percent")
    parser.add_argument("--atr-stop", type=float, default=settings.atr_stop_multiplier,
                        help="Stop distance in ATR units")
    parser.add_argument("--rr", type=float, default=settings.reward_risk_ratio,
                        help="Reward/risk ratio for the take-profit")
    parser.add_argument(
        "--entry-mode",
        choices=[m.value for m in EntryMode],
        default=settings.entry_mode.value,
    )
    parser.add_argument(
        "--exit-mode",
        choices=[m.value for m in ExitMode],
        default=settings.exit_mode.value,
    )
    parser.add_argument("--balance", type=float, default=settings.initial_balance,
                        help="Initial balance for profit and drawdown")

    # Output
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output file path for JSON results",
    )
    parser.add_argument(
        "--with-indicators",
        action="store_true",
        help="Include per-bar indicator snapshots in the JSON output",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    return parser.parse_args(argv)


def cmd_list_strategies() -> None:
    """List all strategy variants."""
    print(f"\n{'Name':<22} Label")
    print("-" * 50)
    for name in list_strategies():
        print(f"{name:<22} {StrategyType(name).label}")
    print()


def cmd_run_backtest(args: argparse.Namespace) -> int:
    """Run a backtest."""
    settings = get_backtest_settings()

    if args.input:
        try:
            candles = load_candles(args.input)
        except (OSError, CandleValidationError) as e:
            print(f"Error: cannot load candles: {e}")
            return 1
        source = args.input
    else:
        candles = generate_candles(count=args.bars, seed=args.seed)
        source = f"synthetic (seed={args.seed})"

    params = StrategyParams(
        risk_percent=args.risk,
        atr_stop_multiplier=args.atr_stop,
        reward_risk_ratio=args.rr,
        entry_mode=EntryMode(args.entry_mode),
        exit_mode=ExitMode(args.exit_mode),
        trailing_atr_multiplier=settings.trailing_atr_multiplier,
    )

    print(f"\nBacktest: {StrategyType(args.strategy).label}")
    print(f"Candles: {len(candles)} from {source}")

    engine = BacktestEngine(
        strategy=args.strategy,
        params=params,
        initial_balance=args.balance,
        min_bars=settings.min_bars,
    )
    result = engine.run(candles)

    ReportFormatter.print_console(result)

    if args.output:
        ReportFormatter.save_json(
            result, args.output, include_indicators=args.with_indicators
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.list_strategies:
        cmd_list_strategies()
        return 0
    return cmd_run_backtest(args)


if __name__ == "__main__":
    sys.exit(main())
