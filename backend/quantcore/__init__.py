"""Pure indicator and signal logic shared by the backtesting system.

This package contains no I/O: candle models, the indicator library,
per-bar indicator snapshots and the strategy variants that decide entries.
The bar-by-bar replay lives in the ``backtest`` package.
"""
