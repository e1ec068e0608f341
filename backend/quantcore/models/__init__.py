"""Data models for candles, trades, snapshots and configuration."""

from quantcore.models.candle import Candle
from quantcore.models.config import EntryMode, ExitMode, IndicatorConfig, StrategyParams
from quantcore.models.snapshot import IndicatorSnapshot, TrendDirection
from quantcore.models.trade import (
    Direction,
    ExitReason,
    Trade,
    TradeStatus,
    generate_trade_id,
)

__all__ = [
    "Candle",
    "Direction",
    "EntryMode",
    "ExitMode",
    "ExitReason",
    "IndicatorConfig",
    "IndicatorSnapshot",
    "StrategyParams",
    "Trade",
    "TradeStatus",
    "TrendDirection",
    "generate_trade_id",
]
