"""Strategy and indicator configuration models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EntryMode(str, Enum):
    """How strictly a variant signal is confirmed before entering."""

    AGGRESSIVE = "aggressive"
    CONSERVATIVE = "conservative"  # signal bar must close in the trade direction


class ExitMode(str, Enum):
    """How an open position is managed after entry."""

    FIXED = "fixed"
    TRAILING = "trailing"
    SIGNAL = "signal"


class StrategyParams(BaseModel):
    """Risk and execution parameters for one backtest run."""

    model_config = ConfigDict(frozen=True)

    risk_percent: float = Field(default=1.0, gt=0)
    atr_stop_multiplier: float = Field(default=1.5, gt=0)
    reward_risk_ratio: float = Field(default=2.0, gt=0)
    entry_mode: EntryMode = EntryMode.CONSERVATIVE
    exit_mode: ExitMode = ExitMode.FIXED

    # Trailing stop distance from the close, in ATR units
    trailing_atr_multiplier: float = Field(default=1.0, gt=0)


class IndicatorConfig(BaseModel):
    """Periods and multipliers for every indicator in a snapshot."""

    model_config = ConfigDict(frozen=True)

    ema_trend_period: int = Field(default=200, ge=1)
    ema_mid_period: int = Field(default=50, ge=1)
    ema_fast_period: int = Field(default=9, ge=1)
    ema_slow_period: int = Field(default=21, ge=1)
    rsi_period: int = Field(default=14, ge=1)
    atr_period: int = Field(default=14, ge=1)

    bb_period: int = Field(default=20, ge=1)
    bb_multiplier: float = Field(default=2.0, ge=0)

    macd_fast: int = Field(default=12, ge=1)
    macd_slow: int = Field(default=26, ge=1)
    macd_signal: int = Field(default=9, ge=1)

    donchian_period: int = Field(default=20, ge=1)

    supertrend_period: int = Field(default=10, ge=1)
    supertrend_multiplier: float = Field(default=3.0, gt=0)

    pivot_left: int = Field(default=5, ge=1)
    pivot_right: int = Field(default=5, ge=1)

    keltner_period: int = Field(default=20, ge=1)
    keltner_multiplier: float = Field(default=1.5, gt=0)

    volume_sma_period: int = Field(default=20, ge=1)
