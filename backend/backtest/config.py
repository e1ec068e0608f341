"""Backtest-specific configuration.

Defaults can be overridden through BACKTEST_* environment variables or a
local .env file; CLI flags override both.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from quantcore.models.config import EntryMode, ExitMode, StrategyParams
from quantcore.strategy import StrategyType


class BacktestSettings(BaseSettings):
    """Backtest configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BACKTEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Account
    initial_balance: float = Field(default=10_000.0, gt=0)

    # Fewer candles than this produce an empty result
    min_bars: int = Field(default=100, ge=1)

    # Strategy selection and parameters
    strategy: StrategyType = StrategyType.EMA_TREND_PULLBACK
    risk_percent: float = Field(default=1.0, gt=0)
    atr_stop_multiplier: float = Field(default=1.5, gt=0)
    reward_risk_ratio: float = Field(default=2.0, gt=0)
    entry_mode: EntryMode = EntryMode.CONSERVATIVE
    exit_mode: ExitMode = ExitMode.FIXED
    trailing_atr_multiplier: float = Field(default=1.0, gt=0)

    # Synthetic candle source
    synthetic_bars: int = Field(default=200, ge=1)
    synthetic_seed: int = 42

    def strategy_params(self) -> StrategyParams:
        """Build StrategyParams from these settings."""
        return StrategyParams(
            risk_percent=self.risk_percent,
            atr_stop_multiplier=self.atr_stop_multiplier,
            reward_risk_ratio=self.reward_risk_ratio,
            entry_mode=self.entry_mode,
            exit_mode=self.exit_mode,
            trailing_atr_multiplier=self.trailing_atr_multiplier,
        )


_settings: BacktestSettings | None = None


def get_backtest_settings() -> BacktestSettings:
    """Get cached backtest settings instance."""
    global _settings
    if _settings is None:
        _settings = BacktestSettings()
    return _settings
