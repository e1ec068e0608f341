"""Strategy plugin system.

Public API:
- StrategyType: the selectable strategy variants
- Signal: per-bar entry decision
- EntryStrategy: Protocol that all variants implement
- register_strategy / create_strategy / get_strategy_class / list_strategies

Importing this package auto-registers all built-in variants.
"""

from quantcore.strategy.base import BaseStrategy
from quantcore.strategy.protocol import EntryStrategy, Signal, StrategyType
from quantcore.strategy.registry import (
    create_strategy,
    get_strategy_class,
    list_strategies,
    register_strategy,
)

# Import built-in variants to trigger auto-registration
import quantcore.strategy.breakout  # noqa: F401
import quantcore.strategy.reversion  # noqa: F401
import quantcore.strategy.trend  # noqa: F401

__all__ = [
    "BaseStrategy",
    "EntryStrategy",
    "Signal",
    "StrategyType",
    "create_strategy",
    "get_strategy_class",
    "list_strategies",
    "register_strategy",
]
