"""Strategy registry for discovering and instantiating strategy variants.

Usage:
    @register_strategy(StrategyType.DONCHIAN_TURTLE)
    class DonchianTurtle(BaseStrategy):
        ...

    strategy = create_strategy("donchian_turtle")
    strategies = list_strategies()
"""

from __future__ import annotations

import logging
from typing import Any

from quantcore.strategy.protocol import StrategyType

logger = logging.getLogger(__name__)

# Global registry: strategy type -> strategy class
_REGISTRY: dict[StrategyType, type] = {}


def _resolve(name: StrategyType | str) -> StrategyType:
    try:
        return StrategyType(name)
    except ValueError:
        available = ", ".join(list_strategies()) or "(none)"
        raise KeyError(f"Unknown strategy '{name}'. Available: {available}") from None


def register_strategy(strategy_type: StrategyType):
    """Decorator to register a strategy class under a strategy type.

    Raises:
        ValueError: If a strategy is already registered for the type.
    """

    def decorator(cls):
        if strategy_type in _REGISTRY:
            raise ValueError(
                f"Strategy '{strategy_type.value}' is already registered "
                f"by {_REGISTRY[strategy_type].__name__}"
            )
        _REGISTRY[strategy_type] = cls
        logger.debug("Registered strategy: %s -> %s", strategy_type.value, cls.__name__)
        return cls

    return decorator


def get_strategy_class(name: StrategyType | str) -> type:
    """Get the strategy class by name (without instantiating).

    Raises:
        KeyError: If no strategy is registered under the given name.
    """
    strategy_type = _resolve(name)
    cls = _REGISTRY.get(strategy_type)
    if cls is None:
        available = ", ".join(list_strategies()) or "(none)"
        raise KeyError(
            f"Unknown strategy '{strategy_type.value}'. Available: {available}"
        )
    return cls


def create_strategy(name: StrategyType | str, **kwargs: Any):
    """Create a strategy instance by name.

    Raises:
        KeyError: If no strategy is registered under the given name.
    """
    return get_strategy_class(name)(**kwargs)


def list_strategies() -> list[str]:
    """Return a sorted list of registered strategy names."""
    return sorted(t.value for t in _REGISTRY)
