"""Trade data models."""

import hashlib
from enum import Enum

from pydantic import BaseModel


class Direction(int, Enum):
    """Trade direction."""

    LONG = 1
    SHORT = -1


class TradeStatus(str, Enum):
    """Trade lifecycle status."""

    OPEN = "open"
    CLOSED = "closed"


class ExitReason(str, Enum):
    """Why a trade was closed."""

    STOP_LOSS = "stop_loss"
    TRAILING_STOP = "trailing_stop"  # stop hit after it was tightened
    TAKE_PROFIT = "take_profit"
    SIGNAL = "signal"  # opposing entry signal


def generate_trade_id(strategy: str, direction: int, entry_time: int, sequence: int) -> str:
    """Generate deterministic trade ID based on trade attributes.

    Identical inputs replay to identical IDs, so two runs over the same
    candles produce byte-identical trade lists.
    """
    key = f"{strategy}:{direction}:{entry_time}:{sequence}"
    return hashlib.sha256(key.encode()).hexdigest()[:16]


class Trade(BaseModel):
    """A simulated trade.

    Created on entry and changed only through ``tighten_stop`` and ``close``.
    Once closed, a trade can no longer be modified.
    """

    id: str
    strategy: str
    direction: Direction
    entry_price: float
    entry_time: int
    entry_index: int
    stop_loss: float
    initial_stop_loss: float
    take_profit: float
    status: TradeStatus = TradeStatus.OPEN
    exit_price: float | None = None
    exit_time: int | None = None
    exit_index: int | None = None
    exit_reason: ExitReason | None = None
    pnl_percent: float | None = None

    @property
    def is_open(self) -> bool:
        return self.status == TradeStatus.OPEN

    @property
    def risk_amount(self) -> float:
        """Get the initial risk (distance from entry to the initial stop)."""
        if self.direction == Direction.LONG:
            return self.entry_price - self.initial_stop_loss
        return self.initial_stop_loss - self.entry_price

    @property
    def reward_amount(self) -> float:
        """Get the reward amount (distance to take profit)."""
        if self.direction == Direction.LONG:
            return self.take_profit - self.entry_price
        return self.entry_price - self.take_profit

    @property
    def r_multiple(self) -> float | None:
        """Realised profit in units of initial risk, None while open."""
        if self.exit_price is None or self.risk_amount <= 0:
            return None
        move = (self.exit_price - self.entry_price) * self.direction.value
        return move / self.risk_amount

    def tighten_stop(self, candidate: float) -> bool:
        """Move the stop toward price. Never loosens.

        Returns True if the stop moved.
        """
        if not self.is_open:
            raise ValueError(f"Trade {self.id} is closed; stop cannot change")

        if self.direction == Direction.LONG:
            if candidate <= self.stop_loss:
                return False
        elif candidate >= self.stop_loss:
            return False

        self.stop_loss = candidate
        return True

    def close(self, price: float, time: int, index: int, reason: ExitReason) -> None:
        """Close the trade and compute the percentage P&L."""
        if not self.is_open:
            raise ValueError(f"Trade {self.id} is already closed")

        pnl = (price - self.entry_price) / self.entry_price * 100
        if self.direction == Direction.SHORT:
            pnl = -pnl

        self.exit_price = price
        self.exit_time = time
        self.exit_index = index
        self.exit_reason = reason
        self.pnl_percent = pnl
        self.status = TradeStatus.CLOSED
