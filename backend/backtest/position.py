"""Bar-based position lifecycle for backtesting.

Owns at most one open trade and resolves its exit from each later bar:

Rules:
- LONG: low <= stop -> stop, high >= target -> target
- SHORT: high >= stop -> stop, low <= target -> target
- Both hit same bar -> stop (pessimistic assumption), filled at the level
- Exit mode SIGNAL: an opposing entry signal closes at the bar close
- Exit mode TRAILING: stop ratchets to close -/+ ATR * multiplier, never loosens
"""

from __future__ import annotations

import logging

from quantcore.models.candle import Candle
from quantcore.models.config import ExitMode, StrategyParams
from quantcore.models.trade import Direction, ExitReason, Trade, generate_trade_id

logger = logging.getLogger(__name__)


class PositionManager:
    """Track the single open trade and collect closed trades in order."""

    def __init__(self, params: StrategyParams | None = None, strategy: str = ""):
        self.params = params or StrategyParams()
        self.strategy = strategy
        self._open: Trade | None = None
        self._closed: list[Trade] = []
        self._sequence = 0

    @property
    def open_trade(self) -> Trade | None:
        return self._open

    @property
    def closed_trades(self) -> list[Trade]:
        return list(self._closed)

    @property
    def trades(self) -> list[Trade]:
        """Closed trades in order, followed by the open trade if any."""
        if self._open is None:
            return list(self._closed)
        return [*self._closed, self._open]

    def open_position(
        self,
        direction: Direction,
        candle: Candle,
        index: int,
        atr: float | None,
    ) -> Trade:
        """Open a trade at the candle close with ATR-based stop and target.

        Raises:
            ValueError: If a trade is already open or ATR is unusable.
        """
        if self._open is not None:
            raise ValueError(f"Trade {self._open.id} is still open")
        if atr is None or atr <= 0:
            raise ValueError(f"Cannot size stop from ATR={atr}")

        entry = candle.close
        stop_distance = atr * self.params.atr_stop_multiplier
        target_distance = stop_distance * self.params.reward_risk_ratio

        if direction == Direction.LONG:
            stop_loss = entry - stop_distance
            take_profit = entry + target_distance
        else:
            stop_loss = entry + stop_distance
            take_profit = entry - target_distance

        self._sequence += 1
        trade = Trade(
            id=generate_trade_id(
                self.strategy, direction.value, candle.time, self._sequence
            ),
            strategy=self.strategy,
            direction=direction,
            entry_price=entry,
            entry_time=candle.time,
            entry_index=index,
            stop_loss=stop_loss,
            initial_stop_loss=stop_loss,
            take_profit=take_profit,
        )
        self._open = trade
        logger.debug(
            f"{direction.name} opened @ {entry:.4f} "
            f"SL={stop_loss:.4f} TP={take_profit:.4f} bar={index}"
        )
        return trade

    def update(
        self,
        candle: Candle,
        index: int,
        atr: float | None,
        exit_signal: bool = False,
    ) -> Trade | None:
        """Apply one bar to the open trade.

        Returns:
            The trade if it closed on this bar, otherwise None.
        """
        trade = self._open
        if trade is None:
            return None

        reason, price = self._check_levels(trade, candle)
        if reason is None and exit_signal and self.params.exit_mode == ExitMode.SIGNAL:
            reason, price = ExitReason.SIGNAL, candle.close

        if reason is not None:
            trade.close(price, candle.time, index, reason)
            self._closed.append(trade)
            self._open = None
            logger.debug(
                f"{trade.direction.name} closed @ {price:.4f} "
                f"({reason.value}) pnl={trade.pnl_percent:+.3f}%"
            )
            return trade

        if self.params.exit_mode == ExitMode.TRAILING and atr is not None:
            distance = atr * self.params.trailing_atr_multiplier
            if trade.direction == Direction.LONG:
                trade.tighten_stop(candle.close - distance)
            else:
                trade.tighten_stop(candle.close + distance)

        return None

    def _check_levels(
        self, trade: Trade, candle: Candle
    ) -> tuple[ExitReason | None, float | None]:
        """Check if a trade hits stop or target on this bar.

        Pessimistic rule: if both are hit in the same bar, the stop wins.
        """
        if trade.direction == Direction.LONG:
            stop_hit = candle.low <= trade.stop_loss
            target_hit = candle.high >= trade.take_profit
        else:
            stop_hit = candle.high >= trade.stop_loss
            target_hit = candle.low <= trade.take_profit

        if stop_hit:
            moved = trade.stop_loss != trade.initial_stop_loss
            reason = ExitReason.TRAILING_STOP if moved else ExitReason.STOP_LOSS
            return reason, trade.stop_loss
        if target_hit:
            return ExitReason.TAKE_PROFIT, trade.take_profit
        return None, None
