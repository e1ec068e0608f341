"""Tests for PositionManager and the Trade model."""

import pytest

from backtest.position import PositionManager
from quantcore.models.config import ExitMode, StrategyParams
from quantcore.models.trade import Direction, ExitReason, TradeStatus, generate_trade_id

from helpers import make_candle


@pytest.fixture
def manager():
    return PositionManager(strategy="donchian_turtle")


def entry_candle(price: float = 100.0):
    return make_candle(0, open=price, close=price)


class TestOpenPosition:
    """Tests for trade entry."""

    def test_long_levels(self, manager):
        trade = manager.open_position(Direction.LONG, entry_candle(), 0, atr=2.0)

        assert trade.entry_price == 100.0
        assert trade.stop_loss == pytest.approx(97.0)
        assert trade.take_profit == pytest.approx(106.0)
        assert trade.initial_stop_loss == trade.stop_loss
        assert trade.status == TradeStatus.OPEN
        assert trade.risk_amount == pytest.approx(3.0)
        assert trade.reward_amount == pytest.approx(6.0)

    def test_short_levels(self, manager):
        trade = manager.open_position(Direction.SHORT, entry_candle(), 0, atr=2.0)

        assert trade.stop_loss == pytest.approx(103.0)
        assert trade.take_profit == pytest.approx(94.0)

    def test_custom_params(self):
        params = StrategyParams(atr_stop_multiplier=2.0, reward_risk_ratio=3.0)
        manager = PositionManager(params)
        trade = manager.open_position(Direction.LONG, entry_candle(), 0, atr=1.0)

        assert trade.stop_loss == pytest.approx(98.0)
        assert trade.take_profit == pytest.approx(106.0)

    def test_only_one_open_trade(self, manager):
        manager.open_position(Direction.LONG, entry_candle(), 0, atr=2.0)
        with pytest.raises(ValueError, match="still open"):
            manager.open_position(Direction.SHORT, entry_candle(), 1, atr=2.0)

    @pytest.mark.parametrize("atr", [None, 0.0, -1.0])
    def test_unusable_atr(self, manager, atr):
        with pytest.raises(ValueError, match="ATR"):
            manager.open_position(Direction.LONG, entry_candle(), 0, atr=atr)
        assert manager.open_trade is None

    def test_deterministic_ids(self):
        a = PositionManager(strategy="x").open_position(
            Direction.LONG, entry_candle(), 0, atr=1.0
        )
        b = PositionManager(strategy="x").open_position(
            Direction.LONG, entry_candle(), 0, atr=1.0
        )

        assert a.id == b.id
        assert a.id == generate_trade_id("x", 1, entry_candle().time, 1)
        assert len(a.id) == 16


class TestFixedExits:
    """Stop and target resolution in FIXED exit mode."""

    def test_take_profit_long(self, manager):
        manager.open_position(Direction.LONG, entry_candle(), 0, atr=2.0)
        closed = manager.update(make_candle(1, open=101, high=107, low=100, close=105), 1, 2.0)

        assert closed is not None
        assert closed.exit_reason == ExitReason.TAKE_PROFIT
        assert closed.exit_price == pytest.approx(106.0)
        assert closed.pnl_percent == pytest.approx(6.0)
        assert closed.r_multiple == pytest.approx(2.0)
        assert closed.exit_index == 1
        assert manager.open_trade is None

    def test_stop_loss_long(self, manager):
        manager.open_position(Direction.LONG, entry_candle(), 0, atr=2.0)
        closed = manager.update(make_candle(1, open=99, high=100, low=96, close=98), 1, 2.0)

        assert closed.exit_reason == ExitReason.STOP_LOSS
        assert closed.exit_price == pytest.approx(97.0)
        assert closed.pnl_percent == pytest.approx(-3.0)
        assert closed.r_multiple == pytest.approx(-1.0)

    def test_take_profit_short(self, manager):
        manager.open_position(Direction.SHORT, entry_candle(), 0, atr=2.0)
        closed = manager.update(make_candle(1, open=99, high=100, low=93, close=95), 1, 2.0)

        assert closed.exit_reason == ExitReason.TAKE_PROFIT
        assert closed.pnl_percent == pytest.approx(6.0)

    def test_stop_wins_when_both_hit(self, manager):
        manager.open_position(Direction.LONG, entry_candle(), 0, atr=2.0)
        closed = manager.update(make_candle(1, open=100, high=110, low=90, close=100), 1, 2.0)

        assert closed.exit_reason == ExitReason.STOP_LOSS
        assert closed.exit_price == pytest.approx(97.0)

    def test_no_exit_inside_range(self, manager):
        manager.open_position(Direction.LONG, entry_candle(), 0, atr=2.0)
        assert manager.update(make_candle(1, open=100, high=101, low=99, close=100), 1, 2.0) is None
        assert manager.open_trade is not None

    def test_exit_signal_ignored_in_fixed_mode(self, manager):
        manager.open_position(Direction.LONG, entry_candle(), 0, atr=2.0)
        candle = make_candle(1, open=100, high=101, low=99, close=100)

        assert manager.update(candle, 1, 2.0, exit_signal=True) is None

    def test_update_without_trade(self, manager):
        assert manager.update(make_candle(1), 1, 2.0) is None


class TestSignalExit:
    """Exit mode SIGNAL closes at the bar close on an opposing signal."""

    def test_signal_exit(self):
        manager = PositionManager(StrategyParams(exit_mode=ExitMode.SIGNAL))
        manager.open_position(Direction.LONG, entry_candle(), 0, atr=2.0)
        closed = manager.update(
            make_candle(1, open=100, high=101.5, low=99.5, close=101), 1, 2.0, exit_signal=True
        )

        assert closed.exit_reason == ExitReason.SIGNAL
        assert closed.exit_price == 101.0
        assert closed.pnl_percent == pytest.approx(1.0)

    def test_levels_take_priority(self):
        manager = PositionManager(StrategyParams(exit_mode=ExitMode.SIGNAL))
        manager.open_position(Direction.LONG, entry_candle(), 0, atr=2.0)
        closed = manager.update(
            make_candle(1, open=100, high=100, low=96, close=99), 1, 2.0, exit_signal=True
        )

        assert closed.exit_reason == ExitReason.STOP_LOSS


class TestTrailingExit:
    """Exit mode TRAILING ratchets the stop and never loosens it."""

    def test_trailing_stop(self):
        manager = PositionManager(StrategyParams(exit_mode=ExitMode.TRAILING))
        trade = manager.open_position(Direction.LONG, entry_candle(), 0, atr=2.0)

        # close 102 - 1 * ATR 2 -> stop 100
        assert manager.update(make_candle(1, open=101, high=102.5, low=100.5, close=102), 1, 2.0) is None
        assert trade.stop_loss == pytest.approx(100.0)

        # close 101 would give 99; stop stays
        assert manager.update(make_candle(2, open=102, high=102, low=100.5, close=101), 2, 2.0) is None
        assert trade.stop_loss == pytest.approx(100.0)

        closed = manager.update(make_candle(3, open=101, high=101, low=99, close=99.5), 3, 2.0)
        assert closed.exit_reason == ExitReason.TRAILING_STOP
        assert closed.exit_price == pytest.approx(100.0)
        assert closed.pnl_percent == pytest.approx(0.0)

    def test_trailing_short(self):
        manager = PositionManager(StrategyParams(exit_mode=ExitMode.TRAILING))
        trade = manager.open_position(Direction.SHORT, entry_candle(), 0, atr=2.0)

        manager.update(make_candle(1, open=99, high=99.5, low=97.5, close=98), 1, 2.0)
        assert trade.stop_loss == pytest.approx(100.0)


class TestTrade:
    """Tests for Trade state transitions."""

    def test_tighten_never_loosens(self, manager):
        trade = manager.open_position(Direction.LONG, entry_candle(), 0, atr=2.0)

        assert trade.tighten_stop(98.0) is True
        assert trade.tighten_stop(97.5) is False
        assert trade.stop_loss == 98.0

    def test_closed_trade_is_final(self, manager):
        manager.open_position(Direction.LONG, entry_candle(), 0, atr=2.0)
        trade = manager.update(make_candle(1, open=101, high=107, low=100, close=105), 1, 2.0)

        with pytest.raises(ValueError):
            trade.close(110.0, 0, 2, ExitReason.SIGNAL)
        with pytest.raises(ValueError):
            trade.tighten_stop(105.0)

    def test_open_trade_has_no_r_multiple(self, manager):
        trade = manager.open_position(Direction.LONG, entry_candle(), 0, atr=2.0)
        assert trade.r_multiple is None

    def test_trades_ordering(self, manager):
        manager.open_position(Direction.LONG, entry_candle(), 0, atr=2.0)
        manager.update(make_candle(1, open=101, high=107, low=100, close=105), 1, 2.0)
        manager.open_position(Direction.SHORT, make_candle(2, open=105, close=105), 2, atr=2.0)

        trades = manager.trades
        assert [t.status for t in trades] == [TradeStatus.CLOSED, TradeStatus.OPEN]
        assert len(manager.closed_trades) == 1
