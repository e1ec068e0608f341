"""Tests for candle loading, validation and generation."""

import json

import pytest
from pydantic import ValidationError

from backtest.candles import (
    CandleValidationError,
    generate_candles,
    load_candles,
    validate_candles,
)
from quantcore.models.candle import Candle

from helpers import make_candle


class TestCandleModel:
    """Tests for the Candle model."""

    def test_properties(self):
        candle = Candle(time=0, open=100, high=105, low=98, close=103, volume=5)

        assert candle.is_bullish
        assert not candle.is_bearish
        assert candle.body_size == 3
        assert candle.range_size == 7
        assert candle.typical_price == pytest.approx(102.0)

    def test_doji_is_neither(self):
        candle = make_candle(open=100, close=100)
        assert not candle.is_bullish and not candle.is_bearish

    def test_frozen(self):
        candle = make_candle()
        with pytest.raises(ValidationError):
            candle.close = 1.0


class TestValidateCandles:
    """Tests for validate_candles."""

    def test_valid(self):
        candles = [make_candle(i) for i in range(5)]
        assert validate_candles(candles) is candles

    def test_time_not_increasing(self):
        candles = [make_candle(1), make_candle(0)]
        with pytest.raises(CandleValidationError, match="not after"):
            validate_candles(candles)

    def test_duplicate_time(self):
        with pytest.raises(CandleValidationError):
            validate_candles([make_candle(0), make_candle(0)])

    def test_high_below_low(self):
        with pytest.raises(CandleValidationError, match="high < low"):
            validate_candles([make_candle(0, high=99, low=101)])

    def test_negative_volume(self):
        with pytest.raises(CandleValidationError, match="negative volume"):
            validate_candles([make_candle(0, volume=-1)])

    def test_non_finite(self):
        with pytest.raises(CandleValidationError, match="non-finite"):
            validate_candles([make_candle(0, close=float("nan"))])


class TestLoadCandles:
    """Tests for load_candles."""

    ROWS = [
        {"time": 1000, "open": 1, "high": 2, "low": 0.5, "close": 1.5, "volume": 10},
        {"time": 2000, "open": 1.5, "high": 3, "low": 1, "close": 2.5, "volume": 12},
    ]

    def test_json(self, tmp_path):
        path = tmp_path / "candles.json"
        path.write_text(json.dumps(self.ROWS))

        candles = load_candles(path)

        assert len(candles) == 2
        assert candles[1].time == 2000
        assert candles[1].close == 2.5

    def test_csv(self, tmp_path):
        path = tmp_path / "candles.csv"
        path.write_text(
            "time,open,high,low,close,volume\n"
            "1000,1,2,0.5,1.5,10\n"
            "2000,1.5,3,1,2.5,12\n"
        )

        candles = load_candles(str(path))

        assert [c.time for c in candles] == [1000, 2000]
        assert candles[0].volume == 10.0

    def test_missing_field(self, tmp_path):
        path = tmp_path / "candles.json"
        path.write_text(json.dumps([{"time": 1, "open": 1, "high": 1, "low": 1}]))

        with pytest.raises(CandleValidationError, match="missing close, volume"):
            load_candles(path)

    def test_malformed_value(self, tmp_path):
        path = tmp_path / "candles.csv"
        path.write_text("time,open,high,low,close,volume\n1000,abc,2,1,1,1\n")

        with pytest.raises(CandleValidationError, match="malformed"):
            load_candles(path)

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "candles.json"
        path.write_text(json.dumps({"candles": []}))

        with pytest.raises(CandleValidationError):
            load_candles(path)

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "candles.parquet"
        path.write_text("")

        with pytest.raises(CandleValidationError, match="Unsupported"):
            load_candles(path)

    def test_unordered_file(self, tmp_path):
        path = tmp_path / "candles.json"
        path.write_text(json.dumps(list(reversed(self.ROWS))))

        with pytest.raises(CandleValidationError):
            load_candles(path)


class TestGenerateCandles:
    """Tests for the synthetic random walk."""

    def test_count_and_spacing(self):
        candles = generate_candles(count=50, interval_ms=60_000, end_time=10_000_000)

        assert len(candles) == 50
        assert candles[-1].time == 10_000_000
        assert candles[1].time - candles[0].time == 60_000

    def test_valid_bars(self):
        candles = generate_candles(count=300, seed=1)
        validate_candles(candles)

        for c in candles:
            assert c.high >= max(c.open, c.close)
            assert c.low <= min(c.open, c.close)

    def test_continuous(self):
        candles = generate_candles(count=20)
        for prev, cur in zip(candles, candles[1:]):
            assert cur.open == prev.close

    def test_seeded(self):
        assert generate_candles(seed=3) == generate_candles(seed=3)
        assert generate_candles(seed=3) != generate_candles(seed=4)
