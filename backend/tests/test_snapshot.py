"""Tests for per-bar indicator snapshots."""

import pytest
from pydantic import ValidationError

from backtest.candles import generate_candles
from quantcore.indicators import build_snapshots, latest_snapshot
from quantcore.models.config import IndicatorConfig
from quantcore.models.snapshot import IndicatorSnapshot

from helpers import flat_candles, make_candle


class TestBuildSnapshots:
    """Tests for build_snapshots."""

    def test_empty(self):
        assert build_snapshots([]) == []

    def test_aligned_with_candles(self):
        candles = generate_candles(count=120, seed=3)
        snapshots = build_snapshots(candles)

        assert len(snapshots) == len(candles)
        assert [s.time for s in snapshots] == [c.time for c in candles]

    def test_warmup_fields_undefined(self):
        snapshots = build_snapshots(generate_candles(count=60, seed=3))
        first = snapshots[0]

        assert first.ema200 is not None
        assert first.rsi is None
        assert first.atr is None
        assert first.bb_middle is None
        assert first.squeeze is None
        assert snapshots[13].atr is not None
        assert snapshots[14].rsi is not None

    def test_deterministic(self):
        candles = generate_candles(count=150, seed=5)
        assert build_snapshots(candles) == build_snapshots(candles)

    def test_snapshots_are_frozen(self):
        snapshot = build_snapshots(flat_candles(3))[0]
        with pytest.raises(ValidationError):
            snapshot.rsi = 50.0


class TestSqueeze:
    """Tests for the Bollinger-inside-Keltner flag."""

    def test_flat_prices_not_squeezed(self):
        """Collapsed bands are equal, not strictly inside."""
        snapshots = build_snapshots(flat_candles(30))

        assert snapshots[18].squeeze is None
        assert all(s.squeeze is False for s in snapshots[19:])

    def test_squeeze_matches_band_comparison(self):
        for s in build_snapshots(generate_candles(count=200, seed=9)):
            if s.squeeze is None:
                continue
            expected = s.bb_upper < s.keltner_upper and s.bb_lower > s.keltner_lower
            assert s.squeeze == expected


class TestConfirmedPivots:
    """last_pivot_* only reveals a pivot once its right side is complete."""

    def _candles(self):
        highs = [1.0, 3.0, 2.0, 5.0, 4.0, 1.0, 2.0]
        return [
            make_candle(i, open=h - 0.5, high=h, low=h - 1.0, close=h - 0.5)
            for i, h in enumerate(highs)
        ]

    def test_pivot_visible_after_right_bars(self):
        config = IndicatorConfig(pivot_left=1, pivot_right=1)
        snapshots = build_snapshots(self._candles(), config)

        assert snapshots[1].pivot_high == 3.0
        assert snapshots[1].last_pivot_high is None
        assert snapshots[2].last_pivot_high == 3.0
        assert snapshots[3].last_pivot_high == 3.0
        assert snapshots[4].last_pivot_high == 5.0
        assert snapshots[6].last_pivot_high == 5.0

    def test_no_lookahead(self):
        """Appending bars never changes earlier confirmed values."""
        config = IndicatorConfig(pivot_left=1, pivot_right=1)
        candles = self._candles()
        partial = build_snapshots(candles[:4], config)
        full = build_snapshots(candles, config)

        for a, b in zip(partial, full):
            assert a.last_pivot_high == b.last_pivot_high
            assert a.last_pivot_low == b.last_pivot_low


class TestLatestSnapshot:
    """Tests for latest_snapshot."""

    def test_empty(self):
        assert latest_snapshot([]) is None

    def test_matches_last_of_full_build(self):
        candles = generate_candles(count=80, seed=4)
        assert latest_snapshot(candles) == build_snapshots(candles)[-1]

    def test_snapshot_model_defaults(self):
        snapshot = IndicatorSnapshot(time=0)
        assert snapshot.ema200 is None
        assert snapshot.supertrend_direction is None
