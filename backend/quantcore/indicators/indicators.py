"""Technical indicators for signal generation.

Every public function takes plain price sequences and returns a series of
the same length. Entries inside an indicator's warmup window are ``None``;
NaN is only used inside the NumPy implementations and never leaks out.
"""

from __future__ import annotations

from typing import NamedTuple, Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from quantcore.models.candle import Candle
from quantcore.models.config import IndicatorConfig
from quantcore.models.snapshot import TrendDirection

Series = list[float | None]


class BollingerBands(NamedTuple):
    upper: Series
    middle: Series
    lower: Series


class MacdResult(NamedTuple):
    macd: Series
    signal: Series
    histogram: Series


class DonchianChannel(NamedTuple):
    upper: Series
    lower: Series
    middle: Series


class SupertrendResult(NamedTuple):
    value: Series
    direction: list[TrendDirection | None]


class KeltnerChannel(NamedTuple):
    upper: Series
    middle: Series
    lower: Series


def _to_array(values: Sequence[float | None]) -> np.ndarray:
    return np.array(
        [np.nan if v is None else float(v) for v in values], dtype=np.float64
    )


def _to_series(arr: np.ndarray) -> Series:
    return [None if np.isnan(v) else float(v) for v in arr]


# =============================================================================
# NumPy implementations (operate on float arrays, NaN = undefined)
# =============================================================================

def _numpy_ema(arr: np.ndarray, period: int) -> np.ndarray:
    """EMA seeded at the first defined value, no warmup gap."""
    result = np.full(len(arr), np.nan)
    defined = np.flatnonzero(~np.isnan(arr))
    if len(defined) == 0:
        return result

    k = 2.0 / (period + 1)
    start = defined[0]
    prev = arr[start]
    result[start] = prev

    for i in range(start + 1, len(arr)):
        value = arr[i]
        if not np.isnan(value):
            # Same as value*k + prev*(1-k), but exact for a constant input
            prev = prev + k * (value - prev)
        result[i] = prev

    return result


def _numpy_rolling(arr: np.ndarray, period: int, func) -> np.ndarray:
    result = np.full(len(arr), np.nan)
    if period < 1 or len(arr) < period:
        return result
    windows = sliding_window_view(arr, period)
    result[period - 1:] = func(windows, axis=1)
    return result


def _numpy_true_range(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray
) -> np.ndarray:
    if len(highs) == 0:
        return np.array([], dtype=np.float64)

    tr = highs - lows
    prev_close = closes[:-1]
    tr[1:] = np.maximum.reduce([
        highs[1:] - lows[1:],
        np.abs(highs[1:] - prev_close),
        np.abs(lows[1:] - prev_close),
    ])
    return tr


def _numpy_atr(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int
) -> np.ndarray:
    tr = _numpy_true_range(highs, lows, closes)
    result = np.full(len(tr), np.nan)
    if len(tr) < period:
        return result

    result[period - 1] = np.mean(tr[:period])
    for i in range(period, len(tr)):
        result[i] = (result[i - 1] * (period - 1) + tr[i]) / period
    return result


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


# =============================================================================
# Public API
# =============================================================================

def ema(values: Sequence[float | None], period: int) -> Series:
    """
    Calculate Exponential Moving Average.

    ema[0] = values[0], then ema[i] = values[i]*k + ema[i-1]*(1-k) with
    k = 2/(period+1). The first value is always defined; leading ``None``
    inputs are skipped and the EMA is seeded at the first defined input.

    Args:
        values: Sequence of price values
        period: EMA period

    Returns:
        List of EMA values (same length as input)
    """
    return _to_series(_numpy_ema(_to_array(values), period))


def sma(values: Sequence[float | None], period: int) -> Series:
    """
    Calculate Simple Moving Average.

    Args:
        values: Sequence of values
        period: SMA period

    Returns:
        List of SMA values, defined from index ``period - 1``
    """
    return _to_series(_numpy_rolling(_to_array(values), period, np.mean))


def highest(values: Sequence[float | None], period: int) -> Series:
    """Calculate highest value over lookback period."""
    return _to_series(_numpy_rolling(_to_array(values), period, np.max))


def lowest(values: Sequence[float | None], period: int) -> Series:
    """Calculate lowest value over lookback period."""
    return _to_series(_numpy_rolling(_to_array(values), period, np.min))


def rsi(closes: Sequence[float], period: int = 14) -> Series:
    """
    Calculate Relative Strength Index with Wilder's smoothing.

    The first ``period`` price changes seed the average gain/loss; each later
    bar updates avg = (avg*(period-1) + current)/period. A zero average loss
    saturates RSI at 100.

    Args:
        closes: Sequence of close prices
        period: RSI period

    Returns:
        List of RSI values, defined from index ``period``
    """
    arr = _to_array(closes)
    n = len(arr)
    result = np.full(n, np.nan)
    if n <= period:
        return _to_series(result)

    diffs = np.diff(arr)
    gains = np.where(diffs > 0, diffs, 0.0)
    losses = np.where(diffs < 0, -diffs, 0.0)

    avg_gain = float(np.mean(gains[:period]))
    avg_loss = float(np.mean(losses[:period]))
    result[period] = _rsi_value(avg_gain, avg_loss)

    for i in range(period + 1, n):
        avg_gain = (avg_gain * (period - 1) + gains[i - 1]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i - 1]) / period
        result[i] = _rsi_value(avg_gain, avg_loss)

    return _to_series(result)


def true_range(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
) -> Series:
    """
    Calculate True Range.

    TR = max(high - low, abs(high - prev_close), abs(low - prev_close)),
    TR[0] = high - low.
    """
    return _to_series(
        _numpy_true_range(_to_array(highs), _to_array(lows), _to_array(closes))
    )


def atr(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> Series:
    """
    Calculate Average True Range (ATR).

    Seeded with the mean of the first ``period`` true ranges at index
    ``period - 1``, then Wilder-smoothed.

    Args:
        highs: Sequence of high prices
        lows: Sequence of low prices
        closes: Sequence of close prices
        period: ATR period

    Returns:
        List of ATR values
    """
    return _to_series(
        _numpy_atr(_to_array(highs), _to_array(lows), _to_array(closes), period)
    )


def bollinger_bands(
    closes: Sequence[float],
    period: int = 20,
    multiplier: float = 2.0,
) -> BollingerBands:
    """
    Calculate Bollinger Bands over a trailing window.

    Uses the population standard deviation, so upper >= middle >= lower.
    """
    arr = _to_array(closes)
    middle = _numpy_rolling(arr, period, np.mean)
    std = _numpy_rolling(arr, period, np.std)
    upper = middle + multiplier * std
    lower = middle - multiplier * std
    return BollingerBands(_to_series(upper), _to_series(middle), _to_series(lower))


def macd(
    closes: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MacdResult:
    """
    Calculate MACD line, signal line and histogram.

    The signal EMA runs over the defined part of the MACD line only and is
    then re-aligned to the input index space by padding the leading offset.
    """
    arr = _to_array(closes)
    n = len(arr)
    macd_line = _numpy_ema(arr, fast) - _numpy_ema(arr, slow)

    defined = macd_line[~np.isnan(macd_line)]
    signal_line = np.full(n, np.nan)
    if len(defined):
        offset = n - len(defined)
        signal_line[offset:] = _numpy_ema(defined, signal)

    histogram = macd_line - signal_line
    return MacdResult(
        _to_series(macd_line), _to_series(signal_line), _to_series(histogram)
    )


def vwap(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    volumes: Sequence[float],
) -> Series:
    """
    Calculate Volume Weighted Average Price (VWAP).

    Cumulative from the start of the series with no session reset.
    Undefined while cumulative volume is still zero.
    """
    h, l, c, v = (_to_array(x) for x in (highs, lows, closes, volumes))
    typical = (h + l + c) / 3
    cum_pv = np.cumsum(typical * v)
    cum_vol = np.cumsum(v)

    result = np.full(len(c), np.nan)
    np.divide(cum_pv, cum_vol, out=result, where=cum_vol > 0)
    return _to_series(result)


def donchian(
    highs: Sequence[float],
    lows: Sequence[float],
    period: int = 20,
) -> DonchianChannel:
    """Calculate Donchian Channel (rolling highest high / lowest low)."""
    upper = _numpy_rolling(_to_array(highs), period, np.max)
    lower = _numpy_rolling(_to_array(lows), period, np.min)
    return DonchianChannel(
        _to_series(upper), _to_series(lower), _to_series((upper + lower) / 2)
    )


def supertrend(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 10,
    multiplier: float = 3.0,
) -> SupertrendResult:
    """
    Calculate Supertrend with the standard trailing-band lock.

    basic bands = hl2 -/+ multiplier * ATR. The final lower band may only
    rise and the final upper band may only fall, unless the previous close
    already broke through it. The trend turns down when the close falls
    below the final lower band and turns up when it rises above the final
    upper band. The line follows the lower band in an uptrend and the upper
    band in a downtrend. Trend starts ``up`` at the first defined ATR bar.

    Returns:
        SupertrendResult of (line value, trend direction) series
    """
    h, l, c = _to_array(highs), _to_array(lows), _to_array(closes)
    n = len(c)
    atr_values = _numpy_atr(h, l, c, period)

    values: Series = [None] * n
    directions: list[TrendDirection | None] = [None] * n
    if n < period:
        return SupertrendResult(values, directions)

    hl2 = (h + l) / 2
    basic_upper = hl2 + multiplier * atr_values
    basic_lower = hl2 - multiplier * atr_values

    start = period - 1
    final_upper = basic_upper[start]
    final_lower = basic_lower[start]
    direction = TrendDirection.UP
    values[start] = float(final_lower)
    directions[start] = direction

    for i in range(start + 1, n):
        prev_close = c[i - 1]

        if basic_upper[i] < final_upper or prev_close > final_upper:
            final_upper = basic_upper[i]
        if basic_lower[i] > final_lower or prev_close < final_lower:
            final_lower = basic_lower[i]

        if direction == TrendDirection.UP and c[i] < final_lower:
            direction = TrendDirection.DOWN
        elif direction == TrendDirection.DOWN and c[i] > final_upper:
            direction = TrendDirection.UP

        line = final_lower if direction == TrendDirection.UP else final_upper
        values[i] = float(line)
        directions[i] = direction

    return SupertrendResult(values, directions)


def _pivots(arr: np.ndarray, left: int, right: int, func) -> Series:
    n = len(arr)
    result = np.full(n, np.nan)
    width = left + right + 1
    if n < width:
        return _to_series(result)

    extremes = func(sliding_window_view(arr, width), axis=1)
    centers = arr[left:n - right]
    result[left:n - right] = np.where(centers == extremes, centers, np.nan)
    return _to_series(result)


def pivot_high(highs: Sequence[float], left: int = 5, right: int = 5) -> Series:
    """
    Mark pivot highs.

    Index i is a pivot high when high[i] is the maximum of highs[i-left:i+right+1].
    The series holds the pivot price on pivot bars and None elsewhere,
    including the first ``left`` and last ``right`` bars.
    """
    return _pivots(_to_array(highs), left, right, np.max)


def pivot_low(lows: Sequence[float], left: int = 5, right: int = 5) -> Series:
    """Mark pivot lows (mirror of pivot_high)."""
    return _pivots(_to_array(lows), left, right, np.min)


def keltner(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 20,
    multiplier: float = 1.5,
) -> KeltnerChannel:
    """Calculate Keltner Channel: EMA(close) -/+ multiplier * ATR."""
    h, l, c = _to_array(highs), _to_array(lows), _to_array(closes)
    middle = _numpy_ema(c, period)
    atr_values = _numpy_atr(h, l, c, period)
    upper = middle + multiplier * atr_values
    lower = middle - multiplier * atr_values
    return KeltnerChannel(_to_series(upper), _to_series(middle), _to_series(lower))


# =============================================================================
# IndicatorCalculator class
# =============================================================================

class IndicatorCalculator:
    """Calculator for all technical indicators used by the strategies."""

    def __init__(self, config: IndicatorConfig | None = None):
        self.config = config or IndicatorConfig()

    def calculate_all(self, candles: Sequence[Candle]) -> dict:
        """
        Calculate all indicators for the given candles.

        Args:
            candles: Candles in ascending time order

        Returns:
            Dict of indicator name -> series aligned with ``candles``
        """
        cfg = self.config
        highs = [c.high for c in candles]
        lows = [c.low for c in candles]
        closes = [c.close for c in candles]
        volumes = [c.volume for c in candles]

        bands = bollinger_bands(closes, cfg.bb_period, cfg.bb_multiplier)
        macd_result = macd(closes, cfg.macd_fast, cfg.macd_slow, cfg.macd_signal)
        channel = donchian(highs, lows, cfg.donchian_period)
        trend = supertrend(
            highs, lows, closes, cfg.supertrend_period, cfg.supertrend_multiplier
        )
        kc = keltner(highs, lows, closes, cfg.keltner_period, cfg.keltner_multiplier)

        return {
            "ema200": ema(closes, cfg.ema_trend_period),
            "ema50": ema(closes, cfg.ema_mid_period),
            "ema9": ema(closes, cfg.ema_fast_period),
            "ema21": ema(closes, cfg.ema_slow_period),
            "rsi": rsi(closes, cfg.rsi_period),
            "atr": atr(highs, lows, closes, cfg.atr_period),
            "bb_upper": bands.upper,
            "bb_middle": bands.middle,
            "bb_lower": bands.lower,
            "macd": macd_result.macd,
            "macd_signal": macd_result.signal,
            "macd_histogram": macd_result.histogram,
            "vwap": vwap(highs, lows, closes, volumes),
            "supertrend": trend.value,
            "supertrend_direction": trend.direction,
            "donchian_upper": channel.upper,
            "donchian_lower": channel.lower,
            "pivot_high": pivot_high(highs, cfg.pivot_left, cfg.pivot_right),
            "pivot_low": pivot_low(lows, cfg.pivot_left, cfg.pivot_right),
            "keltner_upper": kc.upper,
            "keltner_lower": kc.lower,
            "volume_sma": sma(volumes, cfg.volume_sma_period),
        }
