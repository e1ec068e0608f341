"""Candle sources for backtesting.

- load_candles: read candles from a .json or .csv file and validate them
- generate_candles: seeded random-walk candles for demos and tests

Validation happens here, before candles reach the engine, which assumes
clean input.
"""

from __future__ import annotations

import csv
import json
import logging
import math
from pathlib import Path
from typing import Iterable

import numpy as np

from quantcore.models.candle import Candle

logger = logging.getLogger(__name__)

FIELDS = ("time", "open", "high", "low", "close", "volume")


class CandleValidationError(ValueError):
    """Raised when candle input is malformed."""


def validate_candles(candles: list[Candle]) -> list[Candle]:
    """Check ordering and values of a candle sequence.

    Raises:
        CandleValidationError: On non-increasing time, non-finite prices or
            volume, negative volume, or high below low.
    """
    prev_time: int | None = None
    for i, c in enumerate(candles):
        values = (c.open, c.high, c.low, c.close, c.volume)
        if not all(math.isfinite(v) for v in values):
            raise CandleValidationError(f"Candle {i} has non-finite values: {c}")
        if c.volume < 0:
            raise CandleValidationError(f"Candle {i} has negative volume: {c.volume}")
        if c.high < c.low:
            raise CandleValidationError(f"Candle {i} has high < low: {c}")
        if prev_time is not None and c.time <= prev_time:
            raise CandleValidationError(
                f"Candle {i} time {c.time} is not after {prev_time}"
            )
        prev_time = c.time
    return candles


def _from_rows(rows: Iterable[dict]) -> list[Candle]:
    candles = []
    for i, row in enumerate(rows):
        missing = [f for f in FIELDS if f not in row or row[f] in (None, "")]
        if missing:
            raise CandleValidationError(f"Row {i} is missing {', '.join(missing)}")
        try:
            candles.append(
                Candle(
                    time=int(float(row["time"])),
                    open=float(row["open"]),
                    high=float(row["high"]),
                    low=float(row["low"]),
                    close=float(row["close"]),
                    volume=float(row["volume"]),
                )
            )
        except (TypeError, ValueError) as e:
            raise CandleValidationError(f"Row {i} is malformed: {e}") from e
    return candles


def load_candles(path: str | Path) -> list[Candle]:
    """Load candles from a JSON list of objects or a CSV file with a header.

    Both formats use the fields time (epoch ms), open, high, low, close,
    volume.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        with open(path) as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise CandleValidationError(f"{path} must contain a JSON list")
        candles = _from_rows(data)
    elif suffix == ".csv":
        with open(path, newline="") as f:
            candles = _from_rows(csv.DictReader(f))
    else:
        raise CandleValidationError(f"Unsupported candle file type: {suffix or path}")

    logger.info(f"Loaded {len(candles)} candles from {path}")
    return validate_candles(candles)


def generate_candles(
    count: int = 200,
    start_price: float = 60_000.0,
    interval_ms: int = 300_000,
    seed: int = 42,
    end_time: int = 1_700_000_000_000,
) -> list[Candle]:
    """Generate a seeded random walk of candles.

    Each bar moves the close by up to +/-250, adds wicks of up to 100 above
    and below the body, and draws volume in [0, 100). The last bar opens at
    ``end_time``; earlier bars are spaced ``interval_ms`` apart.
    """
    rng = np.random.default_rng(seed)
    changes = (rng.random(count) - 0.5) * 500
    upper_wicks = rng.random(count) * 100
    lower_wicks = rng.random(count) * 100
    volumes = rng.random(count) * 100

    candles = []
    price = start_price
    for i in range(count):
        open_ = price
        close = price + float(changes[i])
        candles.append(
            Candle(
                time=end_time - (count - 1 - i) * interval_ms,
                open=open_,
                high=max(open_, close) + float(upper_wicks[i]),
                low=min(open_, close) - float(lower_wicks[i]),
                close=close,
                volume=float(volumes[i]),
            )
        )
        price = close
    return candles
