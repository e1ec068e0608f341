"""Per-bar indicator snapshot assembly.

Snapshots are always rebuilt in full from the candle sequence; nothing is
updated incrementally, so a parameter change simply means a new build.
"""

from __future__ import annotations

import logging
from typing import Sequence

from quantcore.indicators.indicators import IndicatorCalculator, Series
from quantcore.models.candle import Candle
from quantcore.models.config import IndicatorConfig
from quantcore.models.snapshot import IndicatorSnapshot

logger = logging.getLogger(__name__)


def _confirmed_pivots(pivots: Series, right: int) -> Series:
    """Most recent pivot value known at each bar.

    A pivot at index j needs ``right`` later bars, so it becomes visible
    at bar j + right.
    """
    n = len(pivots)
    result: Series = [None] * n
    last: float | None = None
    for i in range(n):
        j = i - right
        if j >= 0 and pivots[j] is not None:
            last = pivots[j]
        result[i] = last
    return result


def _squeeze(
    bb_upper: float | None,
    bb_lower: float | None,
    kc_upper: float | None,
    kc_lower: float | None,
) -> bool | None:
    if None in (bb_upper, bb_lower, kc_upper, kc_lower):
        return None
    return bb_upper < kc_upper and bb_lower > kc_lower


def build_snapshots(
    candles: Sequence[Candle],
    config: IndicatorConfig | None = None,
) -> list[IndicatorSnapshot]:
    """Build one IndicatorSnapshot per candle.

    Args:
        candles: Candles in ascending time order
        config: Indicator periods (defaults to IndicatorConfig())

    Returns:
        List of snapshots, index-aligned with ``candles``
    """
    config = config or IndicatorConfig()
    if not candles:
        return []

    values = IndicatorCalculator(config).calculate_all(candles)
    last_pivot_high = _confirmed_pivots(values["pivot_high"], config.pivot_right)
    last_pivot_low = _confirmed_pivots(values["pivot_low"], config.pivot_right)

    snapshots = []
    for i, candle in enumerate(candles):
        fields = {name: series[i] for name, series in values.items()}
        snapshots.append(
            IndicatorSnapshot(
                time=candle.time,
                last_pivot_high=last_pivot_high[i],
                last_pivot_low=last_pivot_low[i],
                squeeze=_squeeze(
                    fields["bb_upper"],
                    fields["bb_lower"],
                    fields["keltner_upper"],
                    fields["keltner_lower"],
                ),
                **fields,
            )
        )

    logger.debug("Built %d indicator snapshots", len(snapshots))
    return snapshots


def latest_snapshot(
    candles: Sequence[Candle],
    config: IndicatorConfig | None = None,
) -> IndicatorSnapshot | None:
    """Snapshot for the latest bar only, or None for an empty sequence."""
    snapshots = build_snapshots(candles, config)
    return snapshots[-1] if snapshots else None
