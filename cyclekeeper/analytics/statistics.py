"""Trend statistics and irregularity detection for logged cycles.

Everything here is a pure function of the (sorted) record collection and is
recomputed on every change; nothing is cached or persisted.

Definitions:
    length    — days from start to end, both included (stored on the record)
    interval  — days strictly between the end of one cycle and the start of
                the next; undefined for the first record
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from cyclekeeper.config_loader import IrregularityConfig, get_tracker_config
from cyclekeeper.models.cycles import CycleRecord

logger = logging.getLogger("cyclekeeper.analytics.statistics")

_ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True)
class CycleStatistics:
    """Aggregate metrics over the whole collection.

    Attributes:
        avg_length:         Mean cycle length, one decimal place.
        avg_interval:       Mean interval between cycles, one decimal place
                            (0.0 with fewer than two records).
        length_variation:   Longest minus shortest length.
        interval_variation: Longest minus shortest interval (0 with fewer
                            than two intervals).
        total_cycles:       Number of records.
        is_irregular:       True when either variation exceeds its threshold.
                            Display hint only.
    """

    avg_length: float
    avg_interval: float
    length_variation: int
    interval_variation: int
    total_cycles: int
    is_irregular: bool


@dataclass(frozen=True)
class TrendPoint:
    """One point of the per-cycle trend series used for charts.

    Attributes:
        cycle_number:    1-based position in the collection.
        start_date:      First day of the cycle.
        length:          Cycle length in days.
        interval_before: Gap since the previous cycle, None for the first.
        total_length:    ``length + interval_before`` when the gap is non-zero,
                         otherwise just ``length``.
    """

    cycle_number: int
    start_date: date
    length: int
    interval_before: int | None
    total_length: int


def interval_between(previous_end: date, next_start: date) -> int:
    """Days strictly between two cycles, excluding both boundary dates."""
    return (next_start - previous_end).days - 1


def cycle_intervals(records: list[CycleRecord]) -> list[int]:
    return [
        interval_between(previous.end_date, current.start_date)
        for previous, current in zip(records, records[1:])
    ]


def _mean_one_decimal(values: list[int]) -> float:
    if not values:
        return 0.0
    mean = Decimal(sum(values)) / Decimal(len(values))
    return float(mean.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def compute_statistics(
    records: list[CycleRecord], thresholds: IrregularityConfig | None = None
) -> CycleStatistics | None:
    """Derive aggregate statistics from the collection.

    Args:
        records:    Collection sorted by start date.
        thresholds: Irregularity thresholds; defaults to the tracker config.

    Returns:
        CycleStatistics, or None when the collection is empty.
    """
    if not records:
        return None
    limits = thresholds or get_tracker_config().irregularity

    lengths = [r.length for r in records]
    intervals = cycle_intervals(records)

    length_variation = max(lengths) - min(lengths)
    interval_variation = max(intervals) - min(intervals) if intervals else 0
    is_irregular = (
        length_variation > limits.max_length_variation_days
        or interval_variation > limits.max_interval_variation_days
    )
    if is_irregular:
        logger.debug(
            "Irregular cycles: length variation %d, interval variation %d",
            length_variation, interval_variation,
        )

    return CycleStatistics(
        avg_length=_mean_one_decimal(lengths),
        avg_interval=_mean_one_decimal(intervals),
        length_variation=length_variation,
        interval_variation=interval_variation,
        total_cycles=len(records),
        is_irregular=is_irregular,
    )


def trend_series(records: list[CycleRecord]) -> list[TrendPoint]:
    """Build the per-cycle series plotted by the collaborator."""
    points: list[TrendPoint] = []
    for index, record in enumerate(records):
        interval = (
            interval_between(records[index - 1].end_date, record.start_date)
            if index > 0
            else None
        )
        points.append(
            TrendPoint(
                cycle_number=index + 1,
                start_date=record.start_date,
                length=record.length,
                interval_before=interval,
                total_length=record.length + interval if interval else record.length,
            )
        )
    return points
