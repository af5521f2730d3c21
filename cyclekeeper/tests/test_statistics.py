"""Tests for cycle statistics, irregularity detection and the trend series."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from cyclekeeper.analytics.statistics import (
    CycleStatistics,
    compute_statistics,
    cycle_intervals,
    interval_between,
    trend_series,
)
from cyclekeeper.config_loader import IrregularityConfig
from cyclekeeper.tests.conftest import make_record

THRESHOLDS = IrregularityConfig(max_length_variation_days=7, max_interval_variation_days=10)


def build_regular_cycles(n: int = 4, length: int = 5, gap: int = 23) -> list:
    """Build n cycles of equal length separated by equal gaps."""
    records = []
    start = date(2025, 6, 1)
    for _ in range(n):
        end = start + timedelta(days=length - 1)
        records.append(make_record(start, end))
        start = end + timedelta(days=gap + 1)
    return records


class TestIntervals:
    def test_interval_excludes_both_boundaries(self) -> None:
        # Jan 5 end, Jan 10 start: Jan 6, 7, 8, 9 lie strictly between
        assert interval_between(date(2024, 1, 5), date(2024, 1, 10)) == 4

    def test_back_to_back_cycles_have_zero_interval(self) -> None:
        assert interval_between(date(2024, 1, 5), date(2024, 1, 6)) == 0

    def test_overlapping_cycles_give_negative_interval(self) -> None:
        assert interval_between(date(2024, 1, 5), date(2024, 1, 3)) == -3

    def test_example_pair(self) -> None:
        a = make_record(date(2024, 1, 1), date(2024, 1, 5))
        b = make_record(date(2024, 1, 10), date(2024, 1, 14))
        assert a.length == 5
        assert cycle_intervals([a, b]) == [4]

    def test_no_interval_for_first_record(self) -> None:
        assert cycle_intervals([make_record(date(2024, 1, 1), date(2024, 1, 5))]) == []


class TestComputeStatistics:
    def test_empty_collection_returns_sentinel(self) -> None:
        assert compute_statistics([], THRESHOLDS) is None

    def test_single_record(self) -> None:
        stats = compute_statistics([make_record(date(2024, 3, 1), date(2024, 3, 6))], THRESHOLDS)
        assert isinstance(stats, CycleStatistics)
        assert stats.avg_length == 6.0
        assert stats.avg_interval == 0.0
        assert stats.interval_variation == 0
        assert stats.length_variation == 0
        assert stats.total_cycles == 1
        assert not stats.is_irregular

    def test_regular_cycles(self) -> None:
        stats = compute_statistics(build_regular_cycles(4, length=5, gap=23), THRESHOLDS)
        assert stats.avg_length == 5.0
        assert stats.avg_interval == 23.0
        assert stats.length_variation == 0
        assert stats.interval_variation == 0
        assert stats.total_cycles == 4
        assert not stats.is_irregular

    def test_averages_rounded_to_one_decimal_half_up(self) -> None:
        records = [
            make_record(date(2024, 1, 1), date(2024, 1, 4)),    # 4
            make_record(date(2024, 2, 1), date(2024, 2, 5)),    # 5
            make_record(date(2024, 3, 1), date(2024, 3, 5)),    # 5
            make_record(date(2024, 4, 1), date(2024, 4, 5)),    # 5
        ]
        stats = compute_statistics(records, THRESHOLDS)
        # 19 / 4 = 4.75 → 4.8
        assert stats.avg_length == 4.8

    def test_average_interval_one_decimal(self) -> None:
        records = [
            make_record(date(2024, 1, 1), date(2024, 1, 5)),
            make_record(date(2024, 1, 30), date(2024, 2, 3)),   # interval 24
            make_record(date(2024, 2, 29), date(2024, 3, 4)),   # interval 25
            make_record(date(2024, 3, 29), date(2024, 4, 2)),   # interval 24
        ]
        stats = compute_statistics(records, THRESHOLDS)
        assert stats.avg_interval == pytest.approx(24.3)
        assert stats.interval_variation == 1

    def test_length_variation_over_threshold_is_irregular(self) -> None:
        records = [
            make_record(date(2024, 1, 1), date(2024, 1, 3)),    # 3
            make_record(date(2024, 2, 1), date(2024, 2, 11)),   # 11
        ]
        stats = compute_statistics(records, THRESHOLDS)
        assert stats.length_variation == 8
        assert stats.is_irregular

    def test_length_variation_at_threshold_is_regular(self) -> None:
        records = [
            make_record(date(2024, 1, 1), date(2024, 1, 3)),    # 3
            make_record(date(2024, 2, 1), date(2024, 2, 10)),   # 10
        ]
        stats = compute_statistics(records, THRESHOLDS)
        assert stats.length_variation == 7
        assert not stats.is_irregular

    def test_interval_variation_over_threshold_is_irregular(self) -> None:
        records = [
            make_record(date(2024, 1, 1), date(2024, 1, 5)),
            make_record(date(2024, 1, 26), date(2024, 1, 30)),  # interval 20
            make_record(date(2024, 3, 3), date(2024, 3, 7)),    # interval 32
        ]
        stats = compute_statistics(records, THRESHOLDS)
        assert stats.interval_variation == 12
        assert stats.is_irregular

    def test_custom_thresholds(self) -> None:
        records = [
            make_record(date(2024, 1, 1), date(2024, 1, 3)),
            make_record(date(2024, 2, 1), date(2024, 2, 6)),
        ]
        strict = IrregularityConfig(max_length_variation_days=2, max_interval_variation_days=10)
        assert compute_statistics(records, strict).is_irregular

    def test_default_thresholds_come_from_config(self) -> None:
        stats = compute_statistics(build_regular_cycles(3))
        assert stats is not None
        assert not stats.is_irregular


class TestTrendSeries:
    def test_empty(self) -> None:
        assert trend_series([]) == []

    def test_points(self) -> None:
        records = [
            make_record(date(2024, 1, 1), date(2024, 1, 5)),
            make_record(date(2024, 1, 10), date(2024, 1, 13)),
        ]
        first, second = trend_series(records)
        assert first.cycle_number == 1
        assert first.interval_before is None
        assert first.total_length == 5
        assert second.cycle_number == 2
        assert second.interval_before == 4
        assert second.length == 4
        assert second.total_length == 8

    def test_zero_interval_total_is_length(self) -> None:
        records = [
            make_record(date(2024, 1, 1), date(2024, 1, 5)),
            make_record(date(2024, 1, 6), date(2024, 1, 9)),
        ]
        assert trend_series(records)[1].total_length == 4
