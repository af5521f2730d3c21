"""Derived cycle metrics: averages, variation ranges, irregularity, trend series."""

from cyclekeeper.analytics.statistics import (
    CycleStatistics,
    TrendPoint,
    compute_statistics,
    trend_series,
)

__all__ = ["CycleStatistics", "TrendPoint", "compute_statistics", "trend_series"]
