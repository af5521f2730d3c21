"""Response schemas for derived metrics and the entry form vocabulary."""

from __future__ import annotations

from dataclasses import asdict
from datetime import date

from cyclekeeper.analytics.statistics import CycleStatistics, TrendPoint
from cyclekeeper.config_loader import TrackerConfig
from cyclekeeper.models.base import CycleKeeperBase
from cyclekeeper.models.cycles import Flow


class CycleStatisticsRead(CycleKeeperBase):
    avg_length: float
    avg_interval: float
    length_variation: int
    interval_variation: int
    total_cycles: int
    is_irregular: bool

    @classmethod
    def from_result(cls, stats: CycleStatistics) -> CycleStatisticsRead:
        return cls(**asdict(stats))


class TrendPointRead(CycleKeeperBase):
    cycle_number: int
    start_date: date
    length: int
    interval_before: int | None = None
    total_length: int

    @classmethod
    def from_result(cls, point: TrendPoint) -> TrendPointRead:
        return cls(**asdict(point))


class VocabularyRead(CycleKeeperBase):
    """Choices offered by the entry form."""

    symptoms: list[str]
    pre_symptoms: list[str]
    flow_labels: dict[Flow, str]

    @classmethod
    def from_config(cls, config: TrackerConfig) -> VocabularyRead:
        return cls(
            symptoms=list(config.symptoms.during),
            pre_symptoms=list(config.symptoms.before),
            flow_labels={flow: flow.label for flow in Flow},
        )
