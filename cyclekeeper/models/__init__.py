"""Canonical data models for cycle records."""

from cyclekeeper.models.cycles import (
    CycleId,
    CycleInput,
    CycleRecord,
    Flow,
    LocalId,
    RemoteId,
    calculate_length,
    dump_collection,
    parse_collection,
    parse_cycle_id,
)

__all__ = [
    "CycleId",
    "CycleInput",
    "CycleRecord",
    "Flow",
    "LocalId",
    "RemoteId",
    "calculate_length",
    "dump_collection",
    "parse_collection",
    "parse_cycle_id",
]
