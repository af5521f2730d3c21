"""JSON export of the canonical collection.

The export is the collection verbatim, in canonical camelCase field names,
pretty-printed with a two-space indent.  ``parse_export`` reads it back.
"""

from __future__ import annotations

from datetime import date

from cyclekeeper.models.cycles import CycleRecord, dump_collection, parse_collection

EXPORT_MEDIA_TYPE = "application/json"


def export_collection(records: list[CycleRecord]) -> bytes:
    return dump_collection(records, indent=2)


def export_filename(today: date | None = None) -> str:
    """Download filename embedding the export date, e.g. ``cycles-2026-10-19.json``."""
    return f"cycles-{(today or date.today()).isoformat()}.json"


def parse_export(data: bytes | str) -> list[CycleRecord]:
    return parse_collection(data)
