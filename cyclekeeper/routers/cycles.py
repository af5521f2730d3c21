"""Collaborator-facing endpoints for the cycle collection.

Identifiers travel as path segments in their text form: ``local:<timestamp>``
for records not yet confirmed by the remote store, the remote value otherwise.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, HTTPException, Response

from cyclekeeper.dependencies import Coordinator
from cyclekeeper.exceptions import NotFoundError, ValidationError
from cyclekeeper.models.base import CycleKeeperBase
from cyclekeeper.models.cycles import CycleInput, CycleRecord, parse_cycle_id
from cyclekeeper.models.statistics import CycleStatisticsRead, TrendPointRead, VocabularyRead
from cyclekeeper.sync.export import EXPORT_MEDIA_TYPE
from cyclekeeper.sync.monitor import SyncMode

router = APIRouter(tags=["cycles"])


class SyncStatus(CycleKeeperBase):
    remote_configured: bool
    online: bool
    mode: SyncMode
    pending_count: int
    last_advisory: str | None = None


class ConnectivityUpdate(CycleKeeperBase):
    online: bool


def _status(coordinator: Coordinator) -> SyncStatus:
    monitor = coordinator.monitor
    return SyncStatus(
        remote_configured=monitor.remote_configured,
        online=monitor.online,
        mode=monitor.mode,
        pending_count=coordinator.state.pending_count,
        last_advisory=coordinator.last_advisory,
    )


@router.get("/cycles", response_model=list[CycleRecord])
async def list_cycles(coordinator: Coordinator) -> Any:
    """Return the in-memory collection without touching storage."""
    return coordinator.records


@router.post("/cycles/reload", response_model=list[CycleRecord])
async def reload_cycles(coordinator: Coordinator) -> Any:
    """Replace the collection from the remote store, or the local cache."""
    return await coordinator.load()


@router.post("/cycles", response_model=CycleRecord, status_code=201)
async def create_cycle(coordinator: Coordinator, body: CycleInput) -> Any:
    try:
        return await coordinator.create(body)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/cycles/statistics", response_model=CycleStatisticsRead | None)
async def get_statistics(coordinator: Coordinator) -> Any:
    stats = coordinator.statistics()
    return CycleStatisticsRead.from_result(stats) if stats is not None else None


@router.get("/cycles/trend", response_model=list[TrendPointRead])
async def get_trend(coordinator: Coordinator) -> Any:
    return [TrendPointRead.from_result(point) for point in coordinator.trend()]


@router.get("/cycles/vocabulary", response_model=VocabularyRead)
async def get_vocabulary(coordinator: Coordinator) -> Any:
    """Symptom choices and flow labels for the entry form."""
    return VocabularyRead.from_config(coordinator.config)


@router.get("/cycles/export")
async def export_cycles(coordinator: Coordinator) -> Response:
    return Response(
        content=coordinator.export(),
        media_type=EXPORT_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{coordinator.export_filename()}"'
        },
    )


@router.post("/cycles/sync")
async def push_pending(coordinator: Coordinator) -> dict:
    return asdict(await coordinator.push_pending())


@router.put("/cycles/{cycle_id}", response_model=CycleRecord)
async def update_cycle(cycle_id: str, coordinator: Coordinator, body: CycleInput) -> Any:
    try:
        return await coordinator.update(parse_cycle_id(cycle_id), body)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/cycles/{cycle_id}", status_code=204)
async def delete_cycle(cycle_id: str, coordinator: Coordinator) -> None:
    await coordinator.delete(parse_cycle_id(cycle_id))


@router.get("/status", response_model=SyncStatus)
async def get_status(coordinator: Coordinator) -> Any:
    return _status(coordinator)


@router.put("/status/connectivity", response_model=SyncStatus)
async def set_connectivity(coordinator: Coordinator, body: ConnectivityUpdate) -> Any:
    coordinator.monitor.set_online(body.online)
    return _status(coordinator)
