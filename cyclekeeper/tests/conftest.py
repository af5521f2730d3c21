"""Shared fixtures for the cyclekeeper test suite."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from cyclekeeper.config_loader import TrackerConfig, load_tracker_config
from cyclekeeper.exceptions import RemoteStoreError, TransportFailure
from cyclekeeper.models.cycles import (
    CycleRecord,
    LocalId,
    RemoteId,
    calculate_length,
)
from cyclekeeper.services.local_cache import LocalCache
from cyclekeeper.sync.coordinator import SyncCoordinator
from cyclekeeper.sync.monitor import ConnectivityMonitor


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_record(
    start: date,
    end: date,
    cycle_id: LocalId | RemoteId | None = None,
    pending_sync: bool = False,
    **fields,
) -> CycleRecord:
    return CycleRecord(
        id=cycle_id or RemoteId(value=f"r-{start.isoformat()}"),
        start_date=start,
        end_date=end,
        length=calculate_length(start, end),
        pending_sync=pending_sync,
        **fields,
    )


class FakeRemoteStore:
    """In-memory stand-in for SupabaseCycleStore.

    Set ``failure`` to make every call raise it, as an unreachable store would.
    """

    def __init__(self, rows: list[CycleRecord] | None = None) -> None:
        self.rows: dict[RemoteId, CycleRecord] = {r.id: r for r in rows or []}
        self.failure: RemoteStoreError | None = None
        self.calls: list[tuple[str, object]] = []
        self._next_id = 100

    def _check(self, name: str, arg: object = None) -> None:
        self.calls.append((name, arg))
        if self.failure is not None:
            raise self.failure

    async def fetch_all(self) -> list[CycleRecord]:
        self._check("fetch_all")
        return sorted(self.rows.values(), key=lambda r: r.start_date)

    async def insert(self, record: CycleRecord) -> CycleRecord:
        self._check("insert", record.id)
        self._next_id += 1
        created = record.model_copy(
            update={"id": RemoteId(value=str(self._next_id)), "pending_sync": False}
        )
        self.rows[created.id] = created
        return created

    async def update(self, remote_id: RemoteId, record: CycleRecord) -> CycleRecord:
        self._check("update", remote_id)
        updated = record.model_copy(update={"id": remote_id, "pending_sync": False})
        self.rows[remote_id] = updated
        return updated

    async def delete(self, remote_id: RemoteId) -> None:
        self._check("delete", remote_id)
        self.rows.pop(remote_id, None)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tracker_config() -> TrackerConfig:
    """Load the bundled tracker config."""
    return load_tracker_config()


@pytest.fixture
def cache(tmp_path: Path) -> LocalCache:
    return LocalCache(directory=tmp_path / "cache", key="menstrualCycles")


@pytest.fixture
def remote() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture
def online_coordinator(
    cache: LocalCache, remote: FakeRemoteStore, tracker_config: TrackerConfig
) -> SyncCoordinator:
    """Remote configured and reachable."""
    return SyncCoordinator(
        cache=cache,
        monitor=ConnectivityMonitor(remote_configured=True, online=True),
        remote=remote,
        config=tracker_config,
    )


@pytest.fixture
def offline_coordinator(
    cache: LocalCache, remote: FakeRemoteStore, tracker_config: TrackerConfig
) -> SyncCoordinator:
    """Remote configured but the device is offline."""
    return SyncCoordinator(
        cache=cache,
        monitor=ConnectivityMonitor(remote_configured=True, online=False),
        remote=remote,
        config=tracker_config,
    )


@pytest.fixture
def local_coordinator(cache: LocalCache, tracker_config: TrackerConfig) -> SyncCoordinator:
    """No remote store configured at all."""
    return SyncCoordinator(
        cache=cache,
        monitor=ConnectivityMonitor(remote_configured=False, online=True),
        remote=None,
        config=tracker_config,
    )


@pytest.fixture
def unreachable() -> TransportFailure:
    return TransportFailure("Supabase GET failed: connection refused")
