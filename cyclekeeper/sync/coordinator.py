"""Synchronization coordinator, the single owner of the cycle collection.

Policy:
    - The remote store is authoritative whenever it is usable (configured and
      online).  Writes go there first.
    - The local cache is a write-behind mirror and the offline fallback.  It
      is rewritten after every mutation regardless of the remote outcome.
    - A failed or skipped remote write never fails the operation.  The record
      is kept locally with ``pending_sync`` set and an advisory is recorded.
    - Nothing is retried automatically.  ``push_pending()`` replays pending
      work when the collaborator asks for it.

There is no cross-sink transaction.  After a failed remote update the local
copy states a change the remote store never received; the record stays
flagged pending until a successful push.

Callers must await one operation before issuing the next mutation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any

import httpx

from cyclekeeper.analytics.statistics import (
    CycleStatistics,
    TrendPoint,
    compute_statistics,
    trend_series,
)
from cyclekeeper.config import Settings, get_settings
from cyclekeeper.config_loader import TrackerConfig, get_tracker_config
from cyclekeeper.exceptions import NotFoundError, RemoteStoreError
from cyclekeeper.models.cycles import CycleInput, CycleRecord, LocalId, RemoteId
from cyclekeeper.services.local_cache import LocalCache
from cyclekeeper.services.supabase import SupabaseCycleStore
from cyclekeeper.sync.export import export_collection, export_filename
from cyclekeeper.sync.monitor import ConnectivityMonitor
from cyclekeeper.sync.state import TrackerState

logger = logging.getLogger("cyclekeeper.sync.coordinator")

ADVISORY_LOCAL_ONLY = "Local mode only: configure Supabase to sync your data across devices"
ADVISORY_OFFLINE = "Offline: the change is saved on this device and will be sent once you are back online"
ADVISORY_REMOTE_ERROR = "Could not reach the remote store ({error}); the change is saved on this device"
ADVISORY_LOAD_FALLBACK = "Connection error: showing the data saved on this device"
ADVISORY_CACHE_ERROR = "Could not save on this device: {error}"


@dataclass
class SyncReport:
    """Outcome of a ``push_pending()`` run.

    Attributes:
        pushed:  Pending items confirmed by the remote store.
        failed:  Pending items that are still pending.
        skipped: True when the remote store was not usable and nothing ran.
    """

    pushed: int = 0
    failed: int = 0
    skipped: bool = False


class SyncCoordinator:
    """Arbitrate between the remote store and the local cache.

    Usage::

        coordinator = SyncCoordinator(
            remote=SupabaseCycleStore.from_settings(),
            cache=LocalCache.from_settings(),
            monitor=ConnectivityMonitor.from_settings(),
        )
        records = await coordinator.load()
        record = await coordinator.create({"startDate": "2026-10-01", "endDate": "2026-10-05"})
        stats = coordinator.statistics()
    """

    def __init__(
        self,
        cache: LocalCache,
        monitor: ConnectivityMonitor,
        remote: SupabaseCycleStore | None = None,
        state: TrackerState | None = None,
        config: TrackerConfig | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            cache:   Local cache adapter.
            monitor: Connectivity and configuration monitor.
            remote:  Remote store adapter; None runs local-only.
            state:   Session state to own; a fresh empty one by default.
            config:  Tracker config; the global one by default.
        """
        self._cache = cache
        self._monitor = monitor
        self._remote = remote
        self.state = state if state is not None else TrackerState()
        self._config = config or get_tracker_config()

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, http_client: httpx.AsyncClient | None = None
    ) -> SyncCoordinator:
        """Wire adapters and monitor from settings.  The remote adapter is
        only built when Supabase is configured."""
        s = settings or get_settings()
        monitor = ConnectivityMonitor.from_settings(s)
        remote = (
            SupabaseCycleStore.from_settings(s, http_client=http_client)
            if monitor.remote_configured
            else None
        )
        return cls(cache=LocalCache.from_settings(s), monitor=monitor, remote=remote)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def monitor(self) -> ConnectivityMonitor:
        return self._monitor

    @property
    def config(self) -> TrackerConfig:
        return self._config

    @property
    def records(self) -> list[CycleRecord]:
        return list(self.state.records)

    @property
    def last_advisory(self) -> str | None:
        return self.state.last_advisory

    @property
    def remote_usable(self) -> bool:
        return self._remote is not None and self._monitor.remote_usable

    def statistics(self) -> CycleStatistics | None:
        return compute_statistics(self.state.records, self._config.irregularity)

    def trend(self) -> list[TrendPoint]:
        return trend_series(self.state.records)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def load(self) -> list[CycleRecord]:
        """Replace the collection from the remote store, or from the local cache.

        Falls back to the cache snapshot when the remote store is unusable or
        the fetch fails.  No snapshot at all yields an empty collection.
        """
        self.state.last_advisory = None
        if self.remote_usable:
            try:
                remote_records = await self._remote.fetch_all()
            except RemoteStoreError as exc:
                logger.warning("Remote load failed, using local cache: %s", exc)
                self.state.last_advisory = ADVISORY_LOAD_FALLBACK
            else:
                snapshot = await self._cache.load_snapshot() or []
                deletions = await self._cache.load_pending_deletions()
                self.state.records = _overlay_pending(remote_records, snapshot, deletions)
                self.state.pending_deletions = deletions
                await self._mirror()
                logger.info("Loaded %d cycles from Supabase", len(self.state.records))
                return self.records

        self.state.records = await self._cache.load_snapshot() or []
        self.state.pending_deletions = await self._cache.load_pending_deletions()
        logger.info("Loaded %d cycles from local cache", len(self.state.records))
        return self.records

    async def create(self, data: CycleInput | dict[str, Any]) -> CycleRecord:
        """Validate, write through if possible, insert, and mirror.

        Raises:
            ValidationError: Before any I/O, leaving the collection untouched.
        """
        payload = self._validated(data)
        self.state.last_advisory = None
        record = CycleRecord.from_input(self.state.next_local_id(), payload, pending_sync=True)

        if self.remote_usable:
            try:
                record = await self._remote.insert(record)
            except RemoteStoreError as exc:
                self._advise_remote_failure("create", exc)
        else:
            self._advise_remote_unusable()

        self.state.records.append(record)
        self._sort()
        await self._mirror()
        return record

    async def update(
        self, cycle_id: LocalId | RemoteId, data: CycleInput | dict[str, Any]
    ) -> CycleRecord:
        """Replace a record's fields, writing through for remote-origin records.

        Raises:
            ValidationError: Before any I/O.
            NotFoundError:   If ``cycle_id`` is not in the collection.
        """
        payload = self._validated(data)
        self._index_of(cycle_id)
        self.state.last_advisory = None
        replacement = CycleRecord.from_input(cycle_id, payload, pending_sync=True)

        if isinstance(cycle_id, RemoteId):
            if self.remote_usable:
                try:
                    replacement = await self._remote.update(cycle_id, replacement)
                except RemoteStoreError as exc:
                    self._advise_remote_failure("update", exc)
            else:
                self._advise_remote_unusable()
        # Local-origin records stay pending: there is nothing to update remotely yet.

        self.state.records[self._index_of(cycle_id)] = replacement
        self._sort()
        await self._mirror()
        return replacement

    async def delete(self, cycle_id: LocalId | RemoteId) -> None:
        """Remove a record, deleting it remotely first when possible."""
        self.state.last_advisory = None
        if isinstance(cycle_id, RemoteId):
            if self.remote_usable:
                try:
                    await self._remote.delete(cycle_id)
                except RemoteStoreError as exc:
                    self._advise_remote_failure("delete", exc)
                    self._queue_deletion(cycle_id)
            else:
                self._advise_remote_unusable()
                self._queue_deletion(cycle_id)

        before = len(self.state.records)
        self.state.records = [r for r in self.state.records if r.id != cycle_id]
        if len(self.state.records) == before:
            logger.debug("Delete of unknown cycle %s", cycle_id)
        await self._mirror()

    def export(self) -> bytes:
        """Serialize the collection verbatim as pretty-printed JSON."""
        return export_collection(self.state.records)

    def export_filename(self, today: date | None = None) -> str:
        return export_filename(today)

    async def push_pending(self) -> SyncReport:
        """Replay pending creates, updates and deletions against the remote store.

        Only runs when explicitly called and the remote store is usable.
        Items that fail again stay pending.
        """
        if not self.remote_usable:
            logger.info("Push skipped: remote store not usable")
            return SyncReport(skipped=True)

        self.state.last_advisory = None
        report = SyncReport()
        for record in [r for r in self.state.records if r.pending_sync]:
            try:
                if isinstance(record.id, LocalId):
                    synced = await self._remote.insert(record)
                else:
                    synced = await self._remote.update(record.id, record)
            except RemoteStoreError as exc:
                logger.warning("Push of cycle %s failed: %s", record.id, exc)
                report.failed += 1
                continue
            self.state.records[self._index_of(record.id)] = synced
            report.pushed += 1

        remaining: list[RemoteId] = []
        for remote_id in self.state.pending_deletions:
            try:
                await self._remote.delete(remote_id)
            except RemoteStoreError as exc:
                logger.warning("Pending deletion of %s failed: %s", remote_id, exc)
                remaining.append(remote_id)
                report.failed += 1
                continue
            report.pushed += 1
        self.state.pending_deletions = remaining

        self._sort()
        await self._mirror()
        logger.info("Push finished: %d pushed, %d still pending", report.pushed, report.failed)
        return report

    def reset(self) -> None:
        """Drop all in-memory state.  The local cache is left as it is."""
        self.state.reset()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _validated(self, data: CycleInput | dict[str, Any]) -> CycleInput:
        payload = CycleInput.from_data(data)
        vocabulary = self._config.symptoms
        payload.validate_for_write(vocabulary.during, vocabulary.before)
        return payload

    def _index_of(self, cycle_id: LocalId | RemoteId) -> int:
        for index, record in enumerate(self.state.records):
            if record.id == cycle_id:
                return index
        raise NotFoundError(f"Cycle {cycle_id} not found")

    def _sort(self) -> None:
        # list.sort is stable: equal start dates keep their insertion order
        self.state.records.sort(key=lambda r: r.start_date)

    def _queue_deletion(self, remote_id: RemoteId) -> None:
        if remote_id not in self.state.pending_deletions:
            self.state.pending_deletions.append(remote_id)

    async def _mirror(self) -> None:
        try:
            await self._cache.save_snapshot(self.state.records)
            await self._cache.save_pending_deletions(self.state.pending_deletions)
        except OSError as exc:
            logger.error("Local cache write failed: %s", exc)
            self.state.last_advisory = ADVISORY_CACHE_ERROR.format(error=exc)

    def _advise_remote_failure(self, operation: str, exc: RemoteStoreError) -> None:
        logger.warning("Remote %s failed, keeping change locally: %s", operation, exc)
        self.state.last_advisory = ADVISORY_REMOTE_ERROR.format(error=exc)

    def _advise_remote_unusable(self) -> None:
        if self._remote is None or not self._monitor.remote_configured:
            self.state.last_advisory = ADVISORY_LOCAL_ONLY
        else:
            self.state.last_advisory = ADVISORY_OFFLINE


def _overlay_pending(
    remote_records: list[CycleRecord],
    snapshot: list[CycleRecord],
    pending_deletions: list[RemoteId],
) -> list[CycleRecord]:
    """Merge fresh remote records with local work that has not been pushed yet.

    Pending updates replace their remote counterpart, pending local-origin
    records are kept, and rows awaiting remote deletion are dropped.
    """
    pending = {r.id: r for r in snapshot if r.pending_sync}
    merged = [
        pending.pop(r.id, r) for r in remote_records if r.id not in pending_deletions
    ]
    merged.extend(r for r in snapshot if r.pending_sync and isinstance(r.id, LocalId))
    merged.sort(key=lambda r: r.start_date)
    return merged
