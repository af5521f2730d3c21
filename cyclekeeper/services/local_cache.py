"""Durable key-value cache on the local device.

Each key is one JSON file under the cache directory.  The full cycle
collection lives under a single key as one snapshot, written atomically
(temp file + rename) so a crash never leaves a half-written snapshot.

Reads never fail: a missing, unreadable or corrupt entry reads as "no data".
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from cyclekeeper.config import Settings, get_settings
from cyclekeeper.models.cycles import (
    CycleRecord,
    RemoteId,
    dump_collection,
    parse_collection,
)

logger = logging.getLogger("cyclekeeper.local_cache")

_remote_ids = TypeAdapter(list[RemoteId])


class LocalCache:
    """File-backed snapshot store for the cycle collection.

    Usage::

        cache = LocalCache.from_settings()
        records = await cache.load_snapshot()   # None when nothing usable is stored
        await cache.save_snapshot(records)
    """

    def __init__(self, directory: Path, key: str = "menstrualCycles") -> None:
        self._directory = Path(directory)
        self._key = key

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> LocalCache:
        s = settings or get_settings()
        return cls(directory=s.cache_dir, key=s.cache_key)

    @property
    def snapshot_key(self) -> str:
        return self._key

    @property
    def pending_deletions_key(self) -> str:
        return f"{self._key}.pendingDeletions"

    def path_for(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    # ------------------------------------------------------------------
    # Raw key-value access
    # ------------------------------------------------------------------

    async def read_bytes(self, key: str) -> bytes | None:
        """Return the stored bytes for ``key``, or None when absent or unreadable."""
        path = self.path_for(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Local cache: cannot read %s: %s", path, exc)
            return None

    async def write_bytes(self, key: str, data: bytes) -> None:
        """Atomically replace the value stored under ``key``."""
        await asyncio.to_thread(self._write_atomic, self.path_for(key), data)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self.path_for(key).unlink, missing_ok=True)

    def _write_atomic(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_bytes(data)
        tmp.replace(path)

    # ------------------------------------------------------------------
    # Collection snapshot
    # ------------------------------------------------------------------

    async def load_snapshot(self) -> list[CycleRecord] | None:
        """Read the collection snapshot.

        Returns:
            The stored records, or None when there is no usable snapshot.
            Corrupt data is logged and treated exactly like absent data.
        """
        raw = await self.read_bytes(self._key)
        if raw is None:
            return None
        try:
            records = parse_collection(raw)
        except PydanticValidationError as exc:
            logger.warning(
                "Local cache: snapshot %s is corrupt, ignoring (%d errors)",
                self._key, exc.error_count(),
            )
            return None
        logger.debug("Local cache: loaded %d cycles", len(records))
        return records

    async def save_snapshot(self, records: list[CycleRecord]) -> None:
        await self.write_bytes(self._key, dump_collection(records))
        logger.debug("Local cache: saved %d cycles", len(records))

    # ------------------------------------------------------------------
    # Pending remote deletions
    # ------------------------------------------------------------------

    async def load_pending_deletions(self) -> list[RemoteId]:
        raw = await self.read_bytes(self.pending_deletions_key)
        if raw is None:
            return []
        try:
            return _remote_ids.validate_json(raw)
        except PydanticValidationError:
            logger.warning("Local cache: pending deletion list is corrupt, ignoring")
            return []

    async def save_pending_deletions(self, remote_ids: list[RemoteId]) -> None:
        if not remote_ids:
            await self.remove(self.pending_deletions_key)
            return
        await self.write_bytes(
            self.pending_deletions_key, _remote_ids.dump_json(remote_ids, by_alias=True)
        )
