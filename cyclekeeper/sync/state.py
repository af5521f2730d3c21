"""Owned, injectable session state for the sync coordinator."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from cyclekeeper.models.cycles import CycleRecord, LocalId, RemoteId


@dataclass
class TrackerState:
    """Everything the coordinator mutates during a session.

    Attributes:
        records:           Canonical collection, sorted by start date.
        pending_deletions: Remote identifiers whose deletion has not reached
                           the remote store yet.
        last_advisory:     Human-readable notice from the latest operation,
                           or None when it completed without degradation.
    """

    records: list[CycleRecord] = field(default_factory=list)
    pending_deletions: list[RemoteId] = field(default_factory=list)
    last_advisory: str | None = None
    _last_local_ms: int = field(default=0, repr=False)

    @property
    def pending_count(self) -> int:
        return sum(1 for r in self.records if r.pending_sync) + len(self.pending_deletions)

    def next_local_id(self, now_ms: int | None = None) -> LocalId:
        """Return a fresh timestamp identifier, strictly increasing within the session."""
        now = now_ms if now_ms is not None else int(time.time() * 1000)
        self._last_local_ms = max(now, self._last_local_ms + 1)
        return LocalId(timestamp=self._last_local_ms)

    def reset(self) -> None:
        self.records = []
        self.pending_deletions = []
        self.last_advisory = None
