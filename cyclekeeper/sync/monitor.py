"""Connectivity and configuration monitor.

Tracks two independent signals:

    remote_configured — fixed for the process lifetime (Supabase URL + key present)
    online            — driven by the host environment's connectivity signal

The monitor only reports.  It never starts a sync; the coordinator re-checks
``remote_usable`` lazily at the start of each operation, so coming back online
does not by itself push anything.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from cyclekeeper.config import Settings, get_settings

logger = logging.getLogger("cyclekeeper.sync.monitor")

Listener = Callable[["ConnectivityMonitor"], None]


class SyncMode(str, Enum):
    """Status shown to the user next to the collection."""

    synced = "synced"    # remote configured and online
    offline = "offline"  # remote configured, device offline
    local = "local"      # no remote configured


class ConnectivityMonitor:
    """Report whether the remote store can be used right now.

    Usage::

        monitor = ConnectivityMonitor.from_settings()
        unsubscribe = monitor.subscribe(lambda m: print(m.mode))
        monitor.set_online(False)   # listener fires with mode == "offline"
    """

    def __init__(self, remote_configured: bool, online: bool = True) -> None:
        self._remote_configured = remote_configured
        self._online = online
        self._listeners: list[Listener] = []

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> ConnectivityMonitor:
        s = settings or get_settings()
        monitor = cls(remote_configured=s.remote_configured, online=s.start_online)
        logger.info(
            "Supabase configuration: %s", "OK" if monitor.remote_configured else "missing"
        )
        return monitor

    @property
    def remote_configured(self) -> bool:
        return self._remote_configured

    @property
    def online(self) -> bool:
        return self._online

    @property
    def remote_usable(self) -> bool:
        return self._remote_configured and self._online

    @property
    def mode(self) -> SyncMode:
        if not self._remote_configured:
            return SyncMode.local
        return SyncMode.synced if self._online else SyncMode.offline

    def set_online(self, online: bool) -> None:
        """Feed the host connectivity signal.  Listeners fire only on change."""
        if online == self._online:
            return
        self._online = online
        logger.info("Connectivity changed: %s", "online" if online else "offline")
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Connectivity listener %r failed", listener)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state-change listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
