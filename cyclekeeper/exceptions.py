"""Exceptions raised by the cycle persistence and sync core.

None of these are fatal.  Validation and lookup errors reach the caller
untouched; remote store errors are caught by the coordinator and degrade to
local-only persistence.
"""

from __future__ import annotations


class CycleKeeperError(Exception):
    """Base exception for the cyclekeeper core."""


class ValidationError(CycleKeeperError):
    """Raised when a cycle input is rejected before any I/O.

    The message is meant to be shown to the user verbatim.
    """


class NotFoundError(CycleKeeperError):
    """Raised when an update targets a record that is not in the collection."""


class RemoteStoreError(CycleKeeperError):
    """Base class for failures reported by the remote store adapter."""


class TransportFailure(RemoteStoreError):
    """Network error, timeout or non-2xx response from the remote store.

    Attributes:
        status_code: HTTP status of the response, or None when no response
                     was received at all.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ShapeFailure(RemoteStoreError):
    """The remote store answered, but the payload could not be parsed into a record."""
