"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from cyclekeeper.config import Settings, get_settings
from cyclekeeper.sync.coordinator import SyncCoordinator


async def get_coordinator(request: Request) -> SyncCoordinator:
    """Return the session coordinator built by the app lifespan hook."""
    coordinator: SyncCoordinator | None = getattr(request.app.state, "coordinator", None)
    if coordinator is None:
        raise HTTPException(status_code=503, detail="Tracker not initialized")
    return coordinator


# Annotated shortcuts for route signatures
Coordinator = Annotated[SyncCoordinator, Depends(get_coordinator)]
AppSettings = Annotated[Settings, Depends(get_settings)]
