"""Health check endpoint."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from cyclekeeper.dependencies import AppSettings, Coordinator

router = APIRouter(tags=["system"])


@router.get("/health")
async def health_check(settings: AppSettings, coordinator: Coordinator) -> dict:
    """Liveness probe.  Also reports where writes currently go."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "syncMode": coordinator.monitor.mode.value,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
