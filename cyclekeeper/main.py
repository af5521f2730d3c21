"""CycleKeeper API — FastAPI application entry point.

Run locally:
    uvicorn cyclekeeper.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI

from cyclekeeper.config import get_settings
from cyclekeeper.routers import cycles, health
from cyclekeeper.sync.coordinator import SyncCoordinator

# ---------- Logging ----------

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("cyclekeeper")


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the session coordinator once, load the collection, close HTTP on exit."""
    settings = get_settings()
    logger.info(
        "Starting CycleKeeper API v%s [%s]", settings.app_version, settings.environment
    )
    async with httpx.AsyncClient(timeout=settings.remote_timeout_seconds) as client:
        coordinator = SyncCoordinator.from_settings(settings, http_client=client)
        await coordinator.load()
        app.state.coordinator = coordinator
        yield
    logger.info("CycleKeeper API shut down")


# ---------- App factory ----------

def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="CycleKeeper API",
        description="Offline-first cycle journal with Supabase sync and trend statistics.",
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.include_router(health.router)
    app.include_router(cycles.router, prefix="/api/v1")

    return app


app = create_app()
