from __future__ import annotations

import asyncio
import contextlib
import logging
import time

from fastapi import FastAPI, Request

from balloonwatch.api import api_router
from balloonwatch.config import settings
from balloonwatch.services import DashboardService

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("balloonwatch")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown lifecycle."""

    if getattr(app.state, "dashboard", None) is None:
        app.state.dashboard = DashboardService()

    if settings.auto_refresh:
        app.state.refresh_task = asyncio.create_task(app.state.dashboard.run())
        logger.info(
            "Dashboard refresh loop started (every %ss)",
            settings.refresh_interval_seconds,
        )

    try:
        yield
    finally:
        task = getattr(app.state, "refresh_task", None)
        if task:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            app.state.refresh_task = None


app = FastAPI(title="BalloonWatch", lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log basic request information for observability."""

    start_time = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "HTTP %s %s -> %s (%.2f ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


app.include_router(api_router)


@app.get("/", summary="Root")
def read_root() -> dict[str, str]:
    """Basic root endpoint for quick verification."""

    return {"message": "BalloonWatch backend is running"}
