"""FastAPI application setup for the windrelay service."""

import asyncio
import contextlib
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI

from . import api
from .config import settings
from .scheduler import start_scheduler
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="main")

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Run the periodic collector for the lifetime of the app."""
    task = None
    if settings.scheduler_enabled:
        task = start_scheduler(api.COLLECTOR, settings.collect_interval_seconds)
    try:
        yield
    finally:
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            logger.info("Scheduler stopped")


app = FastAPI(title="Windrelay Weather API", version=VERSION, lifespan=lifespan)


@app.get("/health")
def health():
    """Liveness probe."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": VERSION,
    }


# API routes
app.include_router(api.router, prefix="/api/v1")
