import os

import uvicorn

from windrelay.config import settings
from utils.logging_utils import get_tagged_logger, mask_db_url, setup_logging

logger = get_tagged_logger(__name__, tag="server")


def log_startup() -> None:
    """Log the effective cache backend and schedule before serving."""
    backend = mask_db_url(settings.cache_redis_url) if settings.cache_redis_url else "in-memory"
    logger.info(
        "Starting windrelay",
        extra={"cache": backend, "scheduler": settings.scheduler_enabled,
               "interval": settings.collect_interval_seconds},
    )


if __name__ == "__main__":
    setup_logging(level=settings.log_level, job_name="windrelay")
    log_startup()

    uvicorn.run(
        "windrelay.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
