"""
FastAPI lifespan context manager.

Starts/stops APScheduler alongside the web server and clears the cache on
shutdown. The scheduler is optional: when disabled in config it is skipped.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI

from clipping.services import get_cache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup/shutdown of the scheduler."""
    app.state.started_at = datetime.now()
    app.state.scheduler = None

    scheduler = _start_scheduler()
    if scheduler:
        app.state.scheduler = scheduler

    logger.info("Clipping service started: scheduler=%s", scheduler is not None)

    yield

    # Shutdown
    if app.state.scheduler:
        try:
            app.state.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
        except Exception:
            logger.exception("Error stopping scheduler")

    get_cache().clear()
    logger.info("Clipping service shutdown complete")


def _start_scheduler():
    """Start APScheduler if it is enabled in config."""
    try:
        from clipping.config import config

        if not config.get("scheduler.enabled", False):
            logger.info("Scheduler disabled in config")
            return None

        from clipping.scheduler.setup import create_scheduler

        scheduler = create_scheduler()
        scheduler.start()
        logger.info("APScheduler started with %d jobs", len(scheduler.get_jobs()))
        return scheduler
    except Exception:
        logger.exception("Failed to start scheduler")
        return None
