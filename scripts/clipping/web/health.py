"""
Health and status endpoints for monitoring the service.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Request

from clipping import __version__
from clipping.intelligence.cache import TTLCache
from clipping.web.dependencies import get_cache

router = APIRouter(tags=["health"])


def _uptime(request: Request):
    started_at = getattr(request.app.state, "started_at", None)
    if not started_at:
        return None
    return (datetime.now() - started_at).total_seconds()


@router.get("/")
async def status(request: Request, cache: TTLCache = Depends(get_cache)):
    """Short service status."""
    uptime = _uptime(request)
    return {
        "status": "online",
        "version": __version__,
        "uptime": int(uptime) if uptime is not None else None,
        "cache": cache.size,
    }


@router.get("/health")
async def health_check(request: Request, cache: TTLCache = Depends(get_cache)):
    """Return service health status as JSON."""
    started_at = getattr(request.app.state, "started_at", None)
    scheduler = getattr(request.app.state, "scheduler", None)

    scheduler_jobs = []
    if scheduler:
        for job in scheduler.get_jobs():
            scheduler_jobs.append(
                {
                    "id": job.id,
                    "name": job.name,
                    "next_run": str(job.next_run_time) if job.next_run_time else None,
                }
            )

    return {
        "status": "ok",
        "version": __version__,
        "started_at": str(started_at) if started_at else None,
        "uptime_seconds": _uptime(request),
        "cache": cache.stats(),
        "scheduler": {
            "running": scheduler is not None and scheduler.running,
            "jobs": scheduler_jobs,
        },
    }
