"""
Operational routes: manual trigger and cache control.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends

from clipping.intelligence.aggregator import Aggregator
from clipping.intelligence.cache import TTLCache
from clipping.web.dependencies import get_aggregator, get_cache

logger = logging.getLogger(__name__)

router = APIRouter(tags=["clipping"])


@router.api_route("/run", methods=["GET", "POST"])
async def trigger_run(
    background_tasks: BackgroundTasks,
    aggregator: Aggregator = Depends(get_aggregator),
):
    """Start a report run in the background and acknowledge immediately."""
    logger.info("Manual clipping run requested")
    background_tasks.add_task(aggregator.run)
    return {"message": "Gerando relatório em background"}


@router.post("/cache/clear")
async def clear_cache(cache: TTLCache = Depends(get_cache)):
    """Empty the response cache."""
    return {"cleared": cache.clear()}
