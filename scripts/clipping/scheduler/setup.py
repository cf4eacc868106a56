"""
APScheduler factory: creates and configures the scheduler with the clipping job.
"""

import logging
from datetime import datetime, timedelta

from apscheduler.events import EVENT_JOB_ERROR
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

from clipping.config import config

logger = logging.getLogger(__name__)


def create_scheduler() -> AsyncIOScheduler:
    """Create an AsyncIOScheduler with the daily clipping job configured.

    Reads schedule config from config.yaml under ``scheduler``.

    Returns:
        Configured AsyncIOScheduler (not yet started).
    """
    timezone = config.get("scheduler.timezone", "America/Sao_Paulo")
    scheduler = AsyncIOScheduler(timezone=timezone)

    _add_daily_clipping_job(scheduler, timezone)
    _add_startup_run(scheduler)

    from clipping.scheduler.error_handler import job_error_listener

    scheduler.add_listener(job_error_listener, mask=EVENT_JOB_ERROR)

    logger.info(
        "Scheduler configured with %d jobs (timezone=%s)", len(scheduler.get_jobs()), timezone
    )
    return scheduler


def _add_daily_clipping_job(scheduler: AsyncIOScheduler, timezone: str) -> None:
    """Add the cron-driven clipping job."""
    from clipping.scheduler.jobs import clipping_job

    cron = config.get("scheduler.cron", "0 7 * * *")
    scheduler.add_job(
        clipping_job,
        CronTrigger.from_crontab(cron, timezone=timezone),
        id="daily_clipping",
        name="Daily Clipping Report",
        misfire_grace_time=config.get("scheduler.misfire_grace_time", 3600),
        max_instances=1,
        replace_existing=True,
    )
    logger.info("Daily clipping scheduled: '%s' (%s)", cron, timezone)


def _add_startup_run(scheduler: AsyncIOScheduler) -> None:
    """Add a one-off run shortly after startup, if configured."""
    delay = config.get("scheduler.startup_run_delay")
    if delay is None:
        return

    from clipping.scheduler.jobs import clipping_job

    run_at = datetime.now(scheduler.timezone) + timedelta(seconds=float(delay))
    scheduler.add_job(
        clipping_job,
        DateTrigger(run_date=run_at),
        id="startup_clipping",
        name="Startup Clipping Run",
        replace_existing=True,
    )
    logger.info("Startup clipping run in %ss", delay)
