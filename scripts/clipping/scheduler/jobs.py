"""
Scheduled job definitions for the clipping pipeline.
"""

import logging

logger = logging.getLogger(__name__)


async def clipping_job():
    """Build and deliver the daily clipping report.

    The aggregator never raises, so a failing source or delivery cannot
    take down the scheduler.
    """
    logger.info("⏰ Running scheduled clipping...")

    from clipping.services import get_aggregator

    report = await get_aggregator().run()

    if report is None:
        logger.warning("Scheduled clipping produced no report")
    else:
        logger.info(
            "Scheduled clipping complete: %d sections, %d failed, filters=%s",
            len(report.sections),
            len(report.failed_sections),
            ", ".join(report.matched_rules) or "none",
        )
