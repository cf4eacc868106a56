"""
Concurrent aggregation of every report section.

All adapters run at once, each on its own worker thread, and the
run waits for every one of them; a failing adapter only turns its own
section into a placeholder. The report keeps the declared section order no
matter which adapter finishes first.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, List, Optional, Sequence

from .dispatcher import Dispatcher
from .fetcher import SearchResult
from .filter import RuleFilter
from .report import Report, ReportSection
from .sources.base import SourceAdapter

logger = logging.getLogger(__name__)

ERROR_PLACEHOLDER = "Erro ao carregar"


def extract_content(outcome: Any) -> str:
    """Displayable text for one task outcome (value or exception)."""
    if isinstance(outcome, BaseException):
        return ERROR_PLACEHOLDER
    if isinstance(outcome, SearchResult):
        return outcome.content or ERROR_PLACEHOLDER
    if outcome is None:
        return ERROR_PLACEHOLDER
    return str(outcome)


class Aggregator:
    """Fans out to all adapters, fans in, filters and hands off the report."""

    def __init__(
        self,
        adapters: Sequence[SourceAdapter],
        content_filter: RuleFilter,
        dispatcher: Optional[Dispatcher] = None,
        filter_sections: Optional[List[str]] = None,
    ) -> None:
        """
        Initialize the aggregator.

        Args:
            adapters: One adapter per section, in report order.
            content_filter: Rules applied to the merged text.
            dispatcher: Delivery target; the report is only built if None.
            filter_sections: Section ids the filter scans; all if empty.
        """
        self.adapters = list(adapters)
        self.content_filter = content_filter
        self.dispatcher = dispatcher
        self.filter_sections = list(filter_sections or [])

    async def _gather(self) -> List[Any]:
        if not self.adapters:
            return []
        loop = asyncio.get_running_loop()
        # One worker per adapter: no source waits for a free thread
        with ThreadPoolExecutor(max_workers=len(self.adapters), thread_name_prefix="clipping") as pool:
            tasks = [loop.run_in_executor(pool, adapter.fetch) for adapter in self.adapters]
            return await asyncio.gather(*tasks, return_exceptions=True)

    async def collect(self) -> Report:
        """Run every adapter and build the report."""
        logger.info("Generating report from %d sections...", len(self.adapters))
        started = datetime.now()
        outcomes = await self._gather()

        sections = []
        for adapter, outcome in zip(self.adapters, outcomes):
            failed = isinstance(outcome, BaseException)
            if failed:
                logger.error("Section %s failed: %s", adapter.section_id, outcome)
            elif isinstance(outcome, SearchResult) and not outcome.success:
                logger.warning("Section %s degraded: %s", adapter.section_id, outcome.error_message)
            sections.append(
                ReportSection(
                    section_id=adapter.section_id,
                    label=adapter.label,
                    content=extract_content(outcome),
                    failed=failed,
                )
            )

        report = Report(sections=sections, generated_at=started)
        result = self.content_filter.evaluate(report.text_for(self.filter_sections))
        report.matched_rules = result.matched
        if result.any_matched:
            logger.info("Filters matched: %s", result)

        logger.info(
            "Report ready in %.1fs (%d failed sections)",
            (datetime.now() - started).total_seconds(),
            len(report.failed_sections),
        )
        return report

    async def run(self, deliver: bool = True) -> Optional[Report]:
        """
        Build the report and hand it to the dispatcher.

        Never raises: failures are logged so a scheduled run cannot bring
        down the host process.

        Returns:
            The report, or None if the run itself failed.
        """
        try:
            report = await self.collect()
            if deliver and self.dispatcher is not None:
                sent = await asyncio.to_thread(self.dispatcher.deliver, report)
                logger.info("Report %s", "delivered" if sent else "saved locally")
            return report
        except Exception:
            logger.exception("Report generation failed")
            return None
