"""
Clipping Intelligence Module

Concurrent aggregation of legal/regulatory sources into one daily report.

This module provides:
- A shared TTL cache and a backoff retry executor
- Feed, scraping and search source adapters
- Boolean relevance rules over the merged report
- Fan-out/fan-in aggregation and email delivery with file fallback
"""

from .aggregator import (
    ERROR_PLACEHOLDER,
    Aggregator,
    extract_content,
)
from .backoff import (
    BackoffExecutor,
    is_rate_limited,
)
from .cache import (
    CacheEntry,
    TTLCache,
)
from .dispatcher import (
    DeliveryError,
    Dispatcher,
    SendGridTransport,
    SMTPTransport,
    save_to_file,
)
from .fetcher import (
    DATE_UNAVAILABLE,
    PageFetcher,
    SearchResult,
    SourceItem,
    resolve_link,
)
from .filter import (
    FilterResult,
    FilterRule,
    RuleFilter,
)
from .report import (
    Report,
    ReportSection,
)

__all__ = [
    # Aggregator
    "Aggregator",
    "ERROR_PLACEHOLDER",
    "extract_content",
    # Backoff
    "BackoffExecutor",
    "is_rate_limited",
    # Cache
    "CacheEntry",
    "TTLCache",
    # Dispatcher
    "DeliveryError",
    "Dispatcher",
    "SendGridTransport",
    "SMTPTransport",
    "save_to_file",
    # Fetcher
    "DATE_UNAVAILABLE",
    "PageFetcher",
    "SearchResult",
    "SourceItem",
    "resolve_link",
    # Filter
    "FilterResult",
    "FilterRule",
    "RuleFilter",
    # Report
    "Report",
    "ReportSection",
]
