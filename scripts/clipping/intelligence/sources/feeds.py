"""
RSS/Atom feed adapter: tribunal bulletins and jurisprudence feeds.

A logical source lists several candidate feed URLs; the first one that
yields usable items wins.
"""

import io
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

import feedparser

from clipping.intelligence.cache import TTLCache
from clipping.intelligence.fetcher import (
    DATE_UNAVAILABLE,
    FEED_ACCEPT,
    PageFetcher,
    SourceItem,
    resolve_link,
)
from clipping.intelligence.selection import html_to_text
from clipping.intelligence.sources.base import SourceAdapter

logger = logging.getLogger(__name__)

MAX_ITEMS = 5
SUMMARY_CHARS = 200
DATE_FORMAT = "%d/%m/%Y"

# feedparser normalizes pubDate, dc:date, etc. onto these keys
DATE_FIELDS = ("published", "updated", "created")

UNAVAILABLE = "Feed {name} indisponível."


@dataclass
class FeedResult:
    """Items read for one logical feed source."""

    source: str
    items: List[SourceItem] = field(default_factory=list)
    url: Optional[str] = None

    @property
    def available(self) -> bool:
        return bool(self.items)


def format_date(entry) -> str:
    """Render an entry's publication date, or the unavailable sentinel."""
    for name in DATE_FIELDS:
        parsed = entry.get(f"{name}_parsed")
        if parsed:
            try:
                return datetime.fromtimestamp(time.mktime(parsed)).strftime(DATE_FORMAT)
            except (TypeError, ValueError, OverflowError):
                continue
    return DATE_UNAVAILABLE


class FeedParser:
    """Fetches candidate feed URLs and normalizes their entries."""

    def __init__(self, fetcher: PageFetcher, max_items: int = MAX_ITEMS) -> None:
        self.fetcher = fetcher
        self.max_items = max_items

    def parse(self, content: bytes, url: str) -> List[SourceItem]:
        """
        Parse feed XML into at most ``max_items`` valid items.

        Malformed documents never raise; they produce an empty list.
        """
        try:
            feed = feedparser.parse(io.BytesIO(content))
        except Exception as e:
            logger.warning("Feed parse failed for %s: %s", url, e)
            return []

        if feed.bozo and not feed.entries:
            logger.warning("Malformed feed at %s: %s", url, feed.get("bozo_exception"))
            return []

        items = []
        for entry in feed.entries[: self.max_items]:
            item = SourceItem(
                title=(entry.get("title") or "").strip(),
                link=resolve_link(entry.get("link") or entry.get("id"), url),
                summary=html_to_text(entry.get("summary") or "")[:SUMMARY_CHARS],
                published=format_date(entry),
            )
            if item.is_valid:
                items.append(item)
        return items

    def parse_url(self, url: str) -> List[SourceItem]:
        """Fetch and parse a single feed URL; network errors yield no items."""
        try:
            response = self.fetcher.get(url, accept=FEED_ACCEPT)
        except Exception as e:
            logger.error("RSS %s failed: %s", url, e)
            return []
        return self.parse(response.content, url)

    def fetch_source(self, source: str, urls: Sequence[str]) -> FeedResult:
        """
        Try each candidate URL in order until one yields items.

        Args:
            source: Logical source name, e.g. "TCU Informativo".
            urls: Candidate feed URLs in preference order.

        Returns:
            FeedResult; ``available`` is False when every candidate failed.
        """
        for url in urls:
            items = self.parse_url(url)
            if items:
                logger.info("%s: %d items via RSS (%s)", source, len(items), url)
                return FeedResult(source=source, items=items, url=url)
            logger.info("%s: no items from %s", source, url)

        logger.warning("%s: all %d feed URLs unavailable", source, len(urls))
        return FeedResult(source=source)


def format_items(items: Sequence[SourceItem], show_summary: bool = False) -> str:
    """Render feed items as a human-readable block."""
    blocks = []
    for item in items:
        lines = [f"• {item.title} ({item.published})"]
        if show_summary and item.summary:
            lines.append(f"  {item.summary}")
        lines.append(f"  {item.link}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


class FeedSourceAdapter(SourceAdapter):
    """Report section backed by one logical feed source."""

    def __init__(
        self,
        section_id: str,
        label: str,
        source_name: str,
        urls: Sequence[str],
        parser: FeedParser,
        cache: Optional[TTLCache] = None,
        cache_key: Optional[str] = None,
        show_summary: bool = False,
    ) -> None:
        super().__init__(section_id, label)
        self._source_name = source_name
        self.urls = list(urls)
        self.parser = parser
        self.cache = cache
        self.cache_key = cache_key or f"feed:{section_id}"
        self.show_summary = show_summary

    @property
    def name(self) -> str:
        return self._source_name

    def fetch(self) -> str:
        if self.cache is not None:
            hit = self.cache.get(self.cache_key)
            if hit is not None:
                logger.debug("%s served from cache", self.name)
                return hit

        result = self.parser.fetch_source(self.name, self.urls)
        if not result.available:
            return UNAVAILABLE.format(name=self.name)

        text = format_items(result.items, show_summary=self.show_summary)
        if self.cache is not None:
            self.cache.set(self.cache_key, text)
        return text
