"""
HTML page adapter: news listings scraped with a selector set.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from clipping.intelligence.cache import TTLCache
from clipping.intelligence.fetcher import PageFetcher, SourceItem, resolve_link
from clipping.intelligence.selection import Document
from clipping.intelligence.sources.base import SourceAdapter

logger = logging.getLogger(__name__)

MAX_ITEMS = 5
DEFAULT_DATE_SELECTOR = ".data"

NO_ITEMS = "Nenhum item em {source}."
ACCESS_ERROR = "Erro ao acessar {source}."


@dataclass
class Selectors:
    """Where to find items on a page."""

    container: str
    title: str
    date: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Selectors":
        return cls(container=data["container"], title=data["title"], date=data.get("date"))


def extract_items(html: str, page_url: str, selectors: Selectors, limit: int = MAX_ITEMS) -> List[SourceItem]:
    """
    Pull items out of a page.

    Takes the first ``limit`` containers in document order; containers
    without a title or link are skipped.
    """
    doc = Document(html)
    items = []
    for node in doc.select(selectors.container, limit=limit):
        item = SourceItem(
            title=node.text_of(selectors.title),
            link=resolve_link(node.attr_of("a[href]", "href"), page_url),
            published=node.text_of(selectors.date or DEFAULT_DATE_SELECTOR),
        )
        if item.is_valid:
            items.append(item)
    return items


def format_items(items: List[SourceItem]) -> str:
    blocks = []
    for item in items:
        date = f" ({item.published})" if item.published else ""
        blocks.append(f"• {item.title}{date}\n  {item.link}")
    return "\n\n".join(blocks)


class PageScraper:
    """Fetches a page and renders its items, consulting the cache first."""

    def __init__(self, fetcher: PageFetcher, cache: Optional[TTLCache] = None) -> None:
        self.fetcher = fetcher
        self.cache = cache

    def scrape(self, url: str, selectors: Selectors, source: str) -> str:
        """
        Scrape a page into report text.

        Never raises: fetch failures become the access-error string.

        Args:
            url: Page to fetch.
            selectors: Container/title/date selectors.
            source: Source name; also keys the cache as ``scrape:<source>``.
        """
        key = f"scrape:{source}"
        if self.cache is not None:
            hit = self.cache.get(key)
            if hit is not None:
                logger.debug("Scrape %s served from cache", source)
                return hit

        try:
            response = self.fetcher.get(url)
        except Exception as e:
            logger.error("Scrape %s failed: %s", source, e)
            return ACCESS_ERROR.format(source=source)

        try:
            items = extract_items(response.text, url, selectors)
        except Exception as e:
            logger.warning("Could not parse %s page: %s", source, e)
            items = []
        logger.info("%s: %d items via scraping", source, len(items))
        text = format_items(items) if items else NO_ITEMS.format(source=source)

        if self.cache is not None:
            self.cache.set(key, text)
        return text


class ScrapeSourceAdapter(SourceAdapter):
    """Report section backed by a scraped page."""

    def __init__(
        self,
        section_id: str,
        label: str,
        source_name: str,
        url: str,
        selectors: Selectors,
        scraper: PageScraper,
    ) -> None:
        super().__init__(section_id, label)
        self._source_name = source_name
        self.url = url
        self.selectors = selectors
        self.scraper = scraper

    @property
    def name(self) -> str:
        return self._source_name

    def fetch(self) -> str:
        return self.scraper.scrape(self.url, self.selectors, self.name)
