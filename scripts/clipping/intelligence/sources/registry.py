"""
Source registry: builds one adapter per configured report section.
"""

import logging
from typing import Any, Dict, List, Optional

from clipping.intelligence.backoff import BackoffExecutor
from clipping.intelligence.cache import TTLCache
from clipping.intelligence.fetcher import PageFetcher
from clipping.intelligence.sources.base import SourceAdapter
from clipping.intelligence.sources.feeds import FeedParser, FeedSourceAdapter
from clipping.intelligence.sources.scraper import PageScraper, ScrapeSourceAdapter, Selectors
from clipping.intelligence.sources.search import SearchClient, SearchSourceAdapter, merge_domains

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when a section declaration is invalid."""


def build_search_client(cfg, backoff: Optional[BackoffExecutor] = None) -> SearchClient:
    """Create the search client from the ``search`` config block."""
    return SearchClient(
        endpoint=cfg.get("search.endpoint"),
        model=cfg.get("search.model"),
        system_prompt=cfg.get("search.system_prompt"),
        max_tokens=cfg.get("search.max_tokens"),
        max_prompt_chars=cfg.get("search.max_prompt_chars"),
        max_domains=cfg.get("search.max_domains"),
        timeout=cfg.get("search.timeout"),
        backoff=backoff or BackoffExecutor.from_config(cfg),
    )


def build_fetcher(cfg) -> PageFetcher:
    return PageFetcher(
        timeout=cfg.get("http.timeout", 15),
        user_agent=cfg.get("http.user_agent"),
        backoff=BackoffExecutor.from_config(cfg),
    )


def build_adapter(
    section: Dict[str, Any],
    cfg,
    cache: Optional[TTLCache],
    search_client: SearchClient,
) -> SourceAdapter:
    """
    Build the adapter for a single section declaration.

    Raises:
        ConfigError: If the section type is unknown or a field is missing.
    """
    try:
        section_id = section["id"]
        label = section.get("label", section_id)
        kind = section["type"]

        if kind == "search":
            prompt = section["prompt"].format(authors=", ".join(cfg.get("search.authors", [])))
            domains = merge_domains(
                cfg.get("search.domain_groups", {}),
                section.get("domain_groups", []),
                section.get("domains", []),
            )
            return SearchSourceAdapter(section_id, label, prompt, search_client, domains)

        max_items = cfg.get("http.max_items", 5)
        if kind == "feed":
            parser = FeedParser(build_fetcher(cfg), max_items=max_items)
            return FeedSourceAdapter(
                section_id,
                label,
                source_name=section.get("name", label),
                urls=section["urls"],
                parser=parser,
                cache=cache,
                cache_key=section.get("cache_key"),
                show_summary=section.get("show_summary", False),
            )

        if kind == "scrape":
            scraper = PageScraper(build_fetcher(cfg), cache=cache)
            return ScrapeSourceAdapter(
                section_id,
                label,
                source_name=section.get("name", label),
                url=section["url"],
                selectors=Selectors.from_dict(section["selectors"]),
                scraper=scraper,
            )
    except KeyError as e:
        raise ConfigError(f"Section {section.get('id', '?')!r} is missing field {e}") from e

    raise ConfigError(f"Section {section_id!r} has unknown type {kind!r}")


def get_all_adapters(cfg, cache: Optional[TTLCache] = None) -> List[SourceAdapter]:
    """Build adapters for every configured section, in report order."""
    search_client = build_search_client(cfg)
    adapters = []
    seen = set()
    for section in cfg.get("sections", []):
        adapter = build_adapter(section, cfg, cache, search_client)
        if adapter.section_id in seen:
            raise ConfigError(f"Duplicate section id {adapter.section_id!r}")
        seen.add(adapter.section_id)
        adapters.append(adapter)

    logger.info("Configured %d report sections", len(adapters))
    return adapters
