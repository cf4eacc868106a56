"""Shared service accessors for the clipping pipeline.

One cache, filter, dispatcher and aggregator per process. The cache is
created once here and injected into every adapter that uses it.
"""

from functools import lru_cache

from .config import config


def get_config():
    """Return application configuration instance."""
    return config


@lru_cache
def get_cache():
    """Return the process-wide response cache."""
    from .intelligence.cache import TTLCache

    return TTLCache(ttl=config.get("cache.ttl", 3600), max_size=config.get("cache.max_size", 50))


@lru_cache
def get_filter():
    """Return the relevance rule filter."""
    from .intelligence.filter import RuleFilter

    return RuleFilter.from_config(config.get("filter.rules", {}))


@lru_cache
def get_dispatcher():
    """Return the report dispatcher."""
    from .intelligence.dispatcher import Dispatcher, build_transport

    return Dispatcher(
        transport=build_transport(config),
        recipients=config.recipients,
        fallback_dir=config.reports_dir,
        subject_template=config.get("delivery.subject"),
        max_attempts=config.get("delivery.max_attempts", 3),
        retry_delay=config.get("delivery.retry_delay", 2.0),
    )


@lru_cache
def get_aggregator():
    """Return the aggregator wired to every configured section."""
    from .intelligence.aggregator import Aggregator
    from .intelligence.sources.registry import get_all_adapters

    return Aggregator(
        adapters=get_all_adapters(config, cache=get_cache()),
        content_filter=get_filter(),
        dispatcher=get_dispatcher(),
        filter_sections=config.get("filter.sections", []),
    )


def reset_services() -> None:
    """Drop cached service instances (after a config reload, and in tests)."""
    for accessor in (get_cache, get_filter, get_dispatcher, get_aggregator):
        accessor.cache_clear()
