"""
Dependency injection for web routes.
"""

from clipping.services import get_aggregator as service_get_aggregator
from clipping.services import get_cache as service_get_cache


def get_cache():
    """Get the process-wide cache."""
    return service_get_cache()


def get_aggregator():
    """Get the configured aggregator."""
    return service_get_aggregator()
