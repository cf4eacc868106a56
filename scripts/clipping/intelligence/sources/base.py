"""
Base class for clipping source adapters.
"""

from abc import ABC, abstractmethod
from typing import Union

from clipping.intelligence.fetcher import SearchResult


class SourceAdapter(ABC):
    """Abstract base class for report section sources.

    Each adapter produces the content of exactly one report section.
    Adapters are synchronous and run on worker threads during aggregation.
    """

    def __init__(self, section_id: str, label: str) -> None:
        self._section_id = section_id
        self._label = label

    @property
    def section_id(self) -> str:
        """Unique identifier for the section (used in filter config)."""
        return self._section_id

    @property
    def label(self) -> str:
        """Section heading shown in the report."""
        return self._label

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable source name used in logs and placeholders."""
        ...

    @abstractmethod
    def fetch(self) -> Union[str, SearchResult]:
        """Fetch this section's content.

        Returns:
            Displayable text, or a SearchResult for search-backed sections.
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.section_id!r})"
