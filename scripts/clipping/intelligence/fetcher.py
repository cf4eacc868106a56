"""
HTTP fetching and the normalized item shape shared by feed and page adapters.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import urljoin, urlparse

import requests

from .backoff import BackoffExecutor

logger = logging.getLogger(__name__)

# Request settings
REQUEST_TIMEOUT = 15
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
FEED_ACCEPT = "application/rss+xml, application/atom+xml, application/xml;q=0.9, */*;q=0.8"
HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

DATE_UNAVAILABLE = "Data indisponível"


@dataclass
class SourceItem:
    """A single normalized item from a feed or scraped page."""

    title: str
    link: str
    summary: str = ""
    published: str = DATE_UNAVAILABLE

    @property
    def is_valid(self) -> bool:
        """Items need both a title and an absolute link."""
        return bool(self.title and self.link and urlparse(self.link).scheme in ("http", "https"))


@dataclass
class SearchResult:
    """Outcome of one search/completion call.

    On failure ``content`` holds a fixed placeholder, never the raw error.
    """

    success: bool
    content: str
    citations: List[str] = field(default_factory=list)
    error_message: Optional[str] = None

    def __str__(self) -> str:
        return self.content


def origin_of(url: str) -> str:
    """Return scheme://host of a URL."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def resolve_link(link: Optional[str], page_url: str) -> str:
    """
    Make a link absolute against the origin of the page it came from.

    Args:
        link: Raw href or feed link, possibly relative.
        page_url: URL the link was found on.

    Returns:
        Absolute URL, or an empty string when there is no link.
    """
    link = (link or "").strip()
    if not link:
        return ""
    if link.startswith(("http://", "https://")):
        return link
    return urljoin(origin_of(page_url) + "/", link)


class PageFetcher:
    """GETs feeds and pages with a browser-like identity and a bounded timeout."""

    def __init__(
        self,
        timeout: float = REQUEST_TIMEOUT,
        user_agent: str = USER_AGENT,
        backoff: Optional[BackoffExecutor] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the fetcher.

        Args:
            timeout: Per-request timeout in seconds.
            user_agent: User-Agent header sent with every request.
            backoff: Retry policy for transient failures; one attempt if None.
            session: Optional pre-built session (tests inject a mock).
        """
        self.timeout = timeout
        self.backoff = backoff
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent,
            "Accept-Language": "pt-BR,pt;q=0.9,en;q=0.5",
        })

    def _get(self, url: str, headers: Dict[str, str]) -> requests.Response:
        response = self.session.get(url, timeout=self.timeout, headers=headers)
        response.raise_for_status()
        return response

    def get(self, url: str, accept: str = HTML_ACCEPT) -> requests.Response:
        """
        Fetch a URL, retrying transient failures through the backoff policy.

        Raises:
            requests.RequestException: When every attempt failed.
        """
        headers = {"Accept": accept}
        if self.backoff is None:
            return self._get(url, headers)
        return self.backoff.run(lambda: self._get(url, headers))
