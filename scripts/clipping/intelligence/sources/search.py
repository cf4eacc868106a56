"""
Semantic search/completion adapter (Perplexity-compatible chat completions).

Each search section sends one prompt scoped to a list of domains and
returns the model's answer with its citations.
"""

import logging
import os
from typing import Iterable, List, Optional

import requests

from clipping.intelligence.backoff import BackoffExecutor
from clipping.intelligence.fetcher import SearchResult
from clipping.intelligence.sources.base import SourceAdapter

logger = logging.getLogger(__name__)

SEARCH_ENDPOINT = "https://api.perplexity.ai/chat/completions"
SEARCH_MODEL = "sonar"
SEARCH_TIMEOUT = 30
MAX_TOKENS = 2000
MAX_PROMPT_CHARS = 2000
MAX_DOMAINS = 20

SYSTEM_PROMPT = "Assistente especialista em licitações. Seja objetivo e direto."

PLACEHOLDER = "Informação temporariamente indisponível."


class SearchClient:
    """Wraps the completion endpoint with truncation, domain scoping and retries."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        endpoint: str = SEARCH_ENDPOINT,
        model: str = SEARCH_MODEL,
        system_prompt: str = SYSTEM_PROMPT,
        max_tokens: int = MAX_TOKENS,
        max_prompt_chars: int = MAX_PROMPT_CHARS,
        max_domains: int = MAX_DOMAINS,
        timeout: float = SEARCH_TIMEOUT,
        backoff: Optional[BackoffExecutor] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else os.environ.get("PERPLEXITY_API_KEY")
        self.endpoint = endpoint
        self.model = model
        self.system_prompt = system_prompt
        self.max_tokens = max_tokens
        self.max_prompt_chars = max_prompt_chars
        self.max_domains = max_domains
        self.timeout = timeout
        self.backoff = backoff or BackoffExecutor()
        self.session = session or requests.Session()

    def build_payload(self, prompt: str, domains: Optional[List[str]] = None) -> dict:
        """Request body for one search call."""
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": prompt[: self.max_prompt_chars]},
            ],
            "return_citations": True,
            "max_tokens": self.max_tokens,
        }
        if domains:
            payload["search_domain_filter"] = list(domains)[: self.max_domains]
        return payload

    def _post(self, payload: dict) -> SearchResult:
        response = self.session.post(
            self.endpoint,
            json=payload,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        data = response.json()
        return SearchResult(
            success=True,
            content=data["choices"][0]["message"]["content"],
            citations=list(data.get("citations") or []),
        )

    def query(self, prompt: str, domains: Optional[List[str]] = None) -> SearchResult:
        """
        Run one search. Never raises.

        Args:
            prompt: Natural-language request; truncated to ``max_prompt_chars``.
            domains: Optional domains to restrict the search to (first 20 used).

        Returns:
            SearchResult; on failure ``content`` is the fixed placeholder.
        """
        if not self.api_key:
            logger.error("PERPLEXITY_API_KEY not set, search unavailable")
            return SearchResult(success=False, content=PLACEHOLDER, error_message="API key not configured")

        payload = self.build_payload(prompt, domains)
        try:
            return self.backoff.run(lambda: self._post(payload))
        except requests.RequestException as e:
            logger.error("Search request failed: %s", e)
            return SearchResult(success=False, content=PLACEHOLDER, error_message=str(e))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error("Unexpected search response: %s", e)
            return SearchResult(success=False, content=PLACEHOLDER, error_message=f"Malformed response: {e}")


def merge_domains(groups: dict, group_names: Iterable[str], extra: Iterable[str] = ()) -> List[str]:
    """Union of the named domain groups and extra domains, order preserved."""
    domains: List[str] = []
    for name in group_names:
        if name not in groups:
            logger.warning("Unknown domain group '%s'", name)
            continue
        domains.extend(groups[name])
    domains.extend(extra)
    return list(dict.fromkeys(domains))


class SearchSourceAdapter(SourceAdapter):
    """Report section backed by one search prompt."""

    def __init__(
        self,
        section_id: str,
        label: str,
        prompt: str,
        client: SearchClient,
        domains: Optional[List[str]] = None,
    ) -> None:
        super().__init__(section_id, label)
        self.prompt = prompt
        self.client = client
        self.domains = list(domains or [])

    @property
    def name(self) -> str:
        return f"search:{self.section_id}"

    def fetch(self) -> SearchResult:
        result = self.client.query(self.prompt, self.domains)
        if result.success:
            logger.info("%s: %d citations", self.name, len(result.citations))
        return result
