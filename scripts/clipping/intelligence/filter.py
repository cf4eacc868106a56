"""
Boolean relevance filter for the merged report text.

A rule matches when at least one of its required terms and at least one of
its co-occurring terms appear in the text (case-insensitive substrings).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterRule:
    """A named required-term / co-occurring-term pair of sets."""

    name: str
    required_terms: FrozenSet[str]
    co_occur_terms: FrozenSet[str]

    @classmethod
    def from_config(cls, name: str, data: Dict[str, Any]) -> "FilterRule":
        return cls(
            name=name,
            required_terms=frozenset(t.lower() for t in data.get("required", [])),
            co_occur_terms=frozenset(t.lower() for t in data.get("with", [])),
        )

    def matches(self, text: str) -> bool:
        lower = text.lower()
        return any(t in lower for t in self.required_terms) and any(
            t in lower for t in self.co_occur_terms
        )


@dataclass
class FilterResult:
    """Rules that matched, in configured order."""

    matched: List[str] = field(default_factory=list)

    @property
    def any_matched(self) -> bool:
        return bool(self.matched)

    def __str__(self) -> str:
        return ", ".join(self.matched) if self.matched else "no filter matches"


class RuleFilter:
    """Evaluates every configured rule independently against a text."""

    def __init__(self, rules: Optional[List[FilterRule]] = None) -> None:
        self.rules = list(rules or [])

    @classmethod
    def from_config(cls, rules_config: Optional[Dict[str, Dict[str, Any]]]) -> "RuleFilter":
        """Build from a ``name -> {required, with}`` mapping, keeping its order."""
        rules = [FilterRule.from_config(name, data) for name, data in (rules_config or {}).items()]
        return cls(rules)

    def evaluate(self, text: Optional[str]) -> FilterResult:
        """Return the names of all rules that match text."""
        if not text:
            return FilterResult()
        result = FilterResult(matched=[rule.name for rule in self.rules if rule.matches(text)])
        logger.debug("Filter evaluation: %s", result)
        return result
