"""
Node selection over parsed HTML/XML documents.

Adapters go through ``Document`` and ``Node`` instead of calling the parser
directly, so the parsing backend can change without touching adapter logic.
"""

from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag


class Node:
    """A selected element: read its text, attributes, or select inside it."""

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    def select(self, selector: str, limit: Optional[int] = None) -> List["Node"]:
        return [Node(t) for t in self._tag.select(selector, limit=limit)]

    def select_one(self, selector: str) -> Optional["Node"]:
        tag = self._tag.select_one(selector)
        return Node(tag) if tag is not None else None

    @property
    def text(self) -> str:
        return " ".join(self._tag.get_text(" ", strip=True).split())

    def attr(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        if isinstance(value, list):
            value = " ".join(value)
        return value

    def text_of(self, selector: str) -> str:
        """Text of the first descendant matching selector, or ''."""
        node = self.select_one(selector)
        return node.text if node else ""

    def attr_of(self, selector: str, name: str) -> Optional[str]:
        """Attribute of the first descendant matching selector."""
        node = self.select_one(selector)
        return node.attr(name) if node else None


class Document(Node):
    """A parsed HTML page."""

    def __init__(self, markup: str, parser: str = "html.parser") -> None:
        super().__init__(BeautifulSoup(markup, parser))


def html_to_text(markup: str) -> str:
    """Strip tags from an HTML fragment and collapse whitespace."""
    if not markup:
        return ""
    if "<" not in markup:
        return " ".join(markup.split())
    return Document(markup).text
