"""Extractor protocol and selector helpers shared by marketplace extractors."""

from __future__ import annotations

from typing import Callable, Iterable, Protocol
from urllib.parse import ParseResult, urljoin

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from listing import RawListing
from parsing import clean_text

# Attributes some templates use instead of text content (meta tags, inputs).
_VALUE_ATTRS = ("content", "value", "data-value")


class ListingExtractor(Protocol):
    source_key: str

    def matches(self, url: ParseResult) -> bool:
        """Return True if this extractor handles the URL's hostname."""

    def extract(self, soup: BeautifulSoup, url: str) -> RawListing:
        """Return the raw, string-typed fields found on the page."""


def first_non_empty(strategies: Iterable[Callable], *args):
    """Run strategies in order and return the first truthy result, else None."""
    for strategy in strategies:
        value = strategy(*args)
        if value:
            return value
    return None


def node_text(node: Tag | None) -> str:
    if node is None:
        return ""
    return clean_text(node.get_text(" "))


def own_text(node: Tag | None) -> str:
    """Text of the node's first direct text child, ignoring nested elements."""
    if node is None:
        return ""
    for child in node.children:
        if isinstance(child, NavigableString) and not isinstance(child, Comment):
            text = clean_text(str(child))
            if text:
                return text
    return ""


def select_text(root, selectors: str | Iterable[str]) -> str | None:
    """Text of the first node matched by any selector, in selector order.

    When the node has no text, its content/value/data-value attribute is
    used instead.
    """
    if isinstance(selectors, str):
        selectors = (selectors,)
    for selector in selectors:
        node = root.select_one(selector)
        if node is None:
            continue
        text = node_text(node)
        if not text:
            text = next(
                (clean_text(node.get(attr)) for attr in _VALUE_ATTRS if node.get(attr)),
                "",
            )
        return text or None
    return None


def child_elements(node: Tag) -> list[Tag]:
    return [child for child in node.children if isinstance(child, Tag)]


def resolve_absolute_url(candidate: str, origin: str) -> str:
    """Resolve protocol-relative ('//host/x') and relative URLs against the page URL."""
    if not candidate:
        return candidate
    if candidate.startswith("//"):
        return f"https:{candidate}"
    if candidate.startswith(("http://", "https://")):
        return candidate
    try:
        return urljoin(origin, candidate)
    except ValueError:
        return candidate
