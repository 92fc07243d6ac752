"""Ordered registry of marketplace extractors.

Adding a marketplace means appending one extractor to EXTRACTORS.
"""

from __future__ import annotations

import logging
from urllib.parse import ParseResult, urlparse

from sources.base import ListingExtractor
from sources.mobilebg import MobileBgExtractor

logger = logging.getLogger(__name__)

EXTRACTORS: tuple[ListingExtractor, ...] = (
    MobileBgExtractor(),
)


def resolve_extractor(
    url: str | ParseResult, extractors: tuple[ListingExtractor, ...] = EXTRACTORS
) -> ListingExtractor | None:
    """Return the first extractor whose hostname predicate matches, else None."""
    parsed = urlparse(url) if isinstance(url, str) else url
    for extractor in extractors:
        if extractor.matches(parsed):
            return extractor
    logger.debug("No extractor registered for host %r", parsed.hostname)
    return None


def supported_sources(extractors: tuple[ListingExtractor, ...] = EXTRACTORS) -> list[str]:
    return [extractor.source_key for extractor in extractors]
