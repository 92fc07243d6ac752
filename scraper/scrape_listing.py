"""Public entry point: scrape one car listing URL into a normalized record.

Pipeline: registry -> fetch_html -> extractor -> normalize_listing.
Failures surface as one of two error kinds:

- UnsupportedMarketplaceError: no extractor handles the URL's host.
- ScraperExecutionError: the fetch or the extraction failed; the original
  exception is kept on ``.cause`` and ``__cause__``.
"""

from __future__ import annotations

import logging
from urllib.parse import urlparse

import requests

from http_utils import fetch_html, get_http_status
from listing import ScrapeOptions, ScrapeResult
from normalizer import normalize_listing
from sources.registry import resolve_extractor

logger = logging.getLogger(__name__)


class ScraperError(Exception):
    """Base class for errors raised by scrape_car_listing."""


class InvalidListingUrlError(ScraperError, ValueError):
    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(f"Invalid listing URL {url!r}: {reason}")


class UnsupportedMarketplaceError(ScraperError):
    def __init__(self, url: str):
        self.url = url
        super().__init__(f"No scraper available for URL: {url}")


class ScraperExecutionError(ScraperError):
    def __init__(self, url: str, source: str, cause: BaseException):
        self.url = url
        self.source = source
        self.cause = cause
        super().__init__(f"Failed to scrape listing from {source} at {url}: {cause}")


def _validate_url(url: str):
    if not isinstance(url, str) or not url.strip():
        raise InvalidListingUrlError(str(url), "empty URL")
    try:
        parsed = urlparse(url.strip())
    except ValueError as e:
        raise InvalidListingUrlError(url, str(e)) from e
    if parsed.scheme not in ("http", "https"):
        raise InvalidListingUrlError(url, "scheme must be http or https")
    if not parsed.hostname:
        raise InvalidListingUrlError(url, "missing hostname")
    return parsed


def scrape_car_listing(
    url: str,
    options: ScrapeOptions | None = None,
    session: requests.Session | None = None,
) -> ScrapeResult:
    """Scrape a single listing and return both the normalized and the raw record."""
    parsed = _validate_url(url)
    extractor = resolve_extractor(parsed)
    if extractor is None:
        raise UnsupportedMarketplaceError(url)

    target = parsed.geturl()
    try:
        fetched = fetch_html(target, options, session=session)
        raw = extractor.extract(fetched.soup, target)
    except Exception as e:
        logger.warning(
            "Scrape of %s via %s failed (status=%s): %s", target, extractor.source_key, get_http_status(e), e
        )
        raise ScraperExecutionError(target, extractor.source_key, e) from e

    listing = normalize_listing(raw)
    logger.info(
        "Scraped %s listing %s (title=%r, price=%s %s)",
        extractor.source_key, target, listing.title, listing.price, listing.currency,
    )
    return ScrapeResult(listing=listing, raw=raw)
