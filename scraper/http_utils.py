from __future__ import annotations

"""HTTP fetch and charset decoding shared by all listing extractors."""

import codecs
import logging
import re
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass

import requests
from bs4 import BeautifulSoup
from requests.structures import CaseInsensitiveDict

from config import ScraperSettings, load_settings
from listing import ScrapeOptions

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9,bg;q=0.8",
}

FALLBACK_ENCODING = "utf-8"
_CHUNK_SIZE = 16 * 1024

_HEADER_CHARSET_RE = re.compile(r"charset=([^;]+)", re.IGNORECASE)
_META_CHARSET_RE = re.compile(r"""<meta[^>]+charset=["']?([\w-]+)""", re.IGNORECASE)
_META_CONTENT_CHARSET_RE = re.compile(
    r"""<meta[^>]+content=["'][^"']*charset=([\w-]+)""", re.IGNORECASE
)


class FetchError(Exception):
    """Raised when the listing page answers with a non-2xx status."""

    def __init__(self, url: str, status_code: int, reason: str | None):
        self.url = url
        self.status_code = status_code
        self.reason = reason or ""
        super().__init__(f"Failed to fetch URL {url}: {status_code} {self.reason}".rstrip())


class FetchCancelledError(Exception):
    """Raised when the caller's cancel_event is set while a fetch is in flight."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Fetch of {url} was cancelled")


@dataclass
class FetchResult:
    html: str
    soup: BeautifulSoup
    encoding: str
    status_code: int


def get_http_status(exc: Exception) -> int | None:
    """Extract HTTP status code from FetchError or requests exceptions when available."""
    if isinstance(exc, FetchError):
        return exc.status_code
    resp_obj = getattr(exc, "response", None)
    return resp_obj.status_code if resp_obj is not None else None


def detect_encoding_from_headers(headers) -> str | None:
    """Return the charset parameter of the Content-Type header, lowercased."""
    if not headers:
        return None
    content_type = CaseInsensitiveDict(headers).get("content-type")
    if not content_type:
        return None
    match = _HEADER_CHARSET_RE.search(content_type)
    if not match:
        return None
    charset = match.group(1).strip().strip("\"'").lower()
    return charset or None


def detect_encoding_from_content(body: bytes, sniff_bytes: int = 2048) -> str | None:
    """Sniff a <meta charset> or <meta http-equiv content> declaration from the page head."""
    if not body:
        return None
    sample = body[:sniff_bytes].decode("latin-1")
    for pattern in (_META_CHARSET_RE, _META_CONTENT_CHARSET_RE):
        match = pattern.search(sample)
        if match:
            return match.group(1).lower()
    return None


def resolve_encoding(body: bytes, headers, sniff_bytes: int = 2048) -> str:
    """Pick the charset: in-document meta first, then Content-Type header, then UTF-8.

    The in-document declaration deliberately wins over the transport header.
    """
    content_encoding = detect_encoding_from_content(body, sniff_bytes)
    header_encoding = detect_encoding_from_headers(headers)
    encoding = content_encoding or header_encoding or FALLBACK_ENCODING
    logger.debug(
        "Resolved encoding %s (meta=%s, header=%s)", encoding, content_encoding, header_encoding
    )
    return encoding


def decode_body(body: bytes, encoding: str) -> str:
    """Decode bytes, falling back to UTF-8 for encodings Python does not know."""
    try:
        codec_name = codecs.lookup(encoding).name
    except LookupError:
        logger.debug("Unknown encoding %r; decoding as %s", encoding, FALLBACK_ENCODING)
        codec_name = FALLBACK_ENCODING
    return body.decode(codec_name, errors="replace")


def _raise_if_cancelled(url: str, options: ScrapeOptions) -> None:
    if options.cancelled:
        raise FetchCancelledError(url)


def _discard_response(future) -> None:
    if future.cancelled() or future.exception() is not None:
        return
    future.result().close()


def _send_request(session, url: str, options: ScrapeOptions, settings: ScraperSettings):
    """Issue the GET, polling the cancel_event while the request is in flight."""
    request_kwargs = {"headers": DEFAULT_HEADERS, "timeout": settings.timeout_seconds, "stream": True}
    if options.cancel_event is None:
        return session.get(url, **request_kwargs)

    _raise_if_cancelled(url, options)
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="listing-fetch")
    try:
        future = executor.submit(session.get, url, **request_kwargs)
        while True:
            done, _ = wait([future], timeout=settings.cancel_poll_seconds)
            if done:
                return future.result()
            if options.cancelled:
                logger.info("Cancelling in-flight fetch of %s", url)
                future.add_done_callback(_discard_response)
                raise FetchCancelledError(url)
    finally:
        executor.shutdown(wait=False)


def _read_body(response, url: str, options: ScrapeOptions) -> bytes:
    chunks = []
    for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
        _raise_if_cancelled(url, options)
        if chunk:
            chunks.append(chunk)
    return b"".join(chunks)


def fetch_html(
    url: str,
    options: ScrapeOptions | None = None,
    session: requests.Session | None = None,
    settings: ScraperSettings | None = None,
) -> FetchResult:
    """Fetch a page with browser-like headers and return its decoded HTML and soup.

    Raises FetchError on non-2xx responses, FetchCancelledError when the
    options' cancel_event fires, and lets requests exceptions (timeouts,
    connection errors) propagate unchanged. There are no retries.
    """
    options = options or ScrapeOptions()
    settings = settings or load_settings()
    owns_session = session is None
    if owns_session:
        session = requests.Session()

    try:
        logger.info("Fetching %s", url)
        response = _send_request(session, url, options, settings)
        try:
            if not 200 <= response.status_code < 300:
                raise FetchError(url, response.status_code, response.reason)
            body = _read_body(response, url, options)
            headers = response.headers
            status_code = response.status_code
        finally:
            response.close()
    finally:
        if owns_session:
            session.close()

    encoding = resolve_encoding(body, headers, settings.sniff_bytes)
    html = decode_body(body, encoding)
    soup = BeautifulSoup(html, "html.parser")
    logger.info("Fetched %s (%d bytes, %s)", url, len(body), encoding)
    return FetchResult(html=html, soup=soup, encoding=encoding, status_code=status_code)
