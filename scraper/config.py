from __future__ import annotations

"""Runtime settings for the listing scraper, read from the environment."""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_SNIFF_BYTES = 2048
DEFAULT_CANCEL_POLL_SECONDS = 0.05
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class ScraperSettings:
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    sniff_bytes: int = DEFAULT_SNIFF_BYTES
    cancel_poll_seconds: float = DEFAULT_CANCEL_POLL_SECONDS
    log_level: str = DEFAULT_LOG_LEVEL


def _read_float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        logger.warning("Invalid float value for %s=%r; using default=%s", name, raw, default)
        return default
    return value


def _read_int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning("Invalid integer value for %s=%r; using default=%s", name, raw, default)
        return default
    return value


def load_settings() -> ScraperSettings:
    """Build settings from SCRAPER_* env vars.

    Supported env vars:
    - SCRAPER_HTTP_TIMEOUT_SECONDS
    - SCRAPER_ENCODING_SNIFF_BYTES
    - SCRAPER_CANCEL_POLL_SECONDS
    - SCRAPER_LOG_LEVEL
    """
    timeout = _read_float_env("SCRAPER_HTTP_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
    if timeout <= 0:
        logger.warning("Ignoring non-positive HTTP timeout %s", timeout)
        timeout = DEFAULT_TIMEOUT_SECONDS

    sniff_bytes = _read_int_env("SCRAPER_ENCODING_SNIFF_BYTES", DEFAULT_SNIFF_BYTES)
    if sniff_bytes < 1:
        logger.warning("Ignoring non-positive encoding sniff window %d", sniff_bytes)
        sniff_bytes = DEFAULT_SNIFF_BYTES

    poll = max(0.01, _read_float_env("SCRAPER_CANCEL_POLL_SECONDS", DEFAULT_CANCEL_POLL_SECONDS))
    log_level = (os.environ.get("SCRAPER_LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper()

    return ScraperSettings(
        timeout_seconds=timeout,
        sniff_bytes=sniff_bytes,
        cancel_poll_seconds=poll,
        log_level=log_level,
    )
