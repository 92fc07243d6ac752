import argparse
import json
import logging
import sys

from config import load_settings
from scrape_listing import (
    InvalidListingUrlError,
    ScraperExecutionError,
    UnsupportedMarketplaceError,
    scrape_car_listing,
)
from sources.registry import supported_sources

logger = logging.getLogger(__name__)

EXIT_EXECUTION_ERROR = 1
EXIT_BAD_INPUT = 2

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _log_level(name: str) -> int:
    # SCRAPER_LOG_LEVEL arrives as the argparse default, which choices does not check.
    if name.upper() not in LOG_LEVELS:
        logger.warning("Unknown log level %r; using INFO", name)
        return logging.INFO
    return getattr(logging, name.upper())


def main(argv=None) -> int:
    settings = load_settings()
    parser = argparse.ArgumentParser(
        description="Scrape a single car listing and print it as JSON.",
        epilog=f"Supported sources: {', '.join(supported_sources())}",
    )
    parser.add_argument("url", help="Listing URL, e.g. https://www.mobile.bg/obiava-...")
    parser.add_argument("--raw", action="store_true", help="Also print the raw extracted fields")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=settings.log_level,
        help="Logging level (default: %(default)s)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=_log_level(args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    logger.info("Starting scrape for %s", args.url)
    try:
        result = scrape_car_listing(args.url)
    except (InvalidListingUrlError, UnsupportedMarketplaceError) as e:
        logger.error("%s", e)
        return EXIT_BAD_INPUT
    except ScraperExecutionError:
        logger.exception("Scrape failed")
        return EXIT_EXECUTION_ERROR

    payload = result.to_dict(include_raw=args.raw)
    if not args.raw:
        payload = payload["listing"]
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
