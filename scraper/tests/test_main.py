import json
import logging
from unittest.mock import patch

import pytest

import main
from listing import NormalizedListing, RawListing, ScrapeResult
from scrape_listing import ScraperExecutionError

URL = "https://www.mobile.bg/obiava-1"


def _result() -> ScrapeResult:
    raw = RawListing(source="mobilebg", url=URL, title="BMW X5", price_euro_raw="12500")
    listing = NormalizedListing(source="mobilebg", url=URL, title="BMW X5", price=12500.0, currency="EUR")
    return ScrapeResult(listing=listing, raw=raw)


def test_prints_listing_json(capsys):
    with patch("main.scrape_car_listing", return_value=_result()):
        exit_code = main.main([URL])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["title"] == "BMW X5"
    assert payload["currency"] == "EUR"
    assert "raw" not in payload


def test_raw_flag_includes_raw_fields(capsys):
    with patch("main.scrape_car_listing", return_value=_result()):
        exit_code = main.main([URL, "--raw"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["listing"]["price"] == 12500.0
    assert payload["raw"]["price_euro_raw"] == "12500"


def test_unsupported_marketplace_exit_code():
    assert main.main(["https://www.cars.bg/offer/1"]) == main.EXIT_BAD_INPUT


def test_malformed_url_exit_code():
    assert main.main(["not-a-url"]) == main.EXIT_BAD_INPUT


def test_execution_error_exit_code():
    error = ScraperExecutionError(URL, "mobilebg", RuntimeError("boom"))
    with patch("main.scrape_car_listing", side_effect=error):
        assert main.main([URL]) == main.EXIT_EXECUTION_ERROR


def test_log_level_is_case_insensitive():
    with patch("main.scrape_car_listing", return_value=_result()), patch("main.logging.basicConfig") as basic_config:
        assert main.main([URL, "--log-level", "debug"]) == 0

    assert basic_config.call_args.kwargs["level"] == logging.DEBUG


def test_log_level_rejects_non_level_names():
    with pytest.raises(SystemExit) as exc_info:
        main.main([URL, "--log-level", "basic_format"])
    assert exc_info.value.code == 2


def test_unknown_log_level_from_env_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("SCRAPER_LOG_LEVEL", "basic_format")
    with patch("main.scrape_car_listing", return_value=_result()), patch("main.logging.basicConfig") as basic_config:
        assert main.main([URL]) == 0

    assert basic_config.call_args.kwargs["level"] == logging.INFO
