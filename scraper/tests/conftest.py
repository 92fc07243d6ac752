import os
import sys

import pytest

# Add scraper directory to Python path so we can import the modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

DEFAULT_PRICE_BLOCK = '<div class="Price">12 500 €<br>24 448.98 лв.</div>'

LISTING_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta http-equiv="Content-Type" content="text/html; charset=windows-1251">
<title>BMW X5 - mobile.bg</title>
</head>
<body>
<div class="obTitle"><h1>BMW X5 M Pack xDrive <span class="badge">ТОП</span></h1></div>
{price_block}
<div class="mainCarParams">
  <div class="item probeg"><div class="mpLabel">Пробег</div><div class="mpInfo">135 000 км</div></div>
</div>
<div class="techData"><div class="items">
  <div class="item"><div>Дата на производство</div><div>май 2018 г.</div></div>
  <div class="item"><div>Двигател</div><div>Дизелов</div></div>
  <div class="item"><div>Скоростна кутия</div><div>Автоматична</div></div>
  <div class="item"><div>VIN</div><div>WBAKS410X00A12345</div></div>
</div></div>
<ul class="parameters">
  <li><span class="label">Цвят</span><span class="value">Черен</span></li>
  <li><span class="label">Двигател</span><span class="value">Бензинов</span></li>
</ul>
<div class="details"><ul><li>Климатроник</li><li>Навигация</li><li>Кожен салон</li></ul></div>
<div id="owlcarousel">
  <img class="carouselimg" data-src="//cdn3.focus.bg/mobile/photosorg/1.webp" src="/img/placeholder.gif">
  <img class="carouselimg" data-lazy="https://cdn3.focus.bg/mobile/photosorg/2.webp">
  <img class="carouselimg" src="/photos/3.webp">
  <img class="carouselimg" src="https://cdn3.focus.bg/mobile/photosorg/4.webp">
  <img class="carouselimg" data-src="https://cdn3.focus.bg/mobile/photosorg/4.webp">
</div>
<div class="moreInfo"><div class="text"><p>Перфектно състояние.</p><p>Сервизна история<br>Първи собственик</p></div></div>
<div class="carLocation"><span>Намира се в гр. София, обл. София-град</span></div>
<div class="statistiki"><div class="text">Публикувана в 14:32 часа на 05.03.2024 год. Обявата е посетена 120 пъти.</div></div>
</body>
</html>
"""

LISTING_URL = "https://www.mobile.bg/obiava-21762431510491781-bmw-x5-m-pack"


def build_listing_html(price_block: str = DEFAULT_PRICE_BLOCK) -> str:
    return LISTING_PAGE_TEMPLATE.format(price_block=price_block)


@pytest.fixture
def listing_html():
    return build_listing_html()


@pytest.fixture
def listing_html_without_price():
    return build_listing_html(price_block="")


@pytest.fixture(autouse=True)
def _clear_scraper_env(monkeypatch):
    for name in (
        "SCRAPER_HTTP_TIMEOUT_SECONDS",
        "SCRAPER_ENCODING_SNIFF_BYTES",
        "SCRAPER_CANCEL_POLL_SECONDS",
        "SCRAPER_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def pytest_configure(config):
    config.addinivalue_line("markers", "live: hits the live marketplace (skipped by default, run with: pytest -m live)")


def pytest_collection_modifyitems(config, items):
    # Skip live tests unless explicitly requested with -m live
    if config.getoption("-m") and "live" in config.getoption("-m"):
        return
    skip_live = pytest.mark.skip(reason="live tests skipped by default (run with: pytest -m live)")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)
