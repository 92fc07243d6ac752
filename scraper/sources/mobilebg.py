"""mobile.bg listing extractor.

mobile.bg serves at least two page templates for the same listing (the
legacy table layout and the newer "techData" layout), so most fields are
read through an ordered tuple of strategies; the first non-empty result
wins. Typical markup of the newer template:

    <div class="obTitle"><h1>BMW X5 M Pack <span>xDrive</span></h1></div>
    <div class="Price">12 500 €<br>24 448.98 лв.</div>
    <div class="techData"><div class="items">
      <div class="item"><div>Пробег</div><div>135 000 км</div></div>
      <div class="item"><div>Дата на производство</div><div>май 2018 г.</div></div>
    </div></div>
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from urllib.parse import ParseResult

from bs4 import BeautifulSoup

from listing import RawListing
from parsing import clean_text, extract_year, html_fragment_to_text, unique_strings
from sources.base import (
    child_elements,
    first_non_empty,
    node_text,
    own_text,
    resolve_absolute_url,
    select_text,
)

logger = logging.getLogger(__name__)

MOBILE_BG_HOSTNAMES = frozenset({"mobile.bg", "www.mobile.bg"})

TECH_DATA_ITEMS = ".techData .items .item"
PRICE_SELECTORS = ("div.Price",)
GALLERY_IMAGES = "#owlcarousel img.carouselimg"
IMAGE_SOURCE_ATTRS = ("data-src", "data-lazy", "src")

FEATURES_ATTRIBUTE = "Особености"
MILEAGE_ATTRIBUTE = "Пробег"
YEAR_ATTRIBUTE = "Дата на производство"

_BR_SPLIT_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_AMOUNT_RE = re.compile(r"(\d[\d\s.,]*)")
_CURRENCY_TOKEN_RE = re.compile(r"(€|лв\.?|bgn|eur|usd)", re.IGNORECASE)
_MILEAGE_LABEL_RE = re.compile(r"Пробег", re.IGNORECASE)

_POSTED_AT_WITH_TIME_RE = re.compile(
    r"Публикувана\s+(?:в\s+)?([\d:.]+)\s+часа?\s+на\s+(\d{2}\.\d{2}\.\d{4})", re.IGNORECASE
)
_POSTED_AT_DATE_RE = re.compile(r"Публикувана\s+на\s+(\d{2}\.\d{2}\.\d{4})", re.IGNORECASE)

# Applied in order to the raw location text.
_LOCATION_CLEANUPS = (
    re.compile(r"^Намира се в\s*", re.IGNORECASE),
    re.compile(r"^гр\.\s*", re.IGNORECASE),
    re.compile(r"^обл\.\s*", re.IGNORECASE),
    re.compile(r",\s*обл\..*", re.IGNORECASE),
    re.compile(r",\s*област.*", re.IGNORECASE),
)


@dataclass(frozen=True)
class PriceSegment:
    text: str
    amount_raw: str
    currency_token: str | None


def parse_price_segment(segment_html: str | None) -> PriceSegment | None:
    """Parse one <br>-separated piece of the price box, e.g. '12 500 €'."""
    text = html_fragment_to_text(segment_html)
    if not text:
        return None
    amount_match = _AMOUNT_RE.search(text)
    if not amount_match:
        return None
    currency_match = _CURRENCY_TOKEN_RE.search(text)
    return PriceSegment(
        text=text,
        amount_raw=re.sub(r"\s+", "", amount_match.group(1)),
        currency_token=currency_match.group(1) if currency_match else None,
    )


def _title_from_heading(soup: BeautifulSoup) -> str | None:
    return _leading_title_text(soup.select_one("div.obTitle h1"))


def _title_from_container(soup: BeautifulSoup) -> str | None:
    return _leading_title_text(soup.select_one("div.obTitle"))


def _leading_title_text(node) -> str | None:
    if node is None:
        return None
    return own_text(node) or node_text(node) or None


TITLE_STRATEGIES = (_title_from_heading, _title_from_container)


def _year_from_legacy_node(soup: BeautifulSoup) -> str | None:
    return extract_year(node_text(soup.select_one("div[class*='proizvodstvo'] .mpInfo")))


def _year_from_tech_data(soup: BeautifulSoup) -> str | None:
    for item in soup.select(TECH_DATA_ITEMS):
        children = child_elements(item)
        if len(children) < 2:
            continue
        year = extract_year(node_text(children[1]))
        if year:
            return year
    return None


YEAR_STRATEGIES = (_year_from_legacy_node, _year_from_tech_data)


def _mileage_from_main_params(soup: BeautifulSoup) -> str | None:
    return select_text(soup, ".mainCarParams .item.probeg .mpInfo")


def _mileage_from_tech_data(soup: BeautifulSoup) -> str | None:
    for item in soup.select(TECH_DATA_ITEMS):
        children = child_elements(item)
        if not children or not _MILEAGE_LABEL_RE.search(node_text(children[0])):
            continue
        return node_text(children[1]) if len(children) > 1 else None
    return None


MILEAGE_STRATEGIES = (_mileage_from_main_params, _mileage_from_tech_data)


def _description_from_rich_text(soup: BeautifulSoup) -> str | None:
    node = soup.select_one(".moreInfo .text")
    if node is None:
        return None
    return html_fragment_to_text(node.decode_contents(), paragraph_breaks=True) or node_text(node) or None


def _description_from_legacy(soup: BeautifulSoup) -> str | None:
    return node_text(soup.select_one("div.dinfo")) or None


DESCRIPTION_STRATEGIES = (_description_from_rich_text, _description_from_legacy)


def extract_price_fields(soup: BeautifulSoup) -> dict:
    """Split the price box on <br> into the EUR (first) and BGN (second) amounts."""
    price_node = next(
        (node for node in (soup.select_one(sel) for sel in PRICE_SELECTORS) if node is not None),
        None,
    )
    if price_node is None:
        return {}

    inner_html = price_node.decode_contents()
    segments = _BR_SPLIT_RE.split(inner_html)
    euro = parse_price_segment(segments[0]) if segments else None
    leva = parse_price_segment(segments[1]) if len(segments) > 1 else None

    details = {"price_text": html_fragment_to_text(inner_html) or None}
    if euro and euro.currency_token:
        details["price_euro_currency"] = euro.currency_token
    if leva and leva.currency_token:
        details["price_leva_currency"] = leva.currency_token

    return {
        "price_euro_raw": euro.amount_raw if euro else None,
        "price_leva_raw": leva.amount_raw if leva else None,
        "raw_details": {k: v for k, v in details.items() if v},
    }


def extract_images(soup: BeautifulSoup, page_url: str) -> list[str]:
    """Gallery image URLs, lazy-load attributes first, resolved and de-duplicated."""
    urls = []
    for node in soup.select(GALLERY_IMAGES):
        src = next((clean_text(node.get(attr)) for attr in IMAGE_SOURCE_ATTRS if node.get(attr)), "")
        if src and not src.startswith("data:"):
            urls.append(resolve_absolute_url(src, page_url))

    return unique_strings(urls)


def extract_location(soup: BeautifulSoup) -> str | None:
    text = node_text(soup.select_one(".carLocation span"))
    if not text:
        return None
    for pattern in _LOCATION_CLEANUPS:
        text = pattern.sub("", text)
    return clean_text(text) or None


def extract_attributes(soup: BeautifulSoup) -> dict[str, str]:
    """Merge the parameter list and the tech-data items; tech data wins on collisions."""
    attributes: dict[str, str] = {}

    for li in soup.select("ul.parameters > li"):
        key = node_text(li.select_one("span.label"))
        value = node_text(li.select_one("span.value"))
        if key and value:
            attributes[key] = value

    for item in soup.select(TECH_DATA_ITEMS):
        children = child_elements(item)
        if len(children) < 2:
            continue
        key = node_text(children[0])
        value = node_text(children[1])
        if key and value:
            attributes[key] = value

    features = [text for text in (node_text(li) for li in soup.select("div.details ul li")) if text]
    if features:
        attributes[FEATURES_ATTRIBUTE] = ", ".join(features)

    return attributes


def extract_posted_at(soup: BeautifulSoup) -> str | None:
    text = node_text(soup.select_one(".statistiki .text"))
    if not text:
        return None

    match = _POSTED_AT_WITH_TIME_RE.search(text)
    if match:
        time_part, date_part = match.groups()
        return f"{date_part} {time_part}"

    match = _POSTED_AT_DATE_RE.search(text)
    if match:
        return match.group(1)
    return None


def _vin_from_attributes(attributes: dict[str, str]) -> str | None:
    return next((value for key, value in attributes.items() if "vin" in key.lower()), None)


class MobileBgExtractor:
    source_key = "mobilebg"

    def matches(self, url: ParseResult) -> bool:
        return (url.hostname or "").lower() in MOBILE_BG_HOSTNAMES

    def extract(self, soup: BeautifulSoup, url: str) -> RawListing:
        if soup is None or soup.find(True) is None:
            raise ValueError(f"Empty document for {url}")

        attributes = extract_attributes(soup)
        price_fields = extract_price_fields(soup)

        raw = RawListing(
            source=self.source_key,
            url=url,
            title=first_non_empty(TITLE_STRATEGIES, soup),
            price_euro_raw=price_fields.get("price_euro_raw"),
            price_leva_raw=price_fields.get("price_leva_raw"),
            description=first_non_empty(DESCRIPTION_STRATEGIES, soup),
            images=extract_images(soup, url),
            attributes=attributes,
            location=extract_location(soup),
            posted_at=extract_posted_at(soup),
            mileage_text=first_non_empty(MILEAGE_STRATEGIES, soup) or attributes.get(MILEAGE_ATTRIBUTE),
            year_text=first_non_empty(YEAR_STRATEGIES, soup) or extract_year(attributes.get(YEAR_ATTRIBUTE)),
            vin=_vin_from_attributes(attributes),
            raw_details=price_fields.get("raw_details", {}),
        )

        missing = [name for name in ("title", "price_euro_raw", "year_text", "mileage_text") if not getattr(raw, name)]
        if missing:
            logger.debug("mobilebg: no %s found on %s", ", ".join(missing), url)
        logger.info(
            "mobilebg: extracted %s (%d images, %d attributes)", url, len(raw.images), len(raw.attributes)
        )
        return raw
