"""Turn an extractor's RawListing into the canonical NormalizedListing.

normalize_listing never raises: each field degrades to None (or an empty
collection) on its own when the raw text cannot be parsed.
"""

from __future__ import annotations

from listing import NormalizedListing, RawListing
from parsing import clean_text, parse_integer, parse_number, unique_strings

# Scanned in order; the first token found in the lowercased text wins.
CURRENCY_TOKENS: tuple[tuple[str, str], ...] = (
    ("лв", "BGN"),
    ("bgn", "BGN"),
    ("€", "EUR"),
    ("eur", "EUR"),
    ("$", "USD"),
    ("usd", "USD"),
)

LOCATION_ATTRIBUTE_KEYS = ("Местоположение", "Location")


def detect_currency(text: str | None) -> str | None:
    """Return the ISO code of the first known currency token in text, e.g. '24 900 лв.' -> 'BGN'."""
    if not text:
        return None
    lowered = text.lower()
    for token, code in CURRENCY_TOKENS:
        if token in lowered:
            return code
    return None


def _explicit_currency(raw: RawListing) -> str | None:
    return clean_text(raw.currency).upper() or None


def _currency_from_price_text(raw: RawListing) -> str | None:
    return detect_currency(raw.price_text)


def _currency_from_euro_field(raw: RawListing) -> str | None:
    return "EUR" if raw.price_euro_raw else None


def _currency_from_leva_field(raw: RawListing) -> str | None:
    return "BGN" if raw.price_leva_raw else None


def _currency_from_title(raw: RawListing) -> str | None:
    return detect_currency(raw.title)


# Currency decision table, highest priority first.
CURRENCY_RULES = (
    _explicit_currency,
    _currency_from_price_text,
    _currency_from_euro_field,
    _currency_from_leva_field,
    _currency_from_title,
)


def resolve_currency(raw: RawListing) -> str | None:
    for rule in CURRENCY_RULES:
        currency = rule(raw)
        if currency:
            return currency
    return None


def resolve_price(raw: RawListing) -> float | None:
    """First parsable of: price_text, EUR amount, BGN amount, raw_details price_text."""
    details = raw.raw_details or {}
    candidates = (
        raw.price_text,
        raw.price_euro_raw,
        raw.price_leva_raw,
        details.get("price_text"),
    )
    for candidate in candidates:
        price = parse_number(str(candidate)) if candidate is not None else None
        if price is not None:
            return price
    return None


def _optional_text(value) -> str | None:
    if value is None:
        return None
    return clean_text(str(value)) or None


def _resolve_location(raw: RawListing) -> str | None:
    location = _optional_text(raw.location)
    if location:
        return location
    attributes = raw.attributes or {}
    for key in LOCATION_ATTRIBUTE_KEYS:
        location = _optional_text(attributes.get(key))
        if location:
            return location
    return None


def normalize_listing(raw: RawListing) -> NormalizedListing:
    return NormalizedListing(
        source=raw.source,
        url=raw.url,
        title=_optional_text(raw.title),
        description=_optional_text(raw.description),
        location=_resolve_location(raw),
        posted_at=_optional_text(raw.posted_at),
        price=resolve_price(raw),
        price_euro=parse_number(raw.price_euro_raw),
        price_leva=parse_number(raw.price_leva_raw),
        mileage_km=parse_integer(raw.mileage_text),
        year=parse_integer(raw.year_text),
        currency=resolve_currency(raw),
        vin=_optional_text(raw.vin),
        images=unique_strings(raw.images or []),
        attributes=dict(raw.attributes or {}),
    )
