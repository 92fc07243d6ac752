"""Listing records passed between the extractors, normalizer and callers."""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass, field


@dataclass
class RawListing:
    """What an extractor found on the page, all strings, nothing validated."""

    source: str
    url: str
    title: str | None = None
    price_text: str | None = None
    currency: str | None = None
    price_euro_raw: str | None = None
    price_leva_raw: str | None = None
    description: str | None = None
    images: list[str] = field(default_factory=list)
    attributes: dict[str, str] = field(default_factory=dict)
    location: str | None = None
    posted_at: str | None = None
    mileage_text: str | None = None
    year_text: str | None = None
    vin: str | None = None
    raw_details: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class NormalizedListing:
    source: str
    url: str
    title: str | None = None
    description: str | None = None
    location: str | None = None
    posted_at: str | None = None
    price: float | None = None
    price_euro: float | None = None
    price_leva: float | None = None
    mileage_km: int | None = None
    year: int | None = None
    currency: str | None = None
    vin: str | None = None
    images: list[str] = field(default_factory=list)
    attributes: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ScrapeOptions:
    """Per-call options. Setting cancel_event aborts an in-flight fetch."""

    cancel_event: threading.Event | None = None

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()


@dataclass
class ScrapeResult:
    listing: NormalizedListing
    raw: RawListing

    def to_dict(self, include_raw: bool = True) -> dict:
        payload = {"listing": self.listing.to_dict()}
        if include_raw:
            payload["raw"] = self.raw.to_dict()
        return payload
