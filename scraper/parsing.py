"""Shared text-parsing helpers used by the listing extractors and normalizer.

Each function accepts a raw string (or None) and returns a parsed value.
Nothing here raises on bad input; unparsable text yields None or "".
"""

import re
from html import unescape

_WHITESPACE_RE = re.compile(r"\s+")
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_P_CLOSE_RE = re.compile(r"</p>", re.IGNORECASE)
_TAG_RE = re.compile(r"</?[^>]+>")
_YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")


def clean_text(value: str | None) -> str:
    """Collapse whitespace runs to single spaces and trim. None becomes ''."""
    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", value).strip()


def parse_number(value: str | None) -> float | None:
    """Parse a locale-formatted number like '12 500', '1.815,50' or '24,900.00'.

    Separator rules:
      "1.815,50"  -> 1815.5   (both present: the last one is the decimal mark)
      "1,815.50"  -> 1815.5
      "1.234.567" -> 1234567  (repeated separator: thousands)
      "4,284"     -> 4284     (single separator + exactly 3 digits: thousands)
      "12,5"      -> 12.5     (otherwise: decimal)

    The three-digit rule makes the parse lossy for values with exactly three
    decimals: str(1234.567) reads back as 1234567. Prices carry at most two
    decimals, so re-parsing a parsed price is stable.
    """
    if not value:
        return None
    cleaned = re.sub(r"[^\d.,-]", "", value)
    if not re.search(r"\d", cleaned):
        return None

    negative = cleaned.startswith("-")
    cleaned = cleaned.replace("-", "")

    has_dot = "." in cleaned
    has_comma = "," in cleaned

    if has_dot and has_comma:
        decimal_mark = "." if cleaned.rfind(".") > cleaned.rfind(",") else ","
        thousands_mark = "," if decimal_mark == "." else "."
        cleaned = cleaned.replace(thousands_mark, "").replace(decimal_mark, ".")
    elif has_dot or has_comma:
        mark = "." if has_dot else ","
        parts = cleaned.split(mark)
        if len(parts) > 2 or len(parts[1]) == 3:
            cleaned = cleaned.replace(mark, "")
        else:
            cleaned = cleaned.replace(mark, ".")

    try:
        number = float(cleaned)
    except ValueError:
        return None
    return -number if negative else number


def parse_integer(value: str | None) -> int | None:
    """Parse an integer like '135 000 км' to 135000, keeping a leading minus."""
    if not value:
        return None
    stripped = re.sub(r"[^\d-]", "", value)
    digits = re.sub(r"\D", "", stripped)
    if not digits:
        return None
    number = int(digits)
    return -number if stripped.startswith("-") else number


def extract_year(text: str | None) -> str | None:
    """Return the first 19xx/20xx year found in text like 'май 2018 г.'."""
    if not text:
        return None
    match = _YEAR_RE.search(text)
    return match.group(0) if match else None


def unique_strings(values) -> list[str]:
    """Drop empty values and exact duplicates, keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if not value or value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


def html_fragment_to_text(fragment: str | None, paragraph_breaks: bool = False) -> str:
    """Strip markup from an HTML fragment, turning <br> (and </p>) into newlines.

    The result is passed through clean_text, so the newlines only act as
    word separators in the returned string.
    """
    if not fragment:
        return ""
    text = _BR_RE.sub("\n", fragment)
    if paragraph_breaks:
        text = _P_CLOSE_RE.sub("\n", text)
    text = _TAG_RE.sub(" ", text)
    return clean_text(unescape(text))
