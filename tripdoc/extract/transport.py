"""Transport field extraction from item names and descriptions.

Each matcher is a small pure function returning the extracted string or
``None``. Matchers never raise; ``first_match`` runs them in priority order
and keeps the first hit. Nothing is ever invented: a field is only filled
from text already present on the item.
"""

import re
from collections.abc import Callable, Sequence

from tripdoc.models.common import is_hhmm
from tripdoc.models.item import ItineraryItem

Matcher = Callable[[ItineraryItem], str | None]

MAX_PAREN_CODE_LEN = 10

_ARROW_RE = re.compile(
    r"(?:->|→|➔|飛往|前往|往|\S\s+(?:to|towards)\s)\s*([^()]+)",
    re.IGNORECASE,
)
_BARE_TO_RE = re.compile(r"^\s*to\s+([^()]+)", re.IGNORECASE)
_TRAILING_PAREN_RE = re.compile(r"\(([^()]+)\)\s*$")
_ARRIVAL_TIME_RE = re.compile(
    r"(?<!\d)(\d{1,2}:\d{2})\s*(?:arrival|arrives?|arriving|抵達|到達|到)",
    re.IGNORECASE,
)
_TAG_RE = re.compile(r"<[^>]+>")


def strip_html(text: str) -> str:
    """Drop markup from rich-text content, keeping the text runs."""
    return re.sub(r"\s+", " ", _TAG_RE.sub(" ", text)).strip()


def _clean_label(raw: str) -> str | None:
    label = raw.strip().strip(".,;:-").strip()
    return label or None


def match_arrow(item: ItineraryItem) -> str | None:
    """``HKG -> NRT``, ``Bus to Old Town``, ``前往京都``."""
    found = _ARROW_RE.search(item.name or "")
    return _clean_label(found.group(1)) if found else None


def match_bare_to(item: ItineraryItem) -> str | None:
    """``To Kyoto``."""
    found = _BARE_TO_RE.match(item.name or "")
    return _clean_label(found.group(1)) if found else None


def match_trailing_code(item: ItineraryItem) -> str | None:
    """Short parenthetical suffix such as ``(NRT)``."""
    found = _TRAILING_PAREN_RE.search(item.name or "")
    if not found:
        return None
    code = found.group(1).strip()
    if not code or len(code) > MAX_PAREN_CODE_LEN:
        return None
    return code


def match_structured_end_time(item: ItineraryItem) -> str | None:
    return item.details.end_time or None


def match_description_arrival(item: ItineraryItem) -> str | None:
    """``... 14:35 arrival ...`` inside the description text."""
    for found in _ARRIVAL_TIME_RE.finditer(strip_html(item.details.description or "")):
        value = found.group(1).zfill(5)
        if is_hhmm(value):
            return value
    return None


DESTINATION_MATCHERS: tuple[Matcher, ...] = (
    match_arrow,
    match_bare_to,
    match_trailing_code,
)

ARRIVAL_TIME_MATCHERS: tuple[Matcher, ...] = (
    match_structured_end_time,
    match_description_arrival,
)


def first_match(matchers: Sequence[Matcher], item: ItineraryItem) -> str | None:
    """Return the first non-empty matcher result."""
    for matcher in matchers:
        value = matcher(item)
        if value:
            return value
    return None


def extract_transport_fields(item: ItineraryItem) -> dict[str, str]:
    """Extract missing arrival fields of a transport item.

    Only fields that are currently empty are attempted. Returns an empty
    dict when nothing matches.
    """
    if not item.is_transport:
        return {}

    found: dict[str, str] = {}
    if not item.destination_label:
        destination = first_match(DESTINATION_MATCHERS, item)
        if destination:
            found["destination_label"] = destination
    if not item.end_time:
        arrival = first_match(ARRIVAL_TIME_MATCHERS, item)
        if arrival:
            found["end_time"] = arrival
    return found
