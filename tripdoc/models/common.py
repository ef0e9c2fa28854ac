"""Common types and enums shared across all models."""

import re
from enum import Enum

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
_HHMM_RE = re.compile(HHMM_PATTERN)


class ItemKind(str, Enum):
    """Itinerary entry variant."""

    activity = "activity"
    transport = "transport"


class TransportMode(str, Enum):
    """Transport leg sub-type."""

    flight = "flight"
    train = "train"
    drive = "drive"
    walk = "walk"
    border_crossing = "border_crossing"


class SectionKey(str, Enum):
    """Document section identifier.

    Declaration order is the fixed presentation order of the document.
    """

    itinerary = "itinerary"
    shopping = "shopping"
    budget = "budget"
    emergency = "emergency"
    packing = "packing"


SECTION_ORDER: tuple[SectionKey, ...] = tuple(SectionKey)

SECTION_LABELS: dict[SectionKey, str] = {
    SectionKey.itinerary: "Itinerary",
    SectionKey.shopping: "Shopping List",
    SectionKey.budget: "Budget",
    SectionKey.emergency: "Emergency Info",
    SectionKey.packing: "Packing List",
}


class ExportFormat(str, Enum):
    """Output encoding."""

    json = "json"
    text = "text"
    ical = "ical"
    pdf = "pdf"


class TemplateId(str, Enum):
    """Visual variant of the paginated document."""

    modern = "modern"
    classic = "classic"
    glass = "glass"
    compact = "compact"
    retro = "retro"
    vibrant = "vibrant"


def is_hhmm(value: str) -> bool:
    """Return True for a valid 24h ``HH:MM`` string."""
    return bool(_HHMM_RE.match(value))
