"""Small text helpers shared by the encoders."""

import unicodedata
from typing import Any

from tripdoc.config import get_settings
from tripdoc.models.common import SectionKey
from tripdoc.models.item import ItineraryItem
from tripdoc.models.trip import BudgetEntry, EmergencyContact, PackingEntry, ShoppingEntry

NO_TIME = "--:--"


def format_money(amount: float, currency: str | None = None) -> str:
    currency = currency or get_settings().default_currency
    return f"{currency} {amount:,.2f}"


def time_label(item: ItineraryItem) -> str:
    return item.start_time or NO_TIME


def route_label(item: ItineraryItem) -> str:
    """``Origin -> Destination`` for transport legs, empty otherwise."""
    if not item.is_transport:
        return ""
    origin = item.origin_label or "?"
    destination = item.destination_label or "?"
    return f"{origin} -> {destination}"


def entry_line(section: SectionKey, entry: Any) -> str:
    """One-line rendering of an auxiliary list entry."""
    if isinstance(entry, ShoppingEntry):
        price = format_money(entry.estimated_price) if entry.estimated_price is not None else "N/A"
        return f"{entry.name} ({price})"
    if isinstance(entry, BudgetEntry):
        category = f" [{entry.category}]" if entry.category else ""
        return f"{entry.name}{category}: {format_money(entry.cost, entry.currency_code)}"
    if isinstance(entry, PackingEntry):
        mark = "x" if entry.packed else " "
        return f"[{mark}] {entry.name}"
    if isinstance(entry, EmergencyContact):
        parts = [entry.name]
        if entry.phone:
            parts.append(entry.phone)
        if entry.note:
            parts.append(entry.note)
        return " - ".join(parts)
    raise TypeError(f"unexpected {section.value} entry: {type(entry).__name__}")


def latin1_safe(text: str) -> str:
    """Fold text into the latin-1 range understood by the core PDF fonts."""
    normalized = unicodedata.normalize("NFKC", text)
    return normalized.encode("latin-1", "replace").decode("latin-1")
