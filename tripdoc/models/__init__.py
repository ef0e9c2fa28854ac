"""Models package - re-exports for convenience."""

from tripdoc.models.common import (
    SECTION_LABELS,
    SECTION_ORDER,
    ExportFormat,
    ItemKind,
    SectionKey,
    TemplateId,
    TransportMode,
)
from tripdoc.models.item import ItemDetails, ItemPatch, ItineraryItem
from tripdoc.models.page import DayHeader, Page, PageFooter
from tripdoc.models.scope import Scope
from tripdoc.models.trip import (
    BudgetEntry,
    EmergencyContact,
    Lodging,
    PackingEntry,
    ShoppingEntry,
    TripSnapshot,
    TripSource,
)

__all__ = [
    # Common
    "ItemKind",
    "TransportMode",
    "SectionKey",
    "SECTION_ORDER",
    "SECTION_LABELS",
    "ExportFormat",
    "TemplateId",
    # Items
    "ItineraryItem",
    "ItemDetails",
    "ItemPatch",
    # Trip
    "TripSource",
    "TripSnapshot",
    "ShoppingEntry",
    "BudgetEntry",
    "PackingEntry",
    "EmergencyContact",
    "Lodging",
    # Scope / pages
    "Scope",
    "Page",
    "DayHeader",
    "PageFooter",
]
