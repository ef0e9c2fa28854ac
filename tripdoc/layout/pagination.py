"""Pagination engine - logical pages for the whole document.

Itinerary days are chunked into pages of at most ``items_per_page`` cards.
The first chunk of a day carries the full day header, later chunks a
continuation header with the same day number. Every other section is a
single page. Page numbers run across all sections in presentation order.
"""

from dataclasses import dataclass

from tripdoc.layout.sections import Section
from tripdoc.models.common import SectionKey
from tripdoc.models.item import ItineraryItem
from tripdoc.models.page import DayHeader, Page, PageFooter


@dataclass
class _Draft:
    section: Section
    items: tuple[ItineraryItem, ...] = ()
    day_header: DayHeader | None = None


def chunk(items: tuple[ItineraryItem, ...], size: int) -> list[tuple[ItineraryItem, ...]]:
    """Split into consecutive groups of at most ``size``."""
    return [items[start : start + size] for start in range(0, len(items), size)]


def paginate(sections: list[Section], items_per_page: int) -> list[Page]:
    """Lay the given sections out as logical pages.

    Args:
        sections: Resolved sections in presentation order
        items_per_page: Maximum itinerary cards per page

    Returns:
        Pages numbered 1..total across all sections

    Raises:
        ValueError: if ``items_per_page`` is less than 1
    """
    if items_per_page < 1:
        raise ValueError(f"items_per_page must be >= 1, got {items_per_page}")

    drafts: list[_Draft] = []
    for section in sections:
        if section.key != SectionKey.itinerary:
            drafts.append(_Draft(section=section))
            continue

        for day in section.days:
            for position, group in enumerate(chunk(day.items, items_per_page)):
                header = DayHeader(
                    day_index=day.day_index,
                    date=day.date,
                    item_count=len(day.items),
                    continuation=position > 0,
                )
                drafts.append(_Draft(section=section, items=group, day_header=header))

    total = len(drafts)
    last_itinerary = max(
        (n for n, d in enumerate(drafts) if d.section.key == SectionKey.itinerary),
        default=None,
    )

    pages: list[Page] = []
    for n, draft in enumerate(drafts):
        if n == last_itinerary and draft.day_header is not None:
            footer = PageFooter(kind="end_of_day", text=f"End of Day {draft.day_header.day_index}")
        else:
            footer = PageFooter(kind="page_number", text=f"Page {n + 1} / {total}")

        pages.append(
            Page(
                number=n + 1,
                total=total,
                section=draft.section.key,
                label=draft.section.label,
                items=draft.items,
                entries=draft.section.entries if draft.day_header is None else (),
                day_header=draft.day_header,
                is_continuation=bool(draft.day_header and draft.day_header.continuation),
                footer=footer,
            )
        )
    return pages
