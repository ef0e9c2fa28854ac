"""Page models - derived, read-only pagination output."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from tripdoc.models.common import SectionKey
from tripdoc.models.item import ItineraryItem


class DayHeader(BaseModel):
    """Header shown at the top of an itinerary page."""

    model_config = ConfigDict(frozen=True)

    day_index: int
    date: str
    item_count: int
    continuation: bool = False


class PageFooter(BaseModel):
    """Running footer of a page."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["page_number", "end_of_day"]
    text: str


class Page(BaseModel):
    """One logical page of the paginated document."""

    model_config = ConfigDict(frozen=True)

    number: int
    total: int
    section: SectionKey
    label: str
    items: tuple[ItineraryItem, ...] = ()
    entries: tuple[Any, ...] = ()
    day_header: DayHeader | None = None
    is_continuation: bool = False
    footer: PageFooter

    @property
    def size(self) -> int:
        return len(self.items) if self.section == SectionKey.itinerary else len(self.entries)
