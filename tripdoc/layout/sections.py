"""Scope resolution - which sections a document contains, in which order."""

from dataclasses import dataclass, field

from tripdoc.config import get_settings
from tripdoc.models.common import SECTION_LABELS, SECTION_ORDER, SectionKey
from tripdoc.models.item import ItineraryItem
from tripdoc.models.scope import Scope
from tripdoc.models.trip import AuxEntry, EmergencyContact, TripSource


@dataclass(frozen=True)
class DayBlock:
    """One itinerary date with its ordinal day number."""

    day_index: int
    date: str
    items: tuple[ItineraryItem, ...]


@dataclass(frozen=True)
class Section:
    """A section selected for rendering."""

    key: SectionKey
    label: str
    days: tuple[DayBlock, ...] = ()
    entries: tuple[AuxEntry, ...] = field(default=())

    @property
    def entry_count(self) -> int:
        if self.key == SectionKey.itinerary:
            return sum(len(day.items) for day in self.days)
        return len(self.entries)


def build_days(trip: TripSource) -> tuple[DayBlock, ...]:
    """Days in date order. Day numbers count every date, empty ones included."""
    return tuple(
        DayBlock(day_index=position, date=date, items=tuple(trip.itinerary[date]))
        for position, date in enumerate(trip.sorted_dates(), start=1)
    )


def default_hotline_contacts() -> list[EmergencyContact]:
    """Universal hotline numbers printed with every emergency section."""
    contacts = []
    for line in get_settings().default_hotlines:
        name, _, phone = line.rpartition(":")
        contacts.append(EmergencyContact(name=name.strip() or line, phone=phone.strip() or None))
    return contacts


def resolve_sections(scope: Scope, trip: TripSource) -> list[Section]:
    """Return the sections to render, in the fixed presentation order.

    A section is included when the scope selects it and it has at least one
    entry. Emergency is the exception: when selected it is always included,
    since it carries the universal hotlines even without trip contacts.
    """
    sections: list[Section] = []
    for key in SECTION_ORDER:
        if not scope.contains(key):
            continue

        if key == SectionKey.itinerary:
            section = Section(key=key, label=SECTION_LABELS[key], days=build_days(trip))
        elif key == SectionKey.emergency:
            entries = [*trip.emergency, *default_hotline_contacts()]
            section = Section(key=key, label=SECTION_LABELS[key], entries=tuple(entries))
        else:
            section = Section(
                key=key, label=SECTION_LABELS[key], entries=tuple(getattr(trip, key.value))
            )

        if section.entry_count == 0 and key != SectionKey.emergency:
            continue
        sections.append(section)
    return sections
