"""Working-copy store - edit-until-committed clone of a trip.

The store is created fresh every time the export surface opens. All edits
act on the store only; the source payload handed in is never touched, and
``snapshot_for_export`` hands out detached copies.
"""

import logging
from typing import Any

from pydantic import BaseModel

from tripdoc.errors import NotFoundError
from tripdoc.extract.transport import extract_transport_fields
from tripdoc.models.common import SectionKey
from tripdoc.models.item import ItemPatch, ItineraryItem
from tripdoc.models.trip import (
    BudgetEntry,
    EmergencyContact,
    PackingEntry,
    ShoppingEntry,
    TripSnapshot,
    TripSource,
    parse_day,
)
from tripdoc.store.identity import StableIdMinter, assign_stable_ids, collect_ids

logger = logging.getLogger(__name__)

ENTRY_TYPES: dict[SectionKey, type[BaseModel]] = {
    SectionKey.shopping: ShoppingEntry,
    SectionKey.budget: BudgetEntry,
    SectionKey.packing: PackingEntry,
    SectionKey.emergency: EmergencyContact,
}


class WorkingCopyStore:
    """Mutable working copy of one trip.

    Items are addressed by stable id; their day is whichever date bucket
    currently holds them, looked up on demand.
    """

    def __init__(self, source: TripSource) -> None:
        trip = source.model_copy(deep=True)
        trip.itinerary = assign_stable_ids(trip.itinerary)
        self._trip = trip
        self._minter = StableIdMinter(collect_ids(trip.itinerary))
        self.revision = 0

    # Read access

    @property
    def trip(self) -> TripSource:
        """Live trip state. Treat as read-only; edit through the store."""
        return self._trip

    def dates(self) -> list[str]:
        return sorted(self._trip.itinerary)

    def items_for(self, date: str) -> tuple[ItineraryItem, ...]:
        return tuple(self._trip.itinerary.get(date, ()))

    def find(self, stable_id: str) -> tuple[str, int] | None:
        """Locate an item as ``(date, index)``."""
        for date, items in self._trip.itinerary.items():
            for index, item in enumerate(items):
                if item.stable_id == stable_id:
                    return date, index
        return None

    def get_item(self, stable_id: str) -> ItineraryItem:
        location = self.find(stable_id)
        if location is None:
            raise NotFoundError(f"item {stable_id!r} not found")
        date, index = location
        return self._trip.itinerary[date][index]

    def entries(self, section: SectionKey) -> list[BaseModel]:
        return [entry.model_copy() for entry in self._entry_list(section)]

    # Itinerary edits

    def reorder(self, date: str, from_index: int, to_index: int) -> None:
        """Move one item within its day.

        Equal or out-of-range indices are ignored.
        """
        items = self._trip.itinerary.get(date)
        if items is None or from_index == to_index:
            return
        if not (0 <= from_index < len(items) and 0 <= to_index < len(items)):
            logger.debug("Ignoring out-of-range reorder on %s: %s -> %s", date, from_index, to_index)
            return
        moved = items.pop(from_index)
        items.insert(to_index, moved)
        self._touch()
        logger.debug("Reordered %s on %s: %s -> %s", moved.stable_id, date, from_index, to_index)

    def update_item(self, stable_id: str, patch: ItemPatch | dict[str, Any]) -> ItineraryItem:
        """Merge ``patch`` into the item, keeping its stable id.

        Raises:
            NotFoundError: if no day holds an item with this id
        """
        location = self.find(stable_id)
        if location is None:
            logger.info("Update for unknown item %s", stable_id)
            raise NotFoundError(f"item {stable_id!r} not found")
        if isinstance(patch, dict):
            patch = ItemPatch.model_validate(patch)

        date, index = location
        updated = patch.apply_to(self._trip.itinerary[date][index])
        self._trip.itinerary[date][index] = updated
        self._touch()
        logger.debug("Updated %s on %s", stable_id, date)
        return updated

    def remove_item(self, stable_id: str) -> bool:
        """Remove the item if present. Returns False when it was already gone."""
        location = self.find(stable_id)
        if location is None:
            logger.debug("Remove for absent item %s ignored", stable_id)
            return False
        date, index = location
        del self._trip.itinerary[date][index]
        self._touch()
        logger.debug("Removed %s from %s", stable_id, date)
        return True

    def add_item(self, date: str, item: ItineraryItem) -> str:
        """Append a new item to ``date`` and return its stable id."""
        parse_day(date)
        item = item.model_copy(deep=True)
        if item.stable_id is None:
            item.stable_id = self._minter.mint()
        else:
            self._minter.claim(item.stable_id)
        self._trip.itinerary.setdefault(date, []).append(item)
        self._touch()
        logger.debug("Added %s to %s", item.stable_id, date)
        return item.stable_id

    def auto_fill_transport_fields(self) -> int:
        """Backfill missing arrival fields on every transport item.

        Filled fields are never overwritten, so a second run is a no-op.
        Returns the number of items changed.
        """
        changed = 0
        for date in self.dates():
            items = self._trip.itinerary[date]
            for index, item in enumerate(items):
                if not item.is_transport:
                    continue
                found = extract_transport_fields(item)
                if not found:
                    continue
                items[index] = ItemPatch.model_validate(found).apply_to(item)
                changed += 1
        if changed:
            self._touch()
        logger.info("Auto-fill updated %d transport item(s)", changed)
        return changed

    # Auxiliary list edits

    def append_entry(self, section: SectionKey, entry: BaseModel | dict[str, Any]) -> int:
        """Append to an auxiliary list. Returns the new entry's index."""
        entries = self._entry_list(section)
        entries.append(ENTRY_TYPES[section].model_validate(_as_dict(entry)))
        self._touch()
        return len(entries) - 1

    def update_entry(
        self, section: SectionKey, index: int, patch: BaseModel | dict[str, Any]
    ) -> BaseModel:
        """Merge ``patch`` into the entry at ``index``.

        Raises:
            NotFoundError: if ``index`` is out of range
        """
        entries = self._entry_list(section)
        if not 0 <= index < len(entries):
            raise NotFoundError(f"{section.value} entry {index} not found")
        merged = {**entries[index].model_dump(), **_as_dict(patch, exclude_unset=True)}
        entries[index] = ENTRY_TYPES[section].model_validate(merged)
        self._touch()
        return entries[index]

    def remove_entry(self, section: SectionKey, index: int) -> bool:
        """Remove the entry at ``index``; out-of-range indices are ignored."""
        entries = self._entry_list(section)
        if not 0 <= index < len(entries):
            return False
        del entries[index]
        self._touch()
        return True

    # Export

    def snapshot_for_export(self) -> TripSnapshot:
        """Detached deep copy with internal ids stripped."""
        # stable_id is excluded from model_dump, so the rebuilt copy carries none
        return TripSnapshot.model_validate(self._trip.model_dump())

    # Internals

    def _entry_list(self, section: SectionKey) -> list[Any]:
        section = SectionKey(section)
        if section not in ENTRY_TYPES:
            raise ValueError(f"{section.value} is not an auxiliary list")
        return getattr(self._trip, section.value)

    def _touch(self) -> None:
        self.revision += 1


def _as_dict(value: BaseModel | dict[str, Any], exclude_unset: bool = False) -> dict[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_unset=exclude_unset)
    return dict(value)
