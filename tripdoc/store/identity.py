"""Stable identity for itinerary items."""

from tripdoc.errors import StableIdCollisionError
from tripdoc.models.item import ItineraryItem

ID_PREFIX = "item-"


def collect_ids(itinerary: dict[str, list[ItineraryItem]]) -> set[str]:
    """Return every stable id present, failing on duplicates."""
    seen: set[str] = set()
    for date in sorted(itinerary):
        for item in itinerary[date]:
            if item.stable_id is None:
                continue
            if item.stable_id in seen:
                raise StableIdCollisionError(f"duplicate stable id {item.stable_id!r} on {date}")
            seen.add(item.stable_id)
    return seen


class StableIdMinter:
    """Hands out ``item-<n>`` ids that are not yet taken."""

    def __init__(self, taken: set[str]) -> None:
        self._taken = taken
        self._counter = 0

    def mint(self) -> str:
        while True:
            self._counter += 1
            candidate = f"{ID_PREFIX}{self._counter}"
            if candidate not in self._taken:
                self._taken.add(candidate)
                return candidate

    def claim(self, stable_id: str) -> None:
        """Reserve an externally supplied id."""
        if stable_id in self._taken:
            raise StableIdCollisionError(f"stable id {stable_id!r} already in use")
        self._taken.add(stable_id)


def assign_stable_ids(itinerary: dict[str, list[ItineraryItem]]) -> dict[str, list[ItineraryItem]]:
    """Return a copy of ``itinerary`` where every item carries a stable id.

    Deterministic: ids are minted over dates ascending, then position.
    Ids already present are preserved, so calling this on an already tagged
    itinerary returns an equal structure.

    Raises:
        StableIdCollisionError: if two items already share an id
    """
    minter = StableIdMinter(collect_ids(itinerary))

    tagged: dict[str, list[ItineraryItem]] = {}
    for date in sorted(itinerary):
        day: list[ItineraryItem] = []
        for item in itinerary[date]:
            copy = item.model_copy(deep=True)
            if copy.stable_id is None:
                copy.stable_id = minter.mint()
            day.append(copy)
        tagged[date] = day
    return tagged
