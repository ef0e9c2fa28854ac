"""Itinerary item models."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from tripdoc.models.common import HHMM_PATTERN, ItemKind, TransportMode, is_hhmm


def _normalize_time(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    # Accept "9:05" as well as "09:05"
    if len(value) == 4 and value[1] == ":":
        value = f"0{value}"
    if not is_hhmm(value):
        raise ValueError(f"expected HH:MM time, got {value!r}")
    return value


class ItemDetails(BaseModel):
    """Free-form detail bag attached to an itinerary item."""

    description: str = Field("", description="Rich-text HTML, treated as an opaque string")
    rating: float | None = Field(None, ge=0, le=5)
    tags: list[str] = Field(default_factory=list)
    location: str | None = None
    secondary_name: str | None = None
    gate: str | None = None
    platform: str | None = None
    image_ref: str | None = None
    end_time: str | None = Field(None, description="Structured arrival time from booking data")
    insight: str | None = None
    duration_minutes: int | None = Field(None, ge=0)
    flight_number: str | None = None
    seat: str | None = None
    confirmation_number: str | None = None
    booking_url: str | None = None

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, tags: list[str]) -> list[str]:
        """Tags behave as an ordered set; blanks are dropped."""
        cleaned = [tag.strip() for tag in tags if tag and tag.strip()]
        return list(dict.fromkeys(cleaned))

    @field_validator("end_time")
    @classmethod
    def validate_end_time(cls, value: str | None) -> str | None:
        return _normalize_time(value)


class ItineraryItem(BaseModel):
    """Single itinerary entry (activity or transport leg)."""

    stable_id: str | None = Field(
        None, exclude=True, description="Process-local id, never serialized"
    )
    kind: ItemKind = ItemKind.activity
    category: str = "spot"
    name: str = ""
    start_time: str | None = Field(None, pattern=HHMM_PATTERN)
    end_time: str | None = Field(None, pattern=HHMM_PATTERN)
    origin_label: str | None = None
    destination_label: str | None = None
    transport_mode: TransportMode | None = None
    cost: float = Field(0, ge=0)
    currency_code: str | None = None
    details: ItemDetails = Field(default_factory=ItemDetails)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def normalize_times(cls, value: str | None) -> str | None:
        return _normalize_time(value)

    @property
    def is_transport(self) -> bool:
        return self.kind == ItemKind.transport


class ItemPatch(BaseModel):
    """Partial update for an itinerary item.

    Only fields explicitly set are applied. ``details`` is merged key by key
    into the existing detail bag rather than replacing it.
    """

    kind: ItemKind | None = None
    category: str | None = None
    name: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    origin_label: str | None = None
    destination_label: str | None = None
    transport_mode: TransportMode | None = None
    cost: float | None = Field(None, ge=0)
    currency_code: str | None = None
    details: dict[str, Any] | None = None

    def apply_to(self, item: ItineraryItem) -> ItineraryItem:
        """Return a new item with this patch merged over ``item``.

        The stable id of ``item`` is carried over untouched.
        """
        changes = self.model_dump(exclude_unset=True)
        merged = item.model_dump()
        detail_changes = changes.pop("details", None)
        merged.update(changes)
        if detail_changes:
            merged["details"] = {**merged["details"], **detail_changes}
        updated = ItineraryItem.model_validate(merged)
        updated.stable_id = item.stable_id
        return updated
