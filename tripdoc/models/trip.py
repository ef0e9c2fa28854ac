"""Trip payload models - source itinerary, auxiliary lists, export snapshot."""

from datetime import date

from pydantic import BaseModel, Field, field_validator

from tripdoc.models.item import ItineraryItem


class ShoppingEntry(BaseModel):
    """Item on the shopping wish list."""

    name: str
    estimated_price: float | None = Field(None, ge=0)
    category: str | None = None


class BudgetEntry(BaseModel):
    """Recorded or planned expense."""

    name: str
    category: str | None = None
    cost: float = Field(0, ge=0)
    currency_code: str | None = None


class PackingEntry(BaseModel):
    """Packing checklist entry."""

    name: str
    category: str | None = None
    packed: bool = False


class EmergencyContact(BaseModel):
    """Per-trip emergency contact (embassy, insurer, hotel desk...)."""

    name: str
    phone: str | None = None
    note: str | None = None


class Lodging(BaseModel):
    """Accommodation booking; exported as an all-day calendar span."""

    name: str
    check_in: date | None = None
    check_out: date | None = None
    check_in_time: str | None = None
    check_out_time: str | None = None
    address: str | None = None
    room_number: str | None = None
    booking_url: str | None = None


AuxEntry = ShoppingEntry | BudgetEntry | PackingEntry | EmergencyContact


def parse_day(key: str) -> date:
    """Parse an itinerary date key (ISO `YYYY-MM-DD`)."""
    return date.fromisoformat(key)


class TripSource(BaseModel):
    """Trip data as handed over by the source itinerary provider."""

    name: str = "My Trip"
    city: str | None = None
    country: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    notes: str | None = None
    itinerary: dict[str, list[ItineraryItem]] = Field(default_factory=dict)
    shopping: list[ShoppingEntry] = Field(default_factory=list)
    budget: list[BudgetEntry] = Field(default_factory=list)
    packing: list[PackingEntry] = Field(default_factory=list)
    emergency: list[EmergencyContact] = Field(default_factory=list)
    lodging: list[Lodging] = Field(default_factory=list)

    @field_validator("itinerary")
    @classmethod
    def validate_dates(
        cls, itinerary: dict[str, list[ItineraryItem]]
    ) -> dict[str, list[ItineraryItem]]:
        """Itinerary keys must be ISO calendar dates."""
        for key in itinerary:
            parse_day(key)
        return itinerary

    def sorted_dates(self) -> list[str]:
        return sorted(self.itinerary)


class TripSnapshot(TripSource):
    """Detached, id-free copy of a working copy, ready for the serializers."""

    pass
