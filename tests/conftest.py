"""Shared pytest fixtures for all test suites."""

import base64
from collections.abc import Callable, Iterator

import pytest

from tripdoc.models import (
    BudgetEntry,
    EmergencyContact,
    ItineraryItem,
    Lodging,
    PackingEntry,
    ShoppingEntry,
    TripSource,
)
from tripdoc.store.sessions import InMemorySessionRepository

PNG_1X1_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


@pytest.fixture
def png_bytes() -> bytes:
    """A valid 1x1 PNG."""
    return base64.b64decode(PNG_1X1_BASE64)


@pytest.fixture
def make_items() -> Callable[..., list[ItineraryItem]]:
    """Build ``count`` simple activities named ``<prefix> 1..count``."""

    def _make(count: int, prefix: str = "Stop") -> list[ItineraryItem]:
        return [
            ItineraryItem(name=f"{prefix} {n}", start_time=f"{8 + n % 12:02d}:00")
            for n in range(1, count + 1)
        ]

    return _make


@pytest.fixture
def item_factory() -> Callable[..., ItineraryItem]:
    """Factory for itinerary items with sensible defaults."""

    def _make(name: str = "Senso-ji Temple", **kwargs: object) -> ItineraryItem:
        return ItineraryItem(name=name, **kwargs)

    return _make


@pytest.fixture
def sample_source() -> TripSource:
    """Three-day Tokyo trip with every auxiliary list filled."""
    return TripSource(
        name="Tokyo Spring",
        city="Tokyo",
        country="Japan",
        start_date="2026-04-01",
        end_date="2026-04-03",
        itinerary={
            "2026-04-01": [
                ItineraryItem(
                    kind="transport",
                    category="transport",
                    name="HKG -> NRT",
                    start_time="08:30",
                    transport_mode="flight",
                    origin_label="HKG",
                    details={"description": "<p>Land 13:45 arrival, Terminal 2</p>", "gate": "23"},
                ),
                ItineraryItem(name="Hotel check-in", start_time="15:00", category="hotel"),
                ItineraryItem(
                    name="Ichiran Ramen",
                    start_time="19:00",
                    category="food",
                    cost=1200,
                    currency_code="JPY",
                    details={"rating": 4.5, "tags": ["ramen", "late-night", "ramen"]},
                ),
            ],
            "2026-04-02": [
                ItineraryItem(name="Senso-ji Temple", start_time="09:00"),
                ItineraryItem(name="Tokyo Skytree", start_time="13:00", end_time="15:00"),
            ],
            "2026-04-03": [],
        },
        shopping=[ShoppingEntry(name="Matcha KitKat", estimated_price=45)],
        budget=[BudgetEntry(name="JR Pass", category="transport", cost=2100, currency_code="HKD")],
        packing=[PackingEntry(name="Passport", packed=True), PackingEntry(name="Adapter")],
        emergency=[EmergencyContact(name="HK Immigration hotline", phone="+852 1868")],
        lodging=[
            Lodging(
                name="Shinjuku Granbell",
                check_in="2026-04-01",
                check_out="2026-04-03",
                address="2-14-5 Kabukicho, Tokyo",
            )
        ],
    )


@pytest.fixture
def repository() -> Iterator[InMemorySessionRepository]:
    """Fresh session repository wired into the app for one test."""
    from tripdoc.main import app
    from tripdoc.store.sessions import get_session_repository

    repo = InMemorySessionRepository()
    app.dependency_overrides[get_session_repository] = lambda: repo
    yield repo
    app.dependency_overrides.pop(get_session_repository, None)
