"""Tests for the pagination engine."""

import math
from collections.abc import Callable

import pytest

from tripdoc.layout.pagination import chunk, paginate
from tripdoc.layout.sections import resolve_sections
from tripdoc.models import ItineraryItem, Scope, SectionKey, TripSource


def itinerary_pages(trip: TripSource, items_per_page: int) -> list:
    return paginate(resolve_sections(Scope.of("itinerary"), trip), items_per_page)


def test_chunk_sizes() -> None:
    """Test that chunking keeps order and caps group size."""
    assert chunk((1, 2, 3, 4, 5), 2) == [(1, 2), (3, 4), (5,)]
    assert chunk((), 3) == []


@pytest.mark.parametrize("count,size", [(1, 4), (4, 4), (7, 4), (7, 3), (9, 2), (8, 8)])
def test_day_atomicity(
    make_items: Callable[..., list[ItineraryItem]], count: int, size: int
) -> None:
    """Test that a day of M items gives ceil(M/N) pages, full except the last."""
    trip = TripSource(itinerary={"2026-04-01": make_items(count)})

    pages = itinerary_pages(trip, size)

    assert len(pages) == math.ceil(count / size)
    assert all(page.size == size for page in pages[:-1])
    assert 1 <= pages[-1].size <= size
    assert pages[0].day_header.continuation is False
    assert all(page.day_header.continuation for page in pages[1:])
    assert all(page.is_continuation for page in pages[1:])
    flattened = [item.name for page in pages for item in page.items]
    assert flattened == [item.name for item in trip.itinerary["2026-04-01"]]


def test_density_change_repaginates(make_items: Callable[..., list[ItineraryItem]]) -> None:
    """Test that 7 items give 4+3 pages at density 4 and 3+3+1 at density 3."""
    trip = TripSource(itinerary={"2026-04-01": make_items(7)})

    at_four = itinerary_pages(trip, 4)
    at_three = itinerary_pages(trip, 3)

    assert [p.size for p in at_four] == [4, 3]
    assert [p.size for p in at_three] == [3, 3, 1]
    assert at_three[0].day_header == at_four[0].day_header
    assert at_three[0].day_header.item_count == 7
    assert [p.day_header.continuation for p in at_three] == [False, True, True]


def test_pages_never_mix_days(make_items: Callable[..., list[ItineraryItem]]) -> None:
    """Test that a page holds items of one day only."""
    trip = TripSource(
        itinerary={"2026-04-01": make_items(3, "A"), "2026-04-02": make_items(2, "B")}
    )

    pages = itinerary_pages(trip, 4)

    assert [(p.day_header.date, p.size) for p in pages] == [("2026-04-01", 3), ("2026-04-02", 2)]


def test_empty_day_has_no_page(make_items: Callable[..., list[ItineraryItem]]) -> None:
    """Test that an empty day produces no page but still counts as a day."""
    trip = TripSource(itinerary={"2026-04-01": [], "2026-04-02": make_items(1)})

    pages = itinerary_pages(trip, 4)

    assert len(pages) == 1
    assert pages[0].day_header.day_index == 2


def test_numbering_and_footers(sample_source: TripSource) -> None:
    """Test global numbering, aux pages as single pages, and footer kinds."""
    pages = paginate(resolve_sections(Scope.all(), sample_source), 2)

    # day 1: 3 items -> 2 pages, day 2: 2 items -> 1 page, then 4 aux sections
    assert len(pages) == 7
    assert [p.number for p in pages] == list(range(1, 8))
    assert all(p.total == 7 for p in pages)
    assert [p.section for p in pages[3:]] == [
        SectionKey.shopping,
        SectionKey.budget,
        SectionKey.emergency,
        SectionKey.packing,
    ]
    assert pages[2].footer.kind == "end_of_day"
    assert pages[2].footer.text == "End of Day 2"
    assert pages[0].footer.text == "Page 1 / 7"
    assert pages[-1].footer.text == "Page 7 / 7"
    assert pages[-1].size == 2


def test_invalid_density_raises(sample_source: TripSource) -> None:
    """Test that items_per_page below 1 is rejected."""
    with pytest.raises(ValueError):
        paginate(resolve_sections(Scope.all(), sample_source), 0)


def test_pagination_is_pure(sample_source: TripSource) -> None:
    """Test that repeated runs over the same input give equal pages."""
    sections = resolve_sections(Scope.all(), sample_source)

    assert paginate(sections, 3) == paginate(sections, 3)
