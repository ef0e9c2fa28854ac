"""Tests for stable id assignment."""

import pytest

from tripdoc.errors import StableIdCollisionError
from tripdoc.models import ItineraryItem
from tripdoc.store.identity import StableIdMinter, assign_stable_ids, collect_ids


def test_ids_are_minted_over_dates_then_position() -> None:
    """Test that ids count up over sorted dates, then position within a day."""
    itinerary = {
        "2026-04-02": [ItineraryItem(name="C")],
        "2026-04-01": [ItineraryItem(name="A"), ItineraryItem(name="B")],
    }

    tagged = assign_stable_ids(itinerary)

    assert [i.stable_id for i in tagged["2026-04-01"]] == ["item-1", "item-2"]
    assert [i.stable_id for i in tagged["2026-04-02"]] == ["item-3"]


def test_assignment_does_not_touch_input() -> None:
    """Test that the input itinerary is left without ids."""
    original = {"2026-04-01": [ItineraryItem(name="A")]}

    assign_stable_ids(original)

    assert original["2026-04-01"][0].stable_id is None


def test_existing_ids_are_preserved_and_skipped() -> None:
    """Test that pre-tagged items keep their id and minting skips it."""
    itinerary = {
        "2026-04-01": [
            ItineraryItem(name="A"),
            ItineraryItem(name="B", stable_id="item-1"),
        ]
    }

    tagged = assign_stable_ids(itinerary)

    assert [i.stable_id for i in tagged["2026-04-01"]] == ["item-2", "item-1"]


def test_assignment_is_idempotent() -> None:
    """Test that tagging an already tagged itinerary changes nothing."""
    once = assign_stable_ids({"2026-04-01": [ItineraryItem(name="A"), ItineraryItem(name="B")]})
    twice = assign_stable_ids(once)

    assert [i.stable_id for i in twice["2026-04-01"]] == [i.stable_id for i in once["2026-04-01"]]


def test_duplicate_ids_are_fatal() -> None:
    """Test that duplicate pre-existing ids raise an assertion-class error."""
    itinerary = {
        "2026-04-01": [ItineraryItem(name="A", stable_id="x")],
        "2026-04-02": [ItineraryItem(name="B", stable_id="x")],
    }

    with pytest.raises(StableIdCollisionError):
        collect_ids(itinerary)
    with pytest.raises(AssertionError):
        assign_stable_ids(itinerary)


def test_minter_claim_rejects_taken_id() -> None:
    """Test that claiming an id already handed out fails."""
    minter = StableIdMinter(set())
    minted = minter.mint()

    with pytest.raises(StableIdCollisionError):
        minter.claim(minted)


def test_stable_id_is_never_serialized() -> None:
    """Test that dumps omit the process-local id."""
    item = ItineraryItem(name="A", stable_id="item-9")

    assert "stable_id" not in item.model_dump()
    assert "stable_id" not in item.model_dump_json()
