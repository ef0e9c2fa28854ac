"""Tests for the working-copy store."""

from collections.abc import Callable

import pytest

from tripdoc.errors import NotFoundError
from tripdoc.models import (
    ItemPatch,
    ItineraryItem,
    SectionKey,
    ShoppingEntry,
    TripSnapshot,
    TripSource,
)
from tripdoc.store.working_copy import WorkingCopyStore


@pytest.fixture
def abc_store() -> WorkingCopyStore:
    """One day holding A, B, C."""
    source = TripSource(
        itinerary={
            "2026-04-01": [
                ItineraryItem(name="A", start_time="09:00"),
                ItineraryItem(name="B", start_time="11:00"),
                ItineraryItem(name="C", start_time="14:00"),
            ]
        }
    )
    return WorkingCopyStore(source)


def names(store: WorkingCopyStore, date: str = "2026-04-01") -> list[str]:
    return [item.name for item in store.items_for(date)]


def ids(store: WorkingCopyStore, date: str = "2026-04-01") -> list[str | None]:
    return [item.stable_id for item in store.items_for(date)]


class TestIsolation:
    """The source payload is never affected by edits."""

    def test_edits_do_not_reach_source(self, sample_source: TripSource) -> None:
        """Test that edits on the store leave the source untouched."""
        before = sample_source.model_dump()
        store = WorkingCopyStore(sample_source)
        first = store.items_for("2026-04-01")[0]

        store.update_item(first.stable_id, {"name": "Changed"})
        store.remove_item(store.items_for("2026-04-02")[0].stable_id)
        store.append_entry(SectionKey.shopping, {"name": "Tokyo Banana"})

        assert sample_source.model_dump() == before
        assert all(i.stable_id is None for i in sample_source.itinerary["2026-04-01"])

    def test_snapshot_is_detached_and_id_free(self, abc_store: WorkingCopyStore) -> None:
        """Test that snapshots carry no ids and do not follow later edits."""
        snapshot = abc_store.snapshot_for_export()
        abc_store.update_item(ids(abc_store)[0], {"name": "Z"})

        assert isinstance(snapshot, TripSnapshot)
        assert [i.name for i in snapshot.itinerary["2026-04-01"]] == ["A", "B", "C"]
        assert all(i.stable_id is None for i in snapshot.itinerary["2026-04-01"])


class TestReorder:
    """Reordering within a day."""

    def test_reorder_moves_item(self, abc_store: WorkingCopyStore) -> None:
        """Test that reorder moves an item to the target index."""
        abc_store.reorder("2026-04-01", 0, 2)

        assert names(abc_store) == ["B", "C", "A"]

    def test_reorder_same_index_is_noop(self, abc_store: WorkingCopyStore) -> None:
        """Test that reorder(i, i) leaves the day identical."""
        before = [item.model_dump() for item in abc_store.items_for("2026-04-01")]
        revision = abc_store.revision

        abc_store.reorder("2026-04-01", 1, 1)

        assert [item.model_dump() for item in abc_store.items_for("2026-04-01")] == before
        assert abc_store.revision == revision

    def test_reorder_out_of_range_is_ignored(self, abc_store: WorkingCopyStore) -> None:
        """Test that invalid indices and unknown days change nothing."""
        abc_store.reorder("2026-04-01", 0, 5)
        abc_store.reorder("2026-05-01", 0, 1)

        assert names(abc_store) == ["A", "B", "C"]
        assert abc_store.revision == 0


class TestStableIds:
    """Ids survive every edit."""

    def test_ids_invariant_under_reorder_and_update(self, abc_store: WorkingCopyStore) -> None:
        """Test that reorder and update keep each item's id."""
        by_name = {item.name: item.stable_id for item in abc_store.items_for("2026-04-01")}

        abc_store.reorder("2026-04-01", 2, 0)
        abc_store.update_item(by_name["B"], ItemPatch(start_time="12:30", details={"gate": "5"}))
        abc_store.reorder("2026-04-01", 0, 1)

        after = {item.name: item.stable_id for item in abc_store.items_for("2026-04-01")}
        assert after == by_name
        assert abc_store.get_item(by_name["B"]).start_time == "12:30"

    def test_update_merges_details(self, sample_source: TripSource) -> None:
        """Test that a details patch merges into the existing bag."""
        store = WorkingCopyStore(sample_source)
        flight = store.items_for("2026-04-01")[0]

        updated = store.update_item(flight.stable_id, {"details": {"seat": "32A"}})

        assert updated.details.seat == "32A"
        assert updated.details.gate == "23"
        assert updated.stable_id == flight.stable_id

    def test_update_unknown_item_raises_not_found(self, abc_store: WorkingCopyStore) -> None:
        """Test that updating a removed item raises NotFoundError."""
        gone = ids(abc_store)[1]
        abc_store.remove_item(gone)

        with pytest.raises(NotFoundError):
            abc_store.update_item(gone, {"name": "B2"})
        assert names(abc_store) == ["A", "C"]


class TestRemoveAndAdd:
    """Removal and additions."""

    def test_remove_then_remove_again(self, abc_store: WorkingCopyStore) -> None:
        """Test that removing B twice leaves [A, C] with the second call a no-op."""
        b_id = ids(abc_store)[1]

        assert abc_store.remove_item(b_id) is True
        assert names(abc_store) == ["A", "C"]
        revision = abc_store.revision

        assert abc_store.remove_item(b_id) is False
        assert names(abc_store) == ["A", "C"]
        assert abc_store.revision == revision

    def test_add_item_mints_fresh_id(self, abc_store: WorkingCopyStore) -> None:
        """Test that an added item gets an id not used before, even after removals."""
        removed = ids(abc_store)[2]
        abc_store.remove_item(removed)

        new_id = abc_store.add_item("2026-04-02", ItineraryItem(name="D"))

        assert new_id not in ids(abc_store)
        assert new_id != removed
        assert abc_store.dates() == ["2026-04-01", "2026-04-02"]
        assert abc_store.find(new_id) == ("2026-04-02", 0)

    def test_add_item_rejects_bad_date(self, abc_store: WorkingCopyStore) -> None:
        """Test that a non-ISO day key is refused."""
        with pytest.raises(ValueError):
            abc_store.add_item("April 1st", ItineraryItem(name="D"))


class TestAutoFill:
    """Transport auto-fill through the store."""

    def test_autofill_fills_missing_fields_once(self, sample_source: TripSource) -> None:
        """Test that auto-fill backfills arrival fields and a rerun is a no-op."""
        store = WorkingCopyStore(sample_source)

        changed = store.auto_fill_transport_fields()
        flight = store.items_for("2026-04-01")[0]

        assert changed == 1
        assert flight.destination_label == "NRT"
        assert flight.end_time == "13:45"
        assert store.auto_fill_transport_fields() == 0

    def test_autofill_never_overwrites(
        self, item_factory: Callable[..., ItineraryItem]
    ) -> None:
        """Test that filled fields are kept even when text suggests otherwise."""
        source = TripSource(
            itinerary={
                "2026-04-01": [
                    item_factory(
                        "HKG -> NRT",
                        kind="transport",
                        destination_label="Narita T2",
                        end_time="14:00",
                    )
                ]
            }
        )
        store = WorkingCopyStore(source)

        assert store.auto_fill_transport_fields() == 0
        assert store.items_for("2026-04-01")[0].destination_label == "Narita T2"


class TestAuxiliaryLists:
    """Shopping, budget, packing and emergency edits."""

    def test_append_update_remove(self, sample_source: TripSource) -> None:
        """Test the append / update / remove cycle on a list."""
        store = WorkingCopyStore(sample_source)

        index = store.append_entry(SectionKey.shopping, ShoppingEntry(name="Tokyo Banana"))
        store.update_entry(SectionKey.shopping, index, {"estimated_price": 60})

        entries = store.entries(SectionKey.shopping)
        assert [e.name for e in entries] == ["Matcha KitKat", "Tokyo Banana"]
        assert entries[1].estimated_price == 60

        assert store.remove_entry(SectionKey.shopping, 0) is True
        assert store.remove_entry(SectionKey.shopping, 9) is False
        assert [e.name for e in store.entries(SectionKey.shopping)] == ["Tokyo Banana"]

    def test_update_out_of_range_raises(self, sample_source: TripSource) -> None:
        """Test that updating a missing entry raises NotFoundError."""
        store = WorkingCopyStore(sample_source)

        with pytest.raises(NotFoundError):
            store.update_entry(SectionKey.packing, 5, {"packed": True})

    def test_itinerary_is_not_an_auxiliary_list(self, sample_source: TripSource) -> None:
        """Test that list edits refuse the itinerary section."""
        store = WorkingCopyStore(sample_source)

        with pytest.raises(ValueError):
            store.append_entry(SectionKey.itinerary, {"name": "x"})
