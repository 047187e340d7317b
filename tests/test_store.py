from __future__ import annotations

from rosella.models import BranchEntry
from rosella.ui.store import ItemStore


def test_tokens_increase_monotonically() -> None:
    store = ItemStore()
    store, first = store.issue_token()
    store, second = store.issue_token()
    assert (first, second) == (1, 2)
    assert store.is_latest(2)
    assert not store.is_latest(1)


def test_with_items_replaces_snapshot_wholesale() -> None:
    store = ItemStore(items=(BranchEntry("old"),), latest_token=3)
    updated = store.with_items([BranchEntry("main", is_current=True), BranchEntry("dev")])
    assert updated.loaded
    assert updated.latest_token == 3
    assert [entry.name for entry in updated.items] == ["main", "dev"]
    assert updated.names == {"main", "dev"}
    assert store.items == (BranchEntry("old"),)


def test_current_and_lookup() -> None:
    store = ItemStore(items=(BranchEntry("dev"), BranchEntry("main", is_current=True)))
    assert store.current == BranchEntry("main", is_current=True)
    assert store.index_of("main") == 1
    assert store.index_of("gone") is None
    assert ItemStore(items=(BranchEntry("dev"),)).current is None
