from __future__ import annotations

from pathlib import Path

import pytest

from rosella.models import BranchEntry
from rosella.ui.state import AppState, initial_state
from rosella.ui.store import ItemStore
from rosella.ui.viewport import ViewportState


@pytest.hookimpl(trylast=True)
def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    del config
    for item in items:
        path = Path(str(getattr(item, "path", item.fspath)))

        if "integration" in path.parts:
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.slow)

        if "property" in path.parts:
            item.add_marker(pytest.mark.slow)


@pytest.fixture
def three_branches() -> tuple[BranchEntry, ...]:
    return (
        BranchEntry("main", is_current=True, short_commit="a1b2c3d"),
        BranchEntry("feature-1", short_commit="b2c3d4e"),
        BranchEntry("feature-2", short_commit="c3d4e5f"),
    )


@pytest.fixture
def loaded_state():
    def _build(
        items: tuple[BranchEntry, ...] | list[BranchEntry],
        *,
        rows: int = 20,
        selected: int = 0,
        **overrides: object,
    ) -> AppState:
        state = initial_state(rows)
        store = ItemStore(items=tuple(items), latest_token=1, loaded=True)
        viewport = ViewportState(selected, 0, state.viewport.height)
        return AppState(store=store, viewport=viewport, **overrides)

    return _build
