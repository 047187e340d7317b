"""Aggregate UI state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from rosella.models import BranchEntry, FilterQuery
from rosella.ui.actions import Action, actions_for
from rosella.ui.filtering import FilterResult, apply_filter
from rosella.ui.modal import ConfirmChoice, Idle, ModalState, Searching
from rosella.ui.store import ItemStore
from rosella.ui.viewport import ViewportState, height_for_rows


@dataclass(frozen=True)
class AppState:
    store: ItemStore = field(default_factory=ItemStore)
    viewport: ViewportState = field(default_factory=ViewportState)
    modal: ModalState = field(default_factory=Idle)
    message: str = ""
    error: str = ""
    action_index: int = 0
    confirm_choice: ConfirmChoice = ConfirmChoice.NO
    loading: bool = False
    should_exit: bool = False
    pattern_search_key: str = ":"
    selection_policy: Literal["position", "identity"] = "position"

    @property
    def query(self) -> FilterQuery | None:
        if isinstance(self.modal, Searching):
            return self.modal.query
        return None

    @property
    def filtered(self) -> FilterResult:
        return apply_filter(self.store.items, self.query)

    @property
    def visible_items(self) -> tuple[BranchEntry, ...]:
        return self.filtered.items

    @property
    def selected_entry(self) -> BranchEntry | None:
        items = self.visible_items
        if not items:
            return None
        index = min(max(self.viewport.selected_index, 0), len(items) - 1)
        return items[index]

    @property
    def actions(self) -> tuple[Action, ...]:
        return actions_for(self.selected_entry)

    @property
    def selected_action(self) -> int:
        return min(self.action_index, len(self.actions) - 1)


def initial_state(
    rows: int,
    *,
    pattern_search_key: str = ":",
    selection_policy: Literal["position", "identity"] = "position",
) -> AppState:
    return AppState(
        viewport=ViewportState(height=height_for_rows(rows)),
        pattern_search_key=pattern_search_key,
        selection_policy=selection_policy,
    )
