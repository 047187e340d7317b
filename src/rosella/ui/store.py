"""Branch snapshot store with request-token bookkeeping."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace

from rosella.models import BranchEntry


@dataclass(frozen=True)
class ItemStore:
    """Immutable branch snapshot, replaced wholesale on every accepted reload.

    ``latest_token`` is the token of the most recently issued reload. Only a
    completion carrying that token may replace the snapshot; older completions
    are stale and dropped.
    """

    items: tuple[BranchEntry, ...] = ()
    latest_token: int = 0
    loaded: bool = False

    def issue_token(self) -> tuple[ItemStore, int]:
        token = self.latest_token + 1
        return replace(self, latest_token=token), token

    def is_latest(self, token: int) -> bool:
        return token == self.latest_token

    def with_items(self, items: Iterable[BranchEntry]) -> ItemStore:
        return replace(self, items=tuple(items), loaded=True)

    @property
    def names(self) -> set[str]:
        return {entry.name for entry in self.items}

    @property
    def current(self) -> BranchEntry | None:
        return next((entry for entry in self.items if entry.is_current), None)

    def index_of(self, name: str) -> int | None:
        for index, entry in enumerate(self.items):
            if entry.name == name:
                return index
        return None
