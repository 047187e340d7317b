"""Branch snapshot and filter query models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class BranchEntry:
    name: str
    is_current: bool = False
    short_commit: str = ""
    ahead_count: int | None = None
    behind_count: int | None = None
    has_uncommitted_changes: bool = False

    @property
    def divergence(self) -> str:
        """Compact ``+ahead -behind`` marker, empty when in sync or untracked."""
        parts: list[str] = []
        if self.ahead_count:
            parts.append(f"+{self.ahead_count}")
        if self.behind_count:
            parts.append(f"-{self.behind_count}")
        return " ".join(parts)


class FilterMode(str, Enum):
    PLAIN = "plain"
    PATTERN = "pattern"


@dataclass(frozen=True)
class FilterQuery:
    mode: FilterMode = FilterMode.PLAIN
    text: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.text
