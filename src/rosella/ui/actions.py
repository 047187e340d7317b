"""Contextual branch actions, shortcuts and guards."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rosella.models import BranchEntry


class ActionKind(str, Enum):
    CHECKOUT = "checkout"
    CREATE = "create"
    DELETE = "delete"
    MERGE = "merge"
    REBASE = "rebase"
    PULL = "pull"
    PUSH = "push"
    FETCH = "fetch"


@dataclass(frozen=True)
class Action:
    kind: ActionKind
    label: str


CHECKOUT = Action(ActionKind.CHECKOUT, "Checkout")
CREATE = Action(ActionKind.CREATE, "New branch")
DELETE = Action(ActionKind.DELETE, "Delete")
MERGE = Action(ActionKind.MERGE, "Merge")
REBASE = Action(ActionKind.REBASE, "Rebase")
PULL = Action(ActionKind.PULL, "Pull")
PUSH = Action(ActionKind.PUSH, "Push")
FETCH = Action(ActionKind.FETCH, "Fetch")

CURRENT_BRANCH_ACTIONS = (CREATE, PULL, PUSH, FETCH)
OTHER_BRANCH_ACTIONS = (CHECKOUT, CREATE, DELETE, MERGE, REBASE, FETCH)
EMPTY_LIST_ACTIONS = (FETCH,)

LETTER_SHORTCUTS = {
    "n": ActionKind.CREATE,
    "u": ActionKind.PULL,
    "p": ActionKind.PUSH,
    "f": ActionKind.FETCH,
    "m": ActionKind.MERGE,
    "r": ActionKind.REBASE,
}

NO_SELECTION_MESSAGE = "No branch selected"
ALREADY_CURRENT_MESSAGE = "Already on this branch"

_CURRENT_BRANCH_GUARDS = {
    ActionKind.DELETE: "Cannot delete the currently checked out branch",
    ActionKind.MERGE: "Cannot merge current branch into itself",
    ActionKind.REBASE: "Cannot rebase current branch onto itself",
}

_OTHER_BRANCH_GUARDS = {
    ActionKind.PULL: "Can only pull on current branch",
    ActionKind.PUSH: "Can only push from current branch",
}

_NEEDS_SELECTION = frozenset(
    {
        ActionKind.CHECKOUT,
        ActionKind.DELETE,
        ActionKind.MERGE,
        ActionKind.REBASE,
        ActionKind.PULL,
        ActionKind.PUSH,
    }
)


def actions_for(entry: BranchEntry | None) -> tuple[Action, ...]:
    if entry is None:
        return EMPTY_LIST_ACTIONS
    if entry.is_current:
        return CURRENT_BRANCH_ACTIONS
    return OTHER_BRANCH_ACTIONS


def guard_message(kind: ActionKind, entry: BranchEntry | None) -> str | None:
    """Return why ``kind`` may not run against ``entry``, or None when allowed."""
    if entry is None:
        return NO_SELECTION_MESSAGE if kind in _NEEDS_SELECTION else None
    if entry.is_current:
        return _CURRENT_BRANCH_GUARDS.get(kind)
    return _OTHER_BRANCH_GUARDS.get(kind)
