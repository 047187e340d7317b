"""Modal workflow states and their key tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from rosella.models import FilterMode, FilterQuery
from rosella.ui.keys import Key, KeyEvent


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Searching:
    query: FilterQuery = field(default_factory=FilterQuery)
    validation_error: str | None = None


@dataclass(frozen=True)
class Creating:
    draft_name: str = ""
    base_branch_name: str | None = None
    validation_error: str | None = None


@dataclass(frozen=True)
class ConfirmDelete:
    target: str


@dataclass(frozen=True)
class ConfirmForceDelete:
    target: str


@dataclass(frozen=True)
class ConfirmCheckoutNew:
    created_name: str


@dataclass(frozen=True)
class ConfirmMerge:
    target: str


@dataclass(frozen=True)
class ConfirmRebase:
    target: str


@dataclass(frozen=True)
class ConfirmPush:
    needs_upstream: bool = False


@dataclass(frozen=True)
class ConfirmExit:
    pass


@dataclass(frozen=True)
class OperationInProgress:
    label: str


@dataclass(frozen=True)
class HelpOverlay:
    pass


@dataclass(frozen=True)
class ErrorOverlay:
    message: str


ModalState = Union[
    Idle,
    Searching,
    Creating,
    ConfirmDelete,
    ConfirmForceDelete,
    ConfirmCheckoutNew,
    ConfirmMerge,
    ConfirmRebase,
    ConfirmPush,
    ConfirmExit,
    OperationInProgress,
    HelpOverlay,
    ErrorOverlay,
]

ConfirmModal = Union[
    ConfirmDelete,
    ConfirmForceDelete,
    ConfirmCheckoutNew,
    ConfirmMerge,
    ConfirmRebase,
    ConfirmPush,
    ConfirmExit,
]

CONFIRM_MODALS = (
    ConfirmDelete,
    ConfirmForceDelete,
    ConfirmCheckoutNew,
    ConfirmMerge,
    ConfirmRebase,
    ConfirmPush,
    ConfirmExit,
)


def is_confirm(modal: ModalState) -> bool:
    return isinstance(modal, CONFIRM_MODALS)


def target_branch(modal: ModalState) -> str | None:
    """Branch a prompt acts on, if any; such prompts cannot outlive the branch."""
    if isinstance(modal, (ConfirmDelete, ConfirmForceDelete, ConfirmMerge, ConfirmRebase)):
        return modal.target
    if isinstance(modal, ConfirmCheckoutNew):
        return modal.created_name
    return None


def open_search(mode: FilterMode) -> Searching:
    return Searching(FilterQuery(mode=mode))


class ConfirmChoice(str, Enum):
    YES = "yes"
    NO = "no"

    def toggled(self) -> ConfirmChoice:
        return ConfirmChoice.NO if self is ConfirmChoice.YES else ConfirmChoice.YES


class ConfirmInput(Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    TOGGLE = "toggle"
    IGNORE = "ignore"


_CONFIRM_CHAR_KEYS = {
    "y": ConfirmInput.ACCEPT,
    "Y": ConfirmInput.ACCEPT,
    "n": ConfirmInput.REJECT,
    "N": ConfirmInput.REJECT,
}

_CONFIRM_KEYS = {
    Key.ESCAPE: ConfirmInput.REJECT,
    Key.LEFT: ConfirmInput.TOGGLE,
    Key.RIGHT: ConfirmInput.TOGGLE,
}


def classify_confirm_key(event: KeyEvent, choice: ConfirmChoice) -> ConfirmInput:
    if event.key is Key.CHAR:
        return _CONFIRM_CHAR_KEYS.get(event.char, ConfirmInput.IGNORE)
    if event.key is Key.ENTER:
        return ConfirmInput.ACCEPT if choice is ConfirmChoice.YES else ConfirmInput.REJECT
    return _CONFIRM_KEYS.get(event.key, ConfirmInput.IGNORE)


HELP_CLOSE_CHARS = frozenset({"h", "q"})


def closes_help(event: KeyEvent) -> bool:
    return event.key is Key.ESCAPE or (event.key is Key.CHAR and event.char in HELP_CLOSE_CHARS)


class TextInput(Enum):
    APPEND = "append"
    ERASE = "erase"
    LEAVE = "leave"
    SUBMIT = "submit"
    NAVIGATE = "navigate"
    IGNORE = "ignore"


_TEXT_KEYS = {
    Key.ESCAPE: TextInput.LEAVE,
    Key.ENTER: TextInput.SUBMIT,
    Key.UP: TextInput.NAVIGATE,
    Key.DOWN: TextInput.NAVIGATE,
    Key.PAGE_UP: TextInput.NAVIGATE,
    Key.PAGE_DOWN: TextInput.NAVIGATE,
}


def classify_text_key(event: KeyEvent, draft: str) -> TextInput:
    """Key table shared by the search and create text prompts.

    Backspace or Delete on an empty draft leaves the prompt.
    """
    if event.is_printable:
        return TextInput.APPEND
    if event.key in (Key.BACKSPACE, Key.DELETE):
        return TextInput.ERASE if draft else TextInput.LEAVE
    return _TEXT_KEYS.get(event.key, TextInput.IGNORE)
