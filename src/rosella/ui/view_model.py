"""Render-ready projection of the aggregate state."""

from __future__ import annotations

from dataclasses import dataclass, field

from rosella.models import BranchEntry
from rosella.ui.help import help_lines
from rosella.ui.modal import (
    ConfirmChoice,
    Creating,
    ErrorOverlay,
    HelpOverlay,
    Idle,
    ModalState,
    OperationInProgress,
    Searching,
    is_confirm,
)
from rosella.ui.state import AppState
from rosella.ui.status import prompt_text, status_lines

ERROR_PANE_MAX_LINES = 20
ERROR_PANE_RESERVED_ROWS = 6
MORE_LINES_TEXT = "... and more lines"
DISMISS_TEXT = "Press any key to dismiss"


@dataclass(frozen=True)
class ModalDescription:
    kind: str
    prompt: str = ""
    draft: str = ""
    confirm_choice: ConfirmChoice | None = None


@dataclass(frozen=True)
class ViewModel:
    visible_items: tuple[BranchEntry, ...]
    selected_index_within_window: int | None
    modal: ModalDescription
    status_lines: tuple[str, str]
    actions: tuple[str, ...]
    selected_action: int
    current_branch: str | None = None
    help_lines: tuple[str, ...] = field(default_factory=tuple)
    error_lines: tuple[str, ...] = field(default_factory=tuple)


def error_pane_lines(message: str, width: int, rows: int) -> list[str]:
    """Hard-wrap ``message`` to ``width`` and cap it to what fits the screen."""
    width = max(1, width)
    wrapped: list[str] = []
    for line in message.splitlines() or [""]:
        if not line:
            wrapped.append("")
            continue
        wrapped.extend(line[start : start + width] for start in range(0, len(line), width))
    limit = max(1, min(rows - ERROR_PANE_RESERVED_ROWS, ERROR_PANE_MAX_LINES))
    if len(wrapped) > limit:
        return [*wrapped[:limit], MORE_LINES_TEXT]
    return wrapped


def describe_modal(state: AppState) -> ModalDescription:
    modal: ModalState = state.modal
    current = state.store.current
    prompt = prompt_text(modal, current.name if current else None) or ""
    if isinstance(modal, Idle):
        return ModalDescription("idle")
    if isinstance(modal, Searching):
        return ModalDescription("searching", prompt, modal.query.text)
    if isinstance(modal, Creating):
        return ModalDescription("creating", prompt, modal.draft_name)
    if isinstance(modal, OperationInProgress):
        return ModalDescription("in_progress", prompt)
    if isinstance(modal, HelpOverlay):
        return ModalDescription("help", prompt)
    if isinstance(modal, ErrorOverlay):
        return ModalDescription("error", DISMISS_TEXT)
    if is_confirm(modal):
        return ModalDescription("confirm", prompt, confirm_choice=state.confirm_choice)
    return ModalDescription("idle")


def build_view_model(state: AppState, width: int, rows: int) -> ViewModel:
    items = state.visible_items
    window = state.viewport.window(len(items))
    visible = tuple(items[index] for index in window)
    selected_within = None
    if visible:
        selected_within = state.viewport.selected_index - state.viewport.top_index

    current = state.store.current
    extra_help: tuple[str, ...] = ()
    extra_error: tuple[str, ...] = ()
    if isinstance(state.modal, HelpOverlay):
        extra_help = tuple(help_lines(state.selected_entry, state.pattern_search_key))
    elif isinstance(state.modal, ErrorOverlay):
        extra_error = tuple(error_pane_lines(state.modal.message, width, rows))

    return ViewModel(
        visible_items=visible,
        selected_index_within_window=selected_within,
        modal=describe_modal(state),
        status_lines=status_lines(state, width),
        actions=tuple(action.label for action in state.actions),
        selected_action=state.selected_action,
        current_branch=current.name if current else None,
        help_lines=extra_help,
        error_lines=extra_error,
    )
