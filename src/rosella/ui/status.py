"""Status line text: prompt, error, message or contextual hints."""

from __future__ import annotations

from rosella.models import FilterMode
from rosella.ui.modal import (
    ConfirmCheckoutNew,
    ConfirmDelete,
    ConfirmExit,
    ConfirmForceDelete,
    ConfirmMerge,
    ConfirmPush,
    ConfirmRebase,
    Creating,
    HelpOverlay,
    ModalState,
    OperationInProgress,
    Searching,
)
from rosella.ui.state import AppState

LOADING_TEXT = "Loading branches..."
EMPTY_HINTS = "No branches | f: Fetch | h: Help"
HELP_HINT = "h: Help"
CLOSE_HELP_TEXT = "Press h, q, or Esc to close help"
SEPARATOR = " | "
WRAP_LOOKBACK = 20
ELLIPSIS = "..."


def _with_error(text: str, error: str | None) -> str:
    return f"{text} - Error: {error}" if error else text


def prompt_text(modal: ModalState, current_name: str | None = None) -> str | None:
    """Prompt for the active modal, or None when it has no status prompt."""
    if isinstance(modal, Searching):
        label = "Regex search" if modal.query.mode is FilterMode.PATTERN else "Fuzzy search"
        return _with_error(f"{label}: {modal.query.text}", modal.validation_error)
    if isinstance(modal, Creating):
        if modal.base_branch_name:
            text = f"New branch from '{modal.base_branch_name}': {modal.draft_name}"
        else:
            text = f"New branch: {modal.draft_name}"
        return _with_error(text, modal.validation_error)
    if isinstance(modal, ConfirmDelete):
        return f"Delete branch '{modal.target}'? (y/n)"
    if isinstance(modal, ConfirmForceDelete):
        return f"Branch '{modal.target}' is not fully merged. Force delete? (y/n)"
    if isinstance(modal, ConfirmCheckoutNew):
        return "Checkout now? (y/n)"
    if isinstance(modal, ConfirmMerge):
        return f"Merge '{modal.target}' into '{current_name or 'HEAD'}'? (y/n)"
    if isinstance(modal, ConfirmRebase):
        return f"Rebase onto '{modal.target}'? (y/n)"
    if isinstance(modal, ConfirmPush):
        if modal.needs_upstream:
            return "No upstream branch set. Push and set upstream? (y/n)"
        return "Push to remote? (y/n)"
    if isinstance(modal, ConfirmExit):
        return "Quit? (y/n)"
    if isinstance(modal, OperationInProgress):
        return modal.label
    if isinstance(modal, HelpOverlay):
        return CLOSE_HELP_TEXT
    return None


def hint_text(state: AppState) -> str:
    items = state.visible_items
    if not items:
        return EMPTY_HINTS
    position = min(state.viewport.selected_index, len(items) - 1) + 1
    parts = [f"line {position} of {len(items)}"]
    selected = state.selected_action
    for index, action in enumerate(state.actions):
        label = f"{index + 1}: {action.label}"
        parts.append(f"[{label}]" if index == selected else label)
    parts.append(HELP_HINT)
    return SEPARATOR.join(parts)


def status_text(state: AppState) -> str:
    current = state.store.current
    prompt = prompt_text(state.modal, current.name if current else None)
    if prompt is not None:
        return prompt
    if state.error:
        return state.error
    if state.message:
        return state.message
    if state.loading and not state.store.loaded:
        return LOADING_TEXT
    return hint_text(state)


def wrap_status(text: str, width: int) -> tuple[str, str]:
    """Lay ``text`` out on at most two lines of ``width`` columns.

    The first line breaks at the last separator, else the last space, found
    within ``WRAP_LOOKBACK`` columns before the width; without one it breaks
    hard at the width. An overlong second line is cut with an ellipsis.
    """
    text = " ".join(text.splitlines())
    if width <= 0:
        return "", ""
    if len(text) <= width:
        return text, ""

    window_start = max(0, width - WRAP_LOOKBACK)
    cut = text.rfind(SEPARATOR, window_start, width + len(SEPARATOR))
    if cut > 0:
        first, second = text[:cut], text[cut + len(SEPARATOR) :]
    else:
        cut = text.rfind(" ", window_start, width + 1)
        if cut > 0:
            first, second = text[:cut], text[cut + 1 :]
        else:
            first, second = text[:width], text[width:]

    if len(second) > width:
        if width > len(ELLIPSIS):
            second = second[: width - len(ELLIPSIS)] + ELLIPSIS
        else:
            second = second[:width]
    return first, second


def status_lines(state: AppState, width: int) -> tuple[str, str]:
    return wrap_status(status_text(state), width)
