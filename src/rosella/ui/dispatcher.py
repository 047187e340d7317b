"""Key and completion dispatch over the aggregate UI state.

Every entry point is a pure function from ``AppState`` to a ``Transition``:
the next state plus, at most, one repository call for the event loop to run.
The dispatcher never awaits anything itself.
"""

from __future__ import annotations

import logging as py_logging
from dataclasses import dataclass, replace

from typing_extensions import assert_never

from rosella.git.failures import describe_failure, is_missing_upstream, is_not_fully_merged
from rosella.git.validation import validate_branch_name
from rosella.models import FilterMode, FilterQuery
from rosella.ui import viewport as vp
from rosella.ui.actions import (
    ALREADY_CURRENT_MESSAGE,
    LETTER_SHORTCUTS,
    ActionKind,
    guard_message,
)
from rosella.ui.calls import CallKind, CallOutcome, RepositoryCall
from rosella.ui.filtering import apply_filter
from rosella.ui.keys import Key, KeyEvent
from rosella.ui.modal import (
    CONFIRM_MODALS,
    ConfirmCheckoutNew,
    ConfirmChoice,
    ConfirmDelete,
    ConfirmExit,
    ConfirmForceDelete,
    ConfirmInput,
    ConfirmMerge,
    ConfirmModal,
    ConfirmPush,
    ConfirmRebase,
    Creating,
    ErrorOverlay,
    HelpOverlay,
    Idle,
    ModalState,
    OperationInProgress,
    Searching,
    TextInput,
    classify_confirm_key,
    classify_text_key,
    closes_help,
    open_search,
    target_branch,
)
from rosella.ui.state import AppState

logger = py_logging.getLogger(__name__)

CHECKING_OUT_LABEL = "Checking out..."
CREATING_LABEL = "Creating branch..."
DELETING_LABEL = "Deleting..."
MERGING_LABEL = "Merging..."
REBASING_LABEL = "Rebasing..."
PULLING_LABEL = "Pulling..."
PUSHING_LABEL = "Pushing..."
FETCHING_LABEL = "Fetching..."

# Failures of these calls are rewritten into explanations before display.
_CLASSIFIED_CALLS = frozenset(
    {CallKind.FETCH, CallKind.PULL, CallKind.PUSH, CallKind.MERGE, CallKind.REBASE}
)


@dataclass(frozen=True)
class Transition:
    state: AppState
    call: RepositoryCall | None = None


def vanished_message(name: str) -> str:
    return f"Branch '{name}' no longer exists"


def start(state: AppState) -> Transition:
    """Initial transition: request the first branch snapshot."""
    return _reload(state)


def resize(state: AppState, rows: int) -> AppState:
    count = len(state.visible_items)
    return replace(state, viewport=vp.resize(state.viewport, vp.height_for_rows(rows), count))


def handle(event: KeyEvent, state: AppState) -> Transition:
    modal = state.modal
    if isinstance(modal, ErrorOverlay):
        return Transition(replace(state, modal=Idle(), error=""))
    if isinstance(modal, OperationInProgress):
        return Transition(state)
    if isinstance(modal, Idle):
        return _handle_idle(event, state)
    if isinstance(modal, Searching):
        return _handle_search(event, state, modal)
    if isinstance(modal, Creating):
        return _handle_create(event, state, modal)
    if isinstance(modal, HelpOverlay):
        if closes_help(event):
            return Transition(replace(state, modal=Idle()))
        return Transition(state)
    if isinstance(modal, CONFIRM_MODALS):
        return _handle_confirm(event, state, modal)
    assert_never(modal)


def complete(call: RepositoryCall, outcome: CallOutcome, state: AppState) -> Transition:
    if call.kind is CallKind.LIST_BRANCHES:
        return _complete_reload(call, outcome, state)
    if outcome.ok:
        return _complete_success(call, state)
    return _complete_failure(call, outcome.error, state)


def _with_modal(state: AppState, modal: ModalState) -> AppState:
    return replace(state, modal=modal, confirm_choice=ConfirmChoice.NO)


def _start_operation(state: AppState, label: str, call: RepositoryCall) -> Transition:
    logger.debug("Dispatching repository call kind=%s name=%s", call.kind.value, call.name)
    return Transition(_with_modal(state, OperationInProgress(label)), call)


def _reload(state: AppState) -> Transition:
    store, token = state.store.issue_token()
    call = RepositoryCall(CallKind.LIST_BRANCHES, token=token)
    return Transition(replace(state, store=store, loading=True), call)


def _navigate(event: KeyEvent, state: AppState) -> AppState:
    count = len(state.visible_items)
    if event.key is Key.UP:
        viewport = vp.move_up(state.viewport, count)
    elif event.key is Key.DOWN:
        viewport = vp.move_down(state.viewport, count)
    elif event.key is Key.PAGE_UP:
        viewport = vp.page_up(state.viewport, count)
    elif event.key is Key.PAGE_DOWN:
        viewport = vp.page_down(state.viewport, count)
    else:
        return state
    return replace(state, viewport=viewport)


def _reconciled(previous: AppState, state: AppState) -> AppState:
    """Re-anchor the viewport after the filtered view changed."""
    items = state.visible_items
    if state.selection_policy == "identity":
        selected = previous.selected_entry
        if selected is not None:
            for index, entry in enumerate(items):
                if entry.name == selected.name:
                    return replace(state, viewport=vp.select(state.viewport, index, len(items)))
    return replace(state, viewport=vp.reconcile(state.viewport, len(items)))


def _clamped_action(state: AppState) -> AppState:
    return replace(state, action_index=state.selected_action)


_NAVIGATION_CHARS = {"k": Key.UP, "j": Key.DOWN}
_DIGIT_SHORTCUTS = frozenset("123456789")


def _handle_idle(event: KeyEvent, state: AppState) -> Transition:
    state = replace(state, message="", error="")

    if event.key is Key.CHAR and event.char in _NAVIGATION_CHARS:
        event = KeyEvent(_NAVIGATION_CHARS[event.char])
    if event.key in (Key.UP, Key.DOWN, Key.PAGE_UP, Key.PAGE_DOWN):
        return Transition(_clamped_action(_navigate(event, state)))

    if event.key in (Key.LEFT, Key.RIGHT):
        step = -1 if event.key is Key.LEFT else 1
        count = len(state.actions)
        return Transition(replace(state, action_index=(state.selected_action + step) % count))
    if event.key is Key.ENTER:
        return _run_action(state.actions[state.selected_action].kind, state)
    if event.key is Key.DELETE:
        return _run_action(ActionKind.DELETE, state)
    if event.key is Key.ESCAPE:
        return Transition(_with_modal(state, ConfirmExit()))
    if event.key is not Key.CHAR:
        return Transition(state)

    char = event.char
    if char in _DIGIT_SHORTCUTS:
        actions = state.actions
        position = int(char) - 1
        if position < len(actions):
            return _run_action(actions[position].kind, replace(state, action_index=position))
        return Transition(state)
    if char in LETTER_SHORTCUTS:
        return _run_action(LETTER_SHORTCUTS[char], state)
    if char == "/":
        return Transition(_with_modal(state, open_search(FilterMode.PLAIN)))
    if char == state.pattern_search_key:
        return Transition(_with_modal(state, open_search(FilterMode.PATTERN)))
    if char == "h":
        return Transition(_with_modal(state, HelpOverlay()))
    if char == "q":
        return Transition(_with_modal(state, ConfirmExit()))
    return Transition(state)


def _run_action(kind: ActionKind, state: AppState) -> Transition:
    entry = state.selected_entry
    if kind is ActionKind.CHECKOUT and entry is not None and entry.is_current:
        return Transition(replace(state, message=ALREADY_CURRENT_MESSAGE))
    guard = guard_message(kind, entry)
    if guard is not None:
        logger.debug("Rejected action kind=%s reason=%s", kind.value, guard)
        return Transition(replace(state, error=guard))

    if kind is ActionKind.CREATE:
        base = entry.name if entry is not None else None
        return Transition(_with_modal(state, Creating(base_branch_name=base)))
    if kind is ActionKind.FETCH:
        return _start_operation(state, FETCHING_LABEL, RepositoryCall(CallKind.FETCH))
    if kind is ActionKind.PULL:
        return _start_operation(state, PULLING_LABEL, RepositoryCall(CallKind.PULL))
    if kind is ActionKind.PUSH:
        return Transition(_with_modal(state, ConfirmPush(needs_upstream=False)))

    assert entry is not None
    if kind is ActionKind.CHECKOUT:
        return _start_operation(
            state, CHECKING_OUT_LABEL, RepositoryCall(CallKind.CHECKOUT, name=entry.name)
        )
    if kind is ActionKind.DELETE:
        return Transition(_with_modal(state, ConfirmDelete(entry.name)))
    if kind is ActionKind.MERGE:
        return Transition(_with_modal(state, ConfirmMerge(entry.name)))
    return Transition(_with_modal(state, ConfirmRebase(entry.name)))


def _leave_search(state: AppState) -> AppState:
    """Drop the filter, keeping the selected branch selected in the full list."""
    selected = state.selected_entry
    plain = replace(state, modal=Idle())
    count = len(plain.store.items)
    index = plain.store.index_of(selected.name) if selected is not None else None
    viewport = vp.select(plain.viewport, index if index is not None else 0, count)
    return _clamped_action(replace(plain, viewport=viewport))


def _handle_search(event: KeyEvent, state: AppState, modal: Searching) -> Transition:
    text = modal.query.text
    action = classify_text_key(event, text)
    if action is TextInput.LEAVE or action is TextInput.SUBMIT:
        return Transition(_leave_search(state))
    if action is TextInput.NAVIGATE:
        return Transition(_clamped_action(_navigate(event, state)))
    if action is TextInput.IGNORE:
        return Transition(state)

    new_text = text + event.char if action is TextInput.APPEND else text[:-1]
    query = FilterQuery(mode=modal.query.mode, text=new_text)
    result = apply_filter(state.store.items, query)
    searching = replace(state, modal=Searching(query, result.validation_error))
    return Transition(_clamped_action(_reconciled(state, searching)))


def _handle_create(event: KeyEvent, state: AppState, modal: Creating) -> Transition:
    action = classify_text_key(event, modal.draft_name)
    if action is TextInput.LEAVE:
        return Transition(replace(state, modal=Idle()))
    if action is TextInput.NAVIGATE:
        return Transition(_navigate(event, state))
    if action is TextInput.APPEND or action is TextInput.ERASE:
        draft = modal.draft_name[:-1]
        if action is TextInput.APPEND:
            draft = modal.draft_name + event.char
        edited = Creating(draft, modal.base_branch_name)
        return Transition(replace(state, modal=edited))
    if action is TextInput.SUBMIT:
        name = modal.draft_name.strip()
        result = validate_branch_name(name)
        if not result.valid:
            return Transition(replace(state, modal=replace(modal, validation_error=result.error)))
        call = RepositoryCall(CallKind.CREATE_BRANCH, name=name, base=modal.base_branch_name)
        return _start_operation(state, CREATING_LABEL, call)
    return Transition(state)


def _confirmed(state: AppState, modal: ConfirmModal) -> Transition:
    if isinstance(modal, ConfirmExit):
        logger.info("Quit confirmed")
        return Transition(replace(state, should_exit=True))
    if isinstance(modal, ConfirmDelete):
        call = RepositoryCall(CallKind.DELETE_BRANCH, name=modal.target, force=False)
        return _start_operation(state, DELETING_LABEL, call)
    if isinstance(modal, ConfirmForceDelete):
        call = RepositoryCall(CallKind.DELETE_BRANCH, name=modal.target, force=True)
        return _start_operation(state, DELETING_LABEL, call)
    if isinstance(modal, ConfirmCheckoutNew):
        call = RepositoryCall(CallKind.CHECKOUT, name=modal.created_name)
        return _start_operation(state, CHECKING_OUT_LABEL, call)
    if isinstance(modal, ConfirmMerge):
        call = RepositoryCall(CallKind.MERGE, name=modal.target)
        return _start_operation(state, MERGING_LABEL, call)
    if isinstance(modal, ConfirmRebase):
        call = RepositoryCall(CallKind.REBASE, name=modal.target)
        return _start_operation(state, REBASING_LABEL, call)
    if isinstance(modal, ConfirmPush):
        call = RepositoryCall(CallKind.PUSH, set_upstream=modal.needs_upstream)
        return _start_operation(state, PUSHING_LABEL, call)
    assert_never(modal)


def _handle_confirm(event: KeyEvent, state: AppState, modal: ConfirmModal) -> Transition:
    decision = classify_confirm_key(event, state.confirm_choice)
    if decision is ConfirmInput.TOGGLE:
        return Transition(replace(state, confirm_choice=state.confirm_choice.toggled()))
    if decision is ConfirmInput.ACCEPT:
        return _confirmed(state, modal)
    if decision is ConfirmInput.REJECT:
        declined = replace(state, modal=Idle())
        if isinstance(modal, ConfirmCheckoutNew):
            count = len(declined.visible_items)
            declined = replace(declined, viewport=vp.ensure_visible(declined.viewport, count))
        return Transition(declined)
    return Transition(state)


def _complete_reload(call: RepositoryCall, outcome: CallOutcome, state: AppState) -> Transition:
    if call.token is None or not state.store.is_latest(call.token):
        logger.debug(
            "Discarded stale branch listing token=%s latest=%s", call.token, state.store.latest_token
        )
        return Transition(state)

    if not outcome.ok:
        logger.warning("Branch listing failed error=%s", outcome.error)
        failed = replace(state, loading=False, store=replace(state.store, loaded=True))
        if isinstance(failed.modal, OperationInProgress):
            return Transition(replace(failed, error=outcome.error))
        return Transition(_show_failure(failed, outcome.error))

    updated = replace(state, store=state.store.with_items(outcome.branches), loading=False)
    updated = _clamped_action(_reconciled(state, updated))
    if isinstance(updated.modal, Searching):
        result = updated.filtered
        searching = replace(updated.modal, validation_error=result.validation_error)
        updated = replace(updated, modal=searching)

    target = target_branch(updated.modal)
    if target is not None and target not in updated.store.names:
        logger.info("Prompt target vanished after reload branch=%s", target)
        updated = _with_modal(updated, ErrorOverlay(vanished_message(target)))
    return Transition(updated)


def _show_failure(state: AppState, text: str) -> AppState:
    """Route a failure to the status line, or to the error pane if multi-line.

    An open prompt is left alone; the error still reaches the status line.
    """
    if isinstance(state.modal, (Idle, OperationInProgress)):
        if "\n" in text.strip():
            return _with_modal(replace(state, error=""), ErrorOverlay(text.strip()))
        return replace(state, modal=Idle(), error=text)
    return replace(state, error=text)


def _success_message(call: RepositoryCall) -> str:
    name = call.name or ""
    if call.kind is CallKind.CHECKOUT:
        return f"Switched to branch '{name}'"
    if call.kind is CallKind.CREATE_BRANCH:
        return f"Branch '{name}' created from '{call.base or 'HEAD'}'"
    if call.kind is CallKind.DELETE_BRANCH:
        return f"Force deleted branch '{name}'" if call.force else f"Deleted branch '{name}'"
    if call.kind is CallKind.MERGE:
        return f"✓ Merged '{name}' into current branch"
    if call.kind is CallKind.REBASE:
        return f"✓ Rebased onto '{name}'"
    if call.kind is CallKind.PULL:
        return "✓ Pulled latest changes"
    if call.kind is CallKind.PUSH:
        return "✓ Pushed to remote with upstream set" if call.set_upstream else "✓ Pushed to remote"
    return "✓ Fetched from remote"


def _complete_success(call: RepositoryCall, state: AppState) -> Transition:
    logger.info("Repository call succeeded kind=%s name=%s", call.kind.value, call.name)
    done = replace(state, modal=Idle(), message=_success_message(call), error="")
    if call.kind is CallKind.CREATE_BRANCH and call.name:
        done = _with_modal(done, ConfirmCheckoutNew(call.name))
    elif call.kind is CallKind.CHECKOUT:
        done = replace(done, viewport=vp.ViewportState(0, 0, state.viewport.height), action_index=0)
    return _reload(done)


def _complete_failure(call: RepositoryCall, error: str, state: AppState) -> Transition:
    unmerged = call.kind is CallKind.DELETE_BRANCH and not call.force and is_not_fully_merged(error)
    if unmerged and call.name:
        logger.info("Escalating delete to force delete branch=%s", call.name)
        return Transition(_with_modal(replace(state, error=""), ConfirmForceDelete(call.name)))
    if call.kind is CallKind.PUSH and not call.set_upstream and is_missing_upstream(error):
        logger.info("Push needs an upstream branch")
        return Transition(_with_modal(replace(state, error=""), ConfirmPush(needs_upstream=True)))

    text = describe_failure(error) if call.kind in _CLASSIFIED_CALLS else error
    logger.warning("Repository call failed kind=%s name=%s", call.kind.value, call.name)
    return Transition(_show_failure(replace(state, modal=Idle()), text))
