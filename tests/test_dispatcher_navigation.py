from __future__ import annotations

from dataclasses import replace

from rosella.models import BranchEntry, FilterMode
from rosella.ui import dispatcher
from rosella.ui.calls import CallKind
from rosella.ui.filtering import INVALID_PATTERN_MESSAGE
from rosella.ui.keys import Key, KeyEvent
from rosella.ui.modal import (
    ConfirmDelete,
    ConfirmExit,
    Creating,
    HelpOverlay,
    Idle,
    OperationInProgress,
    Searching,
)
from rosella.ui.state import AppState
from rosella.ui.status import status_text


def _event(key: str | Key) -> KeyEvent:
    if isinstance(key, Key):
        return KeyEvent(key)
    return KeyEvent.of_char(key)


def _press(state: AppState, *keys: str | Key) -> dispatcher.Transition:
    transition = dispatcher.Transition(state)
    for key in keys:
        transition = dispatcher.handle(_event(key), transition.state)
    return transition


def test_down_three_times_wraps_to_first_line(loaded_state, three_branches) -> None:
    state = _press(loaded_state(three_branches), Key.DOWN, Key.DOWN, Key.DOWN).state

    assert state.viewport.selected_index == 0
    assert state.viewport.top_index == 0
    assert status_text(state).startswith("line 1 of 3")


def test_vim_keys_navigate(loaded_state, three_branches) -> None:
    state = _press(loaded_state(three_branches), "j", "j").state
    assert state.selected_entry.name == "feature-2"
    state = _press(state, "k").state
    assert state.selected_entry.name == "feature-1"


def test_navigation_clears_transient_message(loaded_state, three_branches) -> None:
    state = loaded_state(three_branches, message="Deleted branch 'old'", error="boom")
    state = _press(state, Key.DOWN).state
    assert state.message == ""
    assert state.error == ""


def test_hints_mark_the_highlighted_action(loaded_state, three_branches) -> None:
    state = loaded_state(three_branches)
    assert status_text(state) == (
        "line 1 of 3 | [1: New branch] | 2: Pull | 3: Push | 4: Fetch | h: Help"
    )
    state = _press(state, Key.RIGHT).state
    assert "[2: Pull]" in status_text(state)
    state = _press(state, Key.LEFT, Key.LEFT).state
    assert "[4: Fetch]" in status_text(state)


def test_action_index_is_clamped_when_moving_to_shorter_action_list(
    loaded_state, three_branches
) -> None:
    state = _press(loaded_state(three_branches, selected=1), Key.LEFT).state
    assert state.action_index == 5
    state = _press(state, Key.UP).state
    assert state.action_index == 3
    assert status_text(state).endswith("[4: Fetch] | h: Help")


def test_enter_runs_checkout_on_other_branch(loaded_state, three_branches) -> None:
    transition = _press(loaded_state(three_branches), Key.DOWN, Key.ENTER)

    assert transition.state.modal == OperationInProgress("Checking out...")
    assert transition.call.kind is CallKind.CHECKOUT
    assert transition.call.name == "feature-1"


def test_enter_on_current_branch_opens_create(loaded_state, three_branches) -> None:
    transition = _press(loaded_state(three_branches), Key.ENTER)
    assert transition.state.modal == Creating(base_branch_name="main")
    assert transition.call is None


def test_numbered_shortcuts_follow_context(loaded_state, three_branches) -> None:
    state = loaded_state(three_branches, selected=1)
    assert _press(state, "3").state.modal == ConfirmDelete("feature-1")
    assert _press(state, "7").state == replace(state, message="", error="")


def test_help_overlay_only_closes_on_its_keys(loaded_state, three_branches) -> None:
    state = _press(loaded_state(three_branches), "h").state
    assert state.modal == HelpOverlay()
    assert _press(state, "j").state.modal == HelpOverlay()
    closed = _press(state, "q").state
    assert closed.modal == Idle()
    assert not closed.should_exit


def test_quit_requires_confirmation(loaded_state, three_branches) -> None:
    state = _press(loaded_state(three_branches), "q").state
    assert state.modal == ConfirmExit()
    assert status_text(state) == "Quit? (y/n)"
    assert _press(state, "n").state.modal == Idle()
    assert _press(state, Key.ESCAPE).state.modal == Idle()
    assert _press(state, "y").state.should_exit
    assert _press(loaded_state(three_branches), Key.ESCAPE).state.modal == ConfirmExit()


def test_plain_search_filters_and_maps_selection_back(loaded_state, three_branches) -> None:
    state = _press(loaded_state(three_branches), "/", "2").state

    assert isinstance(state.modal, Searching)
    assert [entry.name for entry in state.visible_items] == ["feature-2"]
    assert status_text(state) == "Fuzzy search: 2"

    state = _press(state, Key.ENTER).state
    assert state.modal == Idle()
    assert len(state.visible_items) == 3
    assert state.selected_entry.name == "feature-2"
    assert state.viewport.selected_index == 2


def test_search_accepts_command_letters_as_text(loaded_state, three_branches) -> None:
    state = _press(loaded_state(three_branches), "/", "q", "h").state
    assert isinstance(state.modal, Searching)
    assert state.modal.query.text == "qh"
    assert state.visible_items == ()
    assert not state.should_exit


def test_pattern_search_reports_invalid_pattern(loaded_state, three_branches) -> None:
    state = _press(loaded_state(three_branches), ":", "(").state

    assert state.modal.query.mode is FilterMode.PATTERN
    assert state.modal.validation_error == INVALID_PATTERN_MESSAGE
    assert len(state.visible_items) == 3
    assert status_text(state) == "Regex search: ( - Error: Invalid regex pattern"


def test_configured_pattern_key_opens_pattern_search(loaded_state, three_branches) -> None:
    state = loaded_state(three_branches, pattern_search_key="~")
    assert _press(state, ":").state.modal == Idle()
    assert _press(state, "~").state.modal.query.mode is FilterMode.PATTERN


def test_backspace_on_empty_search_leaves_search(loaded_state, three_branches) -> None:
    state = _press(loaded_state(three_branches), "/", "f", Key.BACKSPACE).state
    assert state.modal.query.text == ""
    assert _press(state, Key.BACKSPACE).state.modal == Idle()


def test_escape_clears_filter(loaded_state, three_branches) -> None:
    state = _press(loaded_state(three_branches), "/", *"feature-1", Key.ESCAPE).state
    assert state.modal == Idle()
    assert state.selected_entry.name == "feature-1"


def test_position_policy_clamps_selection_when_view_shrinks(loaded_state, three_branches) -> None:
    state = _press(loaded_state(three_branches, selected=2), "/", "1").state
    assert state.viewport.selected_index == 0
    assert state.selected_entry.name == "feature-1"


def test_identity_policy_follows_selected_branch(loaded_state, three_branches) -> None:
    state = loaded_state(three_branches, selected=2, selection_policy="identity")
    state = _press(state, "/", "f", "e", "a").state
    assert [entry.name for entry in state.visible_items] == ["feature-1", "feature-2"]
    assert state.selected_entry.name == "feature-2"
    assert state.viewport.selected_index == 1


def test_navigation_inside_search_stays_in_filtered_view(loaded_state) -> None:
    items = [BranchEntry("main", is_current=True), BranchEntry("a-1"), BranchEntry("a-2")]
    state = _press(loaded_state(items), "/", "-", Key.DOWN, Key.DOWN).state
    assert state.selected_entry.name == "a-1"


def test_resize_changes_height_and_keeps_selection_visible(loaded_state) -> None:
    items = [BranchEntry(f"b{index:02d}") for index in range(30)]
    state = loaded_state(items, selected=10)
    state = dispatcher.resize(state, 9)
    assert state.viewport.height == 2
    assert state.viewport.top_index <= 10 <= state.viewport.top_index + 1


def test_non_ascii_digits_are_not_shortcuts(loaded_state, three_branches) -> None:
    state = loaded_state(three_branches, selected=1)
    for char in ("²", "①", "٣", "0"):
        transition = _press(state, char)
        assert transition.state == state
        assert transition.call is None
