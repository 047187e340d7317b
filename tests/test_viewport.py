from __future__ import annotations

import pytest

from rosella.ui.viewport import (
    UI_OVERHEAD_ROWS,
    ViewportState,
    ensure_visible,
    height_for_rows,
    move_down,
    move_up,
    page_down,
    page_up,
    reconcile,
    resize,
)


def test_height_subtracts_fixed_overhead() -> None:
    assert UI_OVERHEAD_ROWS == 7
    assert height_for_rows(24) == 17
    assert height_for_rows(5) == 1


def test_move_up_from_top_wraps_to_end() -> None:
    assert move_up(ViewportState(0, 0, 2), 4) == ViewportState(3, 2, 2)


def test_move_down_from_end_wraps_to_start() -> None:
    assert move_down(ViewportState(3, 2, 2), 4) == ViewportState(0, 0, 2)


def test_move_down_scrolls_one_row_at_a_time() -> None:
    state = ViewportState(0, 0, 3)
    for _ in range(3):
        state = move_down(state, 10)
    assert state == ViewportState(3, 1, 3)


def test_move_up_scrolls_back_to_selection() -> None:
    assert move_up(ViewportState(5, 5, 3), 10) == ViewportState(4, 4, 3)


def test_paging_clamps_to_list_bounds() -> None:
    assert page_down(ViewportState(8, 6, 3), 10) == ViewportState(9, 7, 3)
    assert page_up(ViewportState(1, 0, 3), 10) == ViewportState(0, 0, 3)


def test_paging_keeps_selection_visible() -> None:
    state = page_down(ViewportState(0, 0, 4), 20)
    assert state.selected_index == 4
    assert state.top_index <= 4 <= state.top_index + 3
    state = page_up(ViewportState(10, 8, 4), 20)
    assert state == ViewportState(6, 6, 4)


@pytest.mark.parametrize("operation", [move_up, move_down, page_up, page_down])
def test_navigation_on_empty_list_resets(operation) -> None:
    assert operation(ViewportState(3, 2, 5), 0) == ViewportState(0, 0, 5)


def test_reconcile_empty_resets() -> None:
    assert reconcile(ViewportState(4, 2, 3), 0) == ViewportState(0, 0, 3)


def test_reconcile_pulls_selection_to_last_item() -> None:
    assert reconcile(ViewportState(9, 7, 3), 5) == ViewportState(4, 2, 3)


def test_reconcile_keeps_position_when_still_in_range() -> None:
    assert reconcile(ViewportState(2, 1, 3), 8) == ViewportState(2, 1, 3)


def test_reconcile_pulls_back_scroll_offset_past_the_end() -> None:
    assert reconcile(ViewportState(3, 3, 3), 5) == ViewportState(3, 2, 3)


def test_ensure_visible_clamps_selection() -> None:
    assert ensure_visible(ViewportState(12, 0, 3), 5) == ViewportState(4, 2, 3)


def test_resize_keeps_selection_visible() -> None:
    assert resize(ViewportState(9, 5, 5), 2, 20) == ViewportState(9, 8, 2)
    assert resize(ViewportState(9, 8, 2), 0, 20).height == 1


def test_window_is_clipped_to_count() -> None:
    assert list(ViewportState(0, 0, 5).window(3)) == [0, 1, 2]
