"""Selection and scroll arithmetic over the filtered branch view."""

from __future__ import annotations

from dataclasses import dataclass

# Header 2, prompt 1, status 2, borders 2.
UI_OVERHEAD_ROWS = 7


def height_for_rows(rows: int) -> int:
    return max(1, rows - UI_OVERHEAD_ROWS)


@dataclass(frozen=True)
class ViewportState:
    selected_index: int = 0
    top_index: int = 0
    height: int = 1

    def window(self, count: int) -> range:
        return range(self.top_index, min(count, self.top_index + self.height))


def _max_top(count: int, height: int) -> int:
    return max(0, count - height)


def ensure_visible(state: ViewportState, count: int) -> ViewportState:
    """Clamp the selection into range and scroll the minimum needed to show it."""
    if count <= 0:
        return ViewportState(0, 0, state.height)
    selected = min(max(state.selected_index, 0), count - 1)
    top = state.top_index
    if selected < top:
        top = selected
    elif selected >= top + state.height:
        top = selected - state.height + 1
    top = min(max(top, 0), _max_top(count, state.height))
    return ViewportState(selected, top, state.height)


def select(state: ViewportState, index: int, count: int) -> ViewportState:
    return ensure_visible(ViewportState(index, state.top_index, state.height), count)


def move_up(state: ViewportState, count: int) -> ViewportState:
    if count <= 0:
        return ViewportState(0, 0, state.height)
    if state.selected_index <= 0:
        last = count - 1
        return ViewportState(last, _max_top(count, state.height), state.height)
    selected = min(state.selected_index - 1, count - 1)
    top = min(state.top_index, selected)
    return ensure_visible(ViewportState(selected, top, state.height), count)


def move_down(state: ViewportState, count: int) -> ViewportState:
    if count <= 0:
        return ViewportState(0, 0, state.height)
    if state.selected_index >= count - 1:
        return ViewportState(0, 0, state.height)
    selected = state.selected_index + 1
    top = state.top_index
    if selected >= top + state.height:
        top = selected - state.height + 1
    return ensure_visible(ViewportState(selected, top, state.height), count)


def page_up(state: ViewportState, count: int) -> ViewportState:
    if count <= 0:
        return ViewportState(0, 0, state.height)
    selected = max(0, state.selected_index - state.height)
    return ensure_visible(ViewportState(selected, state.top_index, state.height), count)


def page_down(state: ViewportState, count: int) -> ViewportState:
    if count <= 0:
        return ViewportState(0, 0, state.height)
    selected = min(count - 1, state.selected_index + state.height)
    return ensure_visible(ViewportState(selected, state.top_index, state.height), count)


def reconcile(state: ViewportState, count: int) -> ViewportState:
    """Re-anchor the viewport after the view length changed, keeping position.

    A selection past the end is pulled to the last item with the window ending
    on it; otherwise the selection is kept and only an out-of-range scroll
    offset is pulled back.
    """
    if count <= 0:
        return ViewportState(0, 0, state.height)
    if state.selected_index >= count:
        selected = count - 1
        return ViewportState(selected, max(0, selected - state.height + 1), state.height)
    top = min(state.top_index, _max_top(count, state.height))
    return ViewportState(state.selected_index, top, state.height)


def resize(state: ViewportState, height: int, count: int) -> ViewportState:
    resized = ViewportState(state.selected_index, state.top_index, max(1, height))
    return ensure_visible(resized, count)
