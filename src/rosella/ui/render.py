"""ANSI screen rendering of a view model."""

from __future__ import annotations

from rosella.models import BranchEntry
from rosella.ui.modal import ConfirmChoice
from rosella.ui.view_model import DISMISS_TEXT, ViewModel
from rosella.ui.viewport import height_for_rows

RESET = "\x1b[0m"
BOLD = "\x1b[1m"
DIM = "\x1b[2m"
REVERSE = "\x1b[7m"
RED = "\x1b[31m"
GREEN = "\x1b[32m"
YELLOW = "\x1b[33m"
CYAN = "\x1b[36m"
HOME_AND_CLEAR = "\x1b[H\x1b[2J"
CLEAR_TO_EOL = "\x1b[K"


def _fit(text: str, width: int) -> str:
    if len(text) <= width:
        return text.ljust(width)
    return text[:width]


def format_entry(entry: BranchEntry) -> str:
    marker = "*" if entry.is_current else " "
    parts = [f"{marker} {entry.name}"]
    if entry.short_commit:
        parts.append(entry.short_commit)
    if entry.divergence:
        parts.append(entry.divergence)
    if entry.is_current and entry.has_uncommitted_changes:
        parts.append("(modified)")
    return "  ".join(parts)


def _branch_row(entry: BranchEntry, width: int, selected: bool) -> str:
    text = _fit(format_entry(entry), width)
    if selected:
        return f"{REVERSE}{text}{RESET}"
    if entry.is_current:
        return f"{GREEN}{text}{RESET}"
    return text


def _confirm_selector(choice: ConfirmChoice | None) -> str:
    yes = "[ Yes ]" if choice is ConfirmChoice.YES else "  Yes  "
    no = "[ No ]" if choice is ConfirmChoice.NO else "  No  "
    return f"{yes}  {no}"


def _prompt_line(vm: ViewModel, width: int) -> str:
    kind = vm.modal.kind
    if kind in ("searching", "creating"):
        return _fit(f"> {vm.modal.draft}_", width)
    if kind == "confirm":
        return _fit(_confirm_selector(vm.modal.confirm_choice), width)
    if kind == "in_progress":
        return f"{YELLOW}{_fit(vm.modal.prompt, width)}{RESET}"
    return _fit("", width)


def _body(vm: ViewModel, width: int, height: int) -> list[str]:
    if vm.error_lines:
        lines = [f"{RED}{_fit(line, width)}{RESET}" for line in vm.error_lines]
        lines += [_fit("", width), f"{DIM}{_fit(DISMISS_TEXT, width)}{RESET}"]
        return lines[:height]
    if vm.help_lines:
        return [_fit(line, width) for line in vm.help_lines[:height]]
    if not vm.visible_items:
        return [f"{DIM}{_fit('No branches', width)}{RESET}"]
    return [
        _branch_row(entry, width, index == vm.selected_index_within_window)
        for index, entry in enumerate(vm.visible_items)
    ]


def render_screen(vm: ViewModel, width: int, rows: int, *, title: str = "Rosella") -> str:
    """Full-screen frame: header, bordered list, prompt line and two status lines."""
    width = max(1, width)
    height = height_for_rows(rows)
    current = vm.current_branch or "(detached HEAD)"
    border = "─" * width

    lines = [
        f"{BOLD}{_fit(title, width)}{RESET}",
        f"{CYAN}{_fit(f'On branch: {current}', width)}{RESET}",
        border,
    ]
    body = _body(vm, width, height)
    lines += body
    lines += [_fit("", width)] * (height - len(body))
    lines.append(border)
    lines.append(_prompt_line(vm, width))
    first, second = vm.status_lines
    lines.append(_fit(first, width))
    lines.append(_fit(second, width))
    return HOME_AND_CLEAR + "\r\n".join(line + CLEAR_TO_EOL for line in lines)
