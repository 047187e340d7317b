"""Help overlay content."""

from __future__ import annotations

from rosella.models import BranchEntry
from rosella.ui.actions import actions_for
from rosella.ui.status import CLOSE_HELP_TEXT


def help_lines(entry: BranchEntry | None, pattern_search_key: str = ":") -> list[str]:
    if entry is not None and entry.is_current:
        heading = "Actions (current branch):"
    elif entry is not None:
        heading = "Actions (other branch):"
    else:
        heading = "Actions:"
    lines = [heading]
    for index, action in enumerate(actions_for(entry), start=1):
        lines.append(f"  {index}          {action.label}")
    lines += [
        "",
        "Navigation:",
        "  Up/k       Move up",
        "  Down/j     Move down",
        "  PgUp/PgDn  Move by one page",
        "  Left/Right Choose an action in the status bar",
        "  Enter      Run the highlighted action",
        "",
        "Search:",
        "  /          Fuzzy search",
        f"  {pattern_search_key:<10} Regex search",
        "  Enter      Keep the selected branch and clear the filter",
        "  Esc        Clear the filter",
        "",
        "Shortcuts:",
        "  n          New branch",
        "  u          Pull",
        "  p          Push",
        "  f          Fetch",
        "  m          Merge into current branch",
        "  r          Rebase current branch",
        "  Delete     Delete branch",
        "",
        "Other:",
        "  h          Toggle help",
        "  q/Esc      Quit (with confirmation)",
        "",
        CLOSE_HELP_TEXT,
    ]
    return lines
