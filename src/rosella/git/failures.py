"""Classification of free-text git failures."""

from __future__ import annotations

_NOT_FULLY_MERGED_MARKERS = ("not fully merged",)

_MISSING_UPSTREAM_MARKERS = (
    "NO_UPSTREAM",
    "has no upstream branch",
    "no upstream configured",
)

_NETWORK_MARKERS = (
    "Could not resolve host",
    "network",
    "Connection",
    "timeout",
    "timed out",
)

_AUTH_MARKERS = (
    "Authentication failed",
    "Permission denied",
    "fatal: could not read",
)

_CONFLICT_MARKERS = ("CONFLICT", "conflict")

_DIVERGED_MARKERS = ("diverged", "non-fast-forward")

_DIRTY_TREE_MARKERS = (
    "would be overwritten",
    "Please commit your changes",
)


def _contains_any(text: str, markers: tuple[str, ...]) -> bool:
    return any(marker in text for marker in markers)


def is_not_fully_merged(text: str) -> bool:
    """Return True when a delete was refused because the branch is unmerged."""
    return _contains_any(text, _NOT_FULLY_MERGED_MARKERS)


def is_missing_upstream(text: str) -> bool:
    """Return True when a push was refused for lack of an upstream branch."""
    return _contains_any(text, _MISSING_UPSTREAM_MARKERS)


def describe_failure(text: str) -> str:
    """Rewrite known git failures into an explanation; pass others through.

    The first matching category wins, in the order network, authentication,
    conflict, diverged, dirty tree.
    """
    if _contains_any(text, _NETWORK_MARKERS):
        return (
            "Network error: Unable to connect to remote.\n"
            "Please check your internet connection and try again."
        )
    if _contains_any(text, _AUTH_MARKERS):
        return (
            "Authentication error: Failed to authenticate with remote.\n"
            "Please check your credentials and try again."
        )
    if _contains_any(text, _CONFLICT_MARKERS):
        return f"Merge conflict detected:\n{text}\n\nResolve conflicts manually and try again."
    if _contains_any(text, _DIVERGED_MARKERS):
        return "Branches have diverged.\nPull the latest changes or force push (use with caution)."
    if _contains_any(text, _DIRTY_TREE_MARKERS):
        return "Uncommitted changes detected.\nCommit or stash your changes before proceeding."
    return text
