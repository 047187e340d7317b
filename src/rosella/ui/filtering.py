"""Branch list filtering: plain substring or regular-expression pattern."""

from __future__ import annotations

import logging as py_logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from rosella.models import BranchEntry, FilterMode, FilterQuery

logger = py_logging.getLogger(__name__)

INVALID_PATTERN_MESSAGE = "Invalid regex pattern"


@dataclass(frozen=True)
class FilterResult:
    items: tuple[BranchEntry, ...]
    validation_error: str | None = None


def apply_filter(items: Sequence[BranchEntry], query: FilterQuery | None) -> FilterResult:
    """Filter ``items`` by ``query``, preserving order.

    A pattern that does not compile fails open: the full list is returned along
    with a validation error instead of raising.
    """
    if query is None or query.is_empty:
        return FilterResult(tuple(items))

    if query.mode is FilterMode.PATTERN:
        try:
            pattern = re.compile(query.text, re.IGNORECASE)
        except re.error as exc:
            logger.debug("Rejected search pattern text=%r error=%s", query.text, exc)
            return FilterResult(tuple(items), INVALID_PATTERN_MESSAGE)
        return FilterResult(tuple(entry for entry in items if pattern.search(entry.name)))

    needle = query.text.casefold()
    return FilterResult(tuple(entry for entry in items if needle in entry.name.casefold()))
