"""New branch name validation."""

from __future__ import annotations

import re
from dataclasses import dataclass

_INVALID_SEQUENCES = re.compile(r"[~^:?*\[\\\s]|\.\.|@\{|//")


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: str = ""


def validate_branch_name(name: str) -> ValidationResult:
    if not name or not name.strip():
        return ValidationResult(False, "Branch name cannot be empty")
    if any(char.isspace() for char in name):
        return ValidationResult(False, "Branch name cannot contain spaces")
    if name.startswith(("-", ".")):
        return ValidationResult(False, "Branch name cannot start with - or .")
    if name.endswith(".lock"):
        return ValidationResult(False, "Branch name cannot end with .lock")
    if _INVALID_SEQUENCES.search(name):
        return ValidationResult(False, "Branch name contains invalid characters")
    return ValidationResult(True)
