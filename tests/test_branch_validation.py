from __future__ import annotations

import pytest

from rosella.git.validation import validate_branch_name


@pytest.mark.parametrize("name", ["feature/login", "fix-123", "release_1.2", "user/x.y"])
def test_valid_names_pass(name: str) -> None:
    assert validate_branch_name(name).valid


@pytest.mark.parametrize(
    ("name", "message"),
    [
        ("", "Branch name cannot be empty"),
        ("   ", "Branch name cannot be empty"),
        ("my branch", "Branch name cannot contain spaces"),
        ("-flag", "Branch name cannot start with - or ."),
        (".hidden", "Branch name cannot start with - or ."),
        ("topic.lock", "Branch name cannot end with .lock"),
        ("a..b", "Branch name contains invalid characters"),
        ("a~1", "Branch name contains invalid characters"),
        ("a^b", "Branch name contains invalid characters"),
        ("a:b", "Branch name contains invalid characters"),
        ("what?", "Branch name contains invalid characters"),
        ("glob*", "Branch name contains invalid characters"),
        ("set[1]", "Branch name contains invalid characters"),
        ("back\\slash", "Branch name contains invalid characters"),
        ("at@{1}", "Branch name contains invalid characters"),
        ("double//slash", "Branch name contains invalid characters"),
    ],
)
def test_invalid_names_report_reason(name: str, message: str) -> None:
    result = validate_branch_name(name)
    assert not result.valid
    assert result.error == message
