"""Tests for worktree name validation"""
import pytest

from git_worktree_keeper.exceptions import ValidationError
from git_worktree_keeper.services.validation_service import ValidationService


class TestValidNames:
    """Names that must be accepted."""

    @pytest.mark.parametrize("name", [
        "feature",
        "feature-x",
        "feature/login",
        "release/1.2",
        "fix_123",
        "v2.0",
    ])
    def test_valid(self, name):
        assert ValidationService.is_valid_name(name)
        ValidationService.validate_name(name)


class TestInvalidNames:
    """Names that must be rejected before any git command runs."""

    @pytest.mark.parametrize("name", [
        "",
        "   ",
        ".bare",
        ".git",
        "..",
        "../x",
        "a/../b",
        "/abs",
        "-rf",
        "trailing/",
        "a//b",
        "topic.lock",
        "@",
        "a@{b",
        "has space",
        "tab\tname",
        "a~1",
        "a^2",
        "a:b",
        "what?",
        "glob*",
        "back\\slash",
        "[bracket]",
        ".hidden",
        "dir/.hidden",
        "ends.",
    ])
    def test_invalid(self, name):
        assert not ValidationService.is_valid_name(name)

    def test_error_message_names_the_input(self):
        with pytest.raises(ValidationError, match=r"Invalid worktree name '\.\./x'"):
            ValidationService.validate_name("../x")

    def test_reason_reported(self):
        assert ValidationService.invalid_reason(".bare") == "'.bare' is reserved"
        assert ValidationService.invalid_reason("HEAD") == "'HEAD' is reserved"
        assert ValidationService.invalid_reason("feature") is None
