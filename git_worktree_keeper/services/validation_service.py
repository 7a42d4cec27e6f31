"""Worktree name validation service for git-worktree-keeper."""

import re
from typing import Optional

from git_worktree_keeper.exceptions import ValidationError

# Names that would collide with the repository's own metadata or that git refuses as branches
RESERVED_NAMES = {".bare", ".git", "HEAD"}

# Control characters and characters git forbids in ref names
_ILLEGAL_REF_CHARS = re.compile(r"[\x00-\x1f\x7f ~^:?*\\\[\]]")


class ValidationService:
    """Service for validating worktree names before any git command runs."""

    @staticmethod
    def invalid_reason(name: str) -> Optional[str]:
        """
        Explain why ``name`` cannot be used as a worktree and branch name.

        The worktree directory is created at ``<root>/<name>`` and the branch is
        named ``name``, so the name must be a safe relative path and a legal
        git ref name at the same time.

        Args:
            name: Requested worktree name

        Returns:
            None if the name is valid, otherwise a short reason
        """
        if not name or not name.strip():
            return "name is empty"
        if name in RESERVED_NAMES:
            return f"'{name}' is reserved"
        if ".." in name:
            return "name contains '..'"
        if name.startswith("/"):
            return "name is an absolute path"
        if name.startswith("-"):
            return "name starts with '-'"
        if name.endswith("/") or "//" in name:
            return "name has an empty path component"
        if name.endswith(".lock"):
            return "name ends with '.lock'"
        if "@{" in name or name == "@":
            return "name is not a valid ref"
        if _ILLEGAL_REF_CHARS.search(name):
            return "name contains characters not allowed in branch names"
        for part in name.split("/"):
            if part.startswith(".") or part.endswith("."):
                return "path components cannot start or end with '.'"
        return None

    @classmethod
    def is_valid_name(cls, name: str) -> bool:
        """Check if a worktree name is valid."""
        return cls.invalid_reason(name) is None

    @classmethod
    def validate_name(cls, name: str) -> None:
        """
        Raise ValidationError for an invalid worktree name.

        Args:
            name: Requested worktree name

        Raises:
            ValidationError: if the name is invalid
        """
        reason = cls.invalid_reason(name)
        if reason is not None:
            raise ValidationError(f"Invalid worktree name '{name}': {reason}")
