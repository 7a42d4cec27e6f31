"""Custom exceptions for git-worktree-keeper"""

from typing import Optional, Sequence

from git_worktree_keeper.models.safety import SafetyIssue, pluralize


class GitWorktreeKeeperError(Exception):
    """Base exception for all git-worktree-keeper errors."""
    pass


class SetupError(GitWorktreeKeeperError):
    """Raised when the current directory is not inside a managed repository."""
    pass


class ValidationError(GitWorktreeKeeperError):
    """Raised for a bad worktree name or target path.

    Raised before any git command is issued.
    """
    pass


class NotFoundError(GitWorktreeKeeperError):
    """Raised when a requested worktree directory does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Worktree '{name}' not found")


class SafetyViolation(GitWorktreeKeeperError):
    """Raised when removal is blocked by one or more safety issues."""

    def __init__(self, name: str, issues: Sequence[SafetyIssue]):
        self.name = name
        self.issues = list(issues)
        super().__init__(f"Cannot remove '{name}' due to safety checks")


class ExternalCommandError(GitWorktreeKeeperError):
    """Exception raised when a git command exits with a nonzero status."""

    def __init__(
        self,
        operation: str,
        diagnostic: Optional[str] = None,
        returncode: Optional[int] = None,
        hint: Optional[str] = None,
    ):
        self.operation = operation
        self.diagnostic = diagnostic or ""
        self.returncode = returncode
        self.hint = hint

        error_msg = f"Failed to {operation}"
        if self.diagnostic:
            error_msg += f"\n{self.diagnostic}"

        super().__init__(error_msg)


class BatchRemovalError(GitWorktreeKeeperError):
    """Raised after a batch removal in which at least one item failed."""

    def __init__(self, failures: Sequence[tuple]):
        self.failures = list(failures)
        count = len(self.failures)
        super().__init__(f"Failed to remove {count} {pluralize(count, 'worktree')}")


class NetworkWarning(UserWarning):
    """A fetch failed during a non-critical step.

    Never raised: collected on result objects and reported to the user.
    """
    pass
