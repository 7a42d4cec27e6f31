"""Safety issue model used by the removal gate."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


def pluralize(count: int, singular: str, plural: Optional[str] = None) -> str:
    """Return ``singular`` when ``count`` is exactly one, else the plural form."""
    if count == 1:
        return singular
    return plural if plural is not None else f"{singular}s"


class IssueKind(Enum):
    """Reasons that block removal of a worktree."""
    DEFAULT_BRANCH = "default-branch"
    STATUS_CHECK_FAILED = "status-check-failed"
    UNCOMMITTED_CHANGES = "uncommitted-changes"
    NOT_PUSHED = "not-pushed"
    FETCH_FAILED = "fetch-failed"
    AHEAD_CHECK_FAILED = "ahead-check-failed"
    UNPUSHED_COMMITS = "unpushed-commits"
    BEHIND_CHECK_FAILED = "behind-check-failed"
    BEHIND_REMOTE = "behind-remote"


@dataclass(frozen=True)
class SafetyIssue:
    """One blocking reason."""

    kind: IssueKind
    message: str

    def __str__(self) -> str:
        return self.message

    @classmethod
    def default_branch(cls, name: str) -> "SafetyIssue":
        return cls(IssueKind.DEFAULT_BRANCH, f"'{name}' is the default branch")

    @classmethod
    def status_check_failed(cls) -> "SafetyIssue":
        return cls(IssueKind.STATUS_CHECK_FAILED, "Failed to check worktree status")

    @classmethod
    def uncommitted_changes(cls) -> "SafetyIssue":
        return cls(IssueKind.UNCOMMITTED_CHANGES, "Uncommitted changes in worktree")

    @classmethod
    def not_pushed(cls, name: str) -> "SafetyIssue":
        return cls(IssueKind.NOT_PUSHED, f"Branch '{name}' not pushed to remote")

    @classmethod
    def fetch_failed(cls, ref: str) -> "SafetyIssue":
        return cls(IssueKind.FETCH_FAILED, f"Failed to fetch '{ref}'")

    @classmethod
    def ahead_check_failed(cls) -> "SafetyIssue":
        return cls(IssueKind.AHEAD_CHECK_FAILED, "Failed to check unpushed commits")

    @classmethod
    def unpushed_commits(cls, count: int) -> "SafetyIssue":
        return cls(
            IssueKind.UNPUSHED_COMMITS, f"{count} unpushed {pluralize(count, 'commit')}"
        )

    @classmethod
    def behind_check_failed(cls) -> "SafetyIssue":
        return cls(IssueKind.BEHIND_CHECK_FAILED, "Failed to check commits behind remote")

    @classmethod
    def behind_remote(cls, count: int) -> "SafetyIssue":
        return cls(
            IssueKind.BEHIND_REMOTE, f"{count} {pluralize(count, 'commit')} behind remote"
        )
