"""Safety and removal formatting utilities."""

from git_worktree_keeper.models.branch import SyncStatus
from git_worktree_keeper.models.results import RemovalReport
from git_worktree_keeper.models.safety import SafetyIssue
from git_worktree_keeper.constants import SYNC_FLAGS


def format_issues(issues: list[SafetyIssue]) -> str:
    """
    Format safety issues as an indented bullet list.

    Example:
        "  - Uncommitted changes in worktree\\n  - 2 unpushed commits"
    """
    return "\n".join(f"  - {issue}" for issue in issues)


def format_sync_status(status: SyncStatus) -> str:
    """Short flag shown in the listing table for a sync status."""
    return SYNC_FLAGS.get(status, "")


def format_removal_report(report: RemovalReport) -> list[str]:
    """
    Format the progress lines printed when a worktree has been removed.

    Args:
        report: Successful removal

    Returns:
        One line for the worktree, plus one if its branch was deleted
    """
    lines = [f"Removed worktree '{report.name}'" + (" (forced)" if report.forced else "")]
    if report.branch_deleted:
        lines.append(f"  Branch '{report.name}' also deleted")
    return lines
