"""Formatting utilities for git-worktree-keeper.

- status: safety issue, sync and removal formatting
- worktree: listing rows and flags
"""

from .status import format_issues, format_sync_status, format_removal_report
from .worktree import format_flags, format_worktree_cells, format_worktree_row

__all__ = [
    "format_issues",
    "format_sync_status",
    "format_removal_report",
    "format_flags",
    "format_worktree_cells",
    "format_worktree_row",
]
