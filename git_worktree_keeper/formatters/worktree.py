"""Worktree listing formatting utilities."""

from typing import Dict, Optional

from git_worktree_keeper.constants import COLUMNS
from git_worktree_keeper.models.worktree import WorktreeEntry, WorktreeStatus
from git_worktree_keeper.formatters.status import format_sync_status


def format_flags(entry: WorktreeEntry, status: Optional[WorktreeStatus] = None) -> str:
    """
    Format the flag column: dirty, locked, prunable and sync markers.

    Args:
        entry: Worktree entry
        status: Inspected status, if available

    Returns:
        Space-separated flags, e.g. "dirty locked ahead"
    """
    flags = []
    if status is not None and status.dirty:
        flags.append("dirty")
    if entry.is_locked:
        flags.append("locked")
    if entry.is_prunable:
        flags.append("prunable")
    if status is not None:
        sync_flag = format_sync_status(status.sync)
        if sync_flag:
            flags.append(sync_flag)
    return " ".join(flags)


def format_worktree_cells(
    entry: WorktreeEntry, status: Optional[WorktreeStatus] = None
) -> Dict[str, str]:
    """Listing cell values keyed by column key."""
    return {
        "name": entry.name,
        "commit": entry.short_commit,
        "branch": str(entry.branch),
        "flags": format_flags(entry, status),
    }


def format_worktree_row(entry: WorktreeEntry, status: Optional[WorktreeStatus] = None) -> list[str]:
    """Cells of one listing table row, in COLUMNS order."""
    cells = format_worktree_cells(entry, status)
    return [cells[column.key] for column in COLUMNS]
