"""Shared constants for git-worktree-keeper."""

from dataclasses import dataclass
from typing import List

from git_worktree_keeper.models.branch import SyncStatus


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    key: str
    label: str
    width: int = 0  # 0 means auto-width


# Columns of the worktree listing table
COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("name", "Worktree"),
    ColumnDefinition("commit", "Commit", 8),
    ColumnDefinition("branch", "Branch"),
    ColumnDefinition("flags", "Flags"),
]

# Flag shown for each sync status (synced shows nothing)
SYNC_FLAGS = {
    SyncStatus.NO_REMOTE: "no-remote",
    SyncStatus.SYNCED: "",
    SyncStatus.AHEAD: "ahead",
    SyncStatus.BEHIND: "behind",
    SyncStatus.DIVERGED: "diverged",
    SyncStatus.UNKNOWN: "sync-unknown",
}

# CLI colors (Rich color names)
CLI_COLORS = {
    "removed": "green",
    "warning": "yellow",
    "error": "red",
    "dim": "dim",
}
