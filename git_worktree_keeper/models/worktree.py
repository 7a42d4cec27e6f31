"""Worktree data models."""

from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional

from git_worktree_keeper.models.branch import Attached, BranchRef, Detached, SyncStatus


@dataclass
class WorktreeEntry:
    """One stanza of ``git worktree list --porcelain``."""

    path: str
    commit: Optional[str] = None
    branch: BranchRef = Detached()
    is_bare: bool = False
    lock_reason: Optional[str] = None  # None = unlocked, "" = locked without reason
    prunable_reason: Optional[str] = None  # same tri-state as lock_reason

    @property
    def name(self) -> str:
        return PurePath(self.path).name

    @property
    def is_locked(self) -> bool:
        return self.lock_reason is not None

    @property
    def is_prunable(self) -> bool:
        return self.prunable_reason is not None

    @property
    def branch_name(self) -> Optional[str]:
        if isinstance(self.branch, Attached):
            return self.branch.name
        return None

    @property
    def short_commit(self) -> str:
        return self.commit[:7] if self.commit else ""

    def to_porcelain(self) -> str:
        """Serialize back to a porcelain stanza."""
        lines = [f"worktree {self.path}"]
        if self.is_bare:
            lines.append("bare")
        else:
            if self.commit:
                lines.append(f"HEAD {self.commit}")
            if isinstance(self.branch, Attached):
                lines.append(f"branch refs/heads/{self.branch.name}")
            else:
                lines.append("detached")
        for keyword, reason in (("locked", self.lock_reason), ("prunable", self.prunable_reason)):
            if reason is not None:
                lines.append(f"{keyword} {reason}" if reason else keyword)
        return "\n".join(lines)

    def __str__(self) -> str:
        return f"{self.name} @ {self.path} [{self.branch}]"


@dataclass
class WorktreeStatus:
    """Working-tree and upstream state of a worktree, used by listing filters."""

    entry: WorktreeEntry
    dirty: Optional[bool]  # None = couldn't check
    sync: SyncStatus
    upstream: Optional[str] = None
    ahead: Optional[int] = 0  # None = couldn't count
    behind: Optional[int] = 0

    def to_dict(self) -> dict:
        return {
            "name": self.entry.name,
            "path": self.entry.path,
            "branch": self.entry.branch_name,
            "commit": self.entry.commit,
            "locked": self.entry.lock_reason,
            "prunable": self.entry.prunable_reason,
            "dirty": self.dirty,
            "sync": self.sync.value,
            "upstream": self.upstream,
            "ahead": self.ahead,
            "behind": self.behind,
        }
