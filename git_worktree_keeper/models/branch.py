"""Branch model and related enums"""
from enum import Enum
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Attached:
    """A worktree checked out on a named local branch."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Detached:
    """A worktree with no symbolic ref (detached HEAD)."""

    def __str__(self) -> str:
        return "(detached)"


BranchRef = Union[Attached, Detached]


@dataclass(frozen=True)
class RemoteRef:
    """A remote-tracking ref such as ``origin/feature``.

    Remote names may contain slashes, so ``remote`` is everything before the
    trailing ``/<branch>``.
    """
    remote: str
    branch: str

    @property
    def qualified(self) -> str:
        return f"{self.remote}/{self.branch}"

    @classmethod
    def from_short_ref(cls, ref: str, name: str) -> "RemoteRef":
        """Split a short ref that is known to end in ``/<name>``."""
        return cls(remote=ref[: -(len(name) + 1)], branch=name)

    def __str__(self) -> str:
        return self.qualified


class SyncStatus(Enum):
    """Sync status of a branch with its tracking ref."""
    NO_REMOTE = "no-remote"
    SYNCED = "synced"
    AHEAD = "ahead"
    BEHIND = "behind"
    DIVERGED = "diverged"
    UNKNOWN = "unknown"  # upstream exists but counts could not be read

    @classmethod
    def from_counts(cls, ahead: Optional[int], behind: Optional[int]) -> "SyncStatus":
        if ahead is None or behind is None:
            return cls.UNKNOWN
        if ahead and behind:
            return cls.DIVERGED
        elif ahead:
            return cls.AHEAD
        elif behind:
            return cls.BEHIND
        return cls.SYNCED
