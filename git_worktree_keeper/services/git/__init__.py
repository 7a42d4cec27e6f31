"""Git-related services for git-worktree-keeper."""

from .runner import CommandResult, GitRunner
from .worktrees import WorktreeService, parse_worktree_list
from .refs import RefResolution, RefResolver

__all__ = [
    "CommandResult",
    "GitRunner",
    "WorktreeService",
    "parse_worktree_list",
    "RefResolution",
    "RefResolver",
]
