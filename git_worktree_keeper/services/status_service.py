"""Service for determining worktree dirty and sync status"""

import asyncio
from dataclasses import dataclass
from typing import Optional

from git_worktree_keeper.models.branch import SyncStatus
from git_worktree_keeper.models.worktree import WorktreeEntry, WorktreeStatus
from git_worktree_keeper.services.git.runner import GitRunner
from git_worktree_keeper.services.safety import parse_count
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class StatusFilter:
    """Listing filters. Set filters combine with AND."""

    clean: bool = False
    dirty: bool = False
    synced: bool = False
    ahead: bool = False
    behind: bool = False
    no_remote: bool = False

    @property
    def needs_sync(self) -> bool:
        return self.synced or self.ahead or self.behind or self.no_remote

    @property
    def active(self) -> bool:
        return self.clean or self.dirty or self.needs_sync


class WorktreeStatusService:
    """Service for inspecting worktrees for listing."""

    def __init__(self, runner: GitRunner):
        """Initialize the service."""
        self.runner = runner

    async def inspect(self, entry: WorktreeEntry, include_sync: bool = True) -> WorktreeStatus:
        """Get dirty state and sync status of a worktree.

        The sync status compares HEAD against the branch's configured upstream.
        Detached worktrees and branches without an upstream are ``no-remote``.
        Counts that cannot be read stay None and make the status ``unknown``,
        which no sync filter matches.
        """
        logger.debug(f"Inspecting worktree: {entry.name}")
        if include_sync:
            dirty, (upstream, ahead, behind) = await asyncio.gather(
                self._is_dirty(entry), self._upstream_counts(entry)
            )
        else:
            dirty = await self._is_dirty(entry)
            upstream, ahead, behind = None, 0, 0

        sync = SyncStatus.from_counts(ahead, behind) if upstream else SyncStatus.NO_REMOTE
        return WorktreeStatus(
            entry=entry, dirty=dirty, sync=sync, upstream=upstream, ahead=ahead, behind=behind
        )

    async def inspect_all(
        self, entries: list[WorktreeEntry], include_sync: bool = True
    ) -> list[WorktreeStatus]:
        return list(await asyncio.gather(*(self.inspect(e, include_sync) for e in entries)))

    async def _is_dirty(self, entry: WorktreeEntry) -> Optional[bool]:
        result = await self.runner.run("-C", entry.path, "status", "--porcelain")
        if not result.ok:
            logger.debug(f"Could not check status for {entry.path}: {result.diagnostic}")
            return None
        return bool(result.output)

    async def _upstream_counts(
        self, entry: WorktreeEntry
    ) -> tuple[Optional[str], Optional[int], Optional[int]]:
        branch = entry.branch_name
        if branch is None:
            return None, 0, 0

        result = await self.runner.run(
            "for-each-ref", "--format=%(upstream:short)", f"refs/heads/{branch}"
        )
        upstream = result.output if result.ok else ""
        if not upstream:
            return None, 0, 0

        ahead_result, behind_result = await asyncio.gather(
            self.runner.run("-C", entry.path, "rev-list", "--count", f"{upstream}..HEAD"),
            self.runner.run("-C", entry.path, "rev-list", "--count", f"HEAD..{upstream}"),
        )
        ahead = parse_count(ahead_result.stdout) if ahead_result.ok else None
        behind = parse_count(behind_result.stdout) if behind_result.ok else None
        if ahead is None or behind is None:
            logger.debug(f"Could not count commits against {upstream} for {entry.path}")
        return upstream, ahead, behind

    @staticmethod
    def matches(status: WorktreeStatus, filters: StatusFilter) -> bool:
        """Check a worktree against every active filter."""
        if filters.clean and status.dirty is not False:
            return False
        if filters.dirty and status.dirty is not True:
            return False
        if filters.synced and status.sync is not SyncStatus.SYNCED:
            return False
        if filters.ahead and status.sync not in (SyncStatus.AHEAD, SyncStatus.DIVERGED):
            return False
        if filters.behind and status.sync not in (SyncStatus.BEHIND, SyncStatus.DIVERGED):
            return False
        if filters.no_remote and status.sync is not SyncStatus.NO_REMOTE:
            return False
        return True
