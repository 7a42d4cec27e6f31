"""Safety checks that gate destructive worktree removal."""

import asyncio
from pathlib import Path
from typing import Optional, Union

from git_worktree_keeper.context import RepoContext
from git_worktree_keeper.models.branch import RemoteRef
from git_worktree_keeper.models.safety import SafetyIssue
from git_worktree_keeper.services.git.refs import RefResolver
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


def parse_count(output: str) -> Optional[int]:
    """Parse ``rev-list --count`` output; None if it is not a decimal integer."""
    output = output.strip()
    if not output.isdigit():
        return None
    return int(output)


class SafetyEvaluator:
    """Runs the pre-removal checks for a worktree and collects blocking issues.

    An empty issue list is the only signal that removal may proceed. A check
    that cannot run is itself a blocking issue.
    """

    def __init__(self, context: RepoContext, resolver: Optional[RefResolver] = None):
        self.context = context
        self.runner = context.runner
        self.resolver = resolver or RefResolver(
            context.runner, preferred_remote=context.config.preferred_remote
        )

    async def evaluate(self, name: str, path: Union[str, Path]) -> list[SafetyIssue]:
        """Check whether worktree ``name`` at ``path`` can be removed safely.

        Args:
            name: Worktree and branch name
            path: Worktree directory

        Returns:
            Blocking issues in a fixed order, empty if removal is safe
        """
        issues: list[SafetyIssue] = []

        if self.context.is_default_branch(name):
            issues.append(SafetyIssue.default_branch(name))

        dirty_issue, remote_ref = await asyncio.gather(
            self._check_dirty(path),
            self.resolver.find_remote_ref(name),
        )
        if dirty_issue is not None:
            issues.append(dirty_issue)

        if remote_ref is None:
            issues.append(SafetyIssue.not_pushed(name))
        else:
            issues.extend(await self._check_divergence(remote_ref, path))

        if issues:
            logger.info(f"Removal of {name} blocked by {len(issues)} issue(s)")
        else:
            logger.debug(f"Removal of {name} passed safety checks")
        return issues

    async def _check_dirty(self, path: Union[str, Path]) -> Optional[SafetyIssue]:
        result = await self.runner.run("-C", str(path), "status", "--porcelain")
        if not result.ok:
            logger.warning(f"Status check failed in {path}: {result.diagnostic}")
            return SafetyIssue.status_check_failed()
        if result.output:
            return SafetyIssue.uncommitted_changes()
        return None

    async def _check_divergence(
        self, remote_ref: RemoteRef, path: Union[str, Path]
    ) -> list[SafetyIssue]:
        fetch = await self.runner.run("fetch", remote_ref.remote, remote_ref.branch)
        if not fetch.ok:
            logger.warning(f"Failed to fetch {remote_ref}: {fetch.diagnostic}")
            return [SafetyIssue.fetch_failed(remote_ref.qualified)]

        ref = remote_ref.qualified
        ahead_result, behind_result = await asyncio.gather(
            self.runner.run("-C", str(path), "rev-list", "--count", f"{ref}..HEAD"),
            self.runner.run("-C", str(path), "rev-list", "--count", f"HEAD..{ref}"),
        )

        issues: list[SafetyIssue] = []
        ahead = parse_count(ahead_result.stdout) if ahead_result.ok else None
        if ahead is None:
            issues.append(SafetyIssue.ahead_check_failed())
        elif ahead > 0:
            issues.append(SafetyIssue.unpushed_commits(ahead))

        behind = parse_count(behind_result.stdout) if behind_result.ok else None
        if behind is None:
            issues.append(SafetyIssue.behind_check_failed())
        elif behind > 0:
            issues.append(SafetyIssue.behind_remote(behind))

        return issues
