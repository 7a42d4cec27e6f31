"""Worktree removal service for git-worktree-keeper."""

from typing import Callable, Optional, Sequence

from git_worktree_keeper.context import RepoContext
from git_worktree_keeper.exceptions import (
    ExternalCommandError,
    GitWorktreeKeeperError,
    NotFoundError,
    SafetyViolation,
)
from git_worktree_keeper.models.results import (
    BatchRemovalResult,
    Failed,
    RemovalOutcome,
    RemovalReport,
    Removed,
    RetriedAndRemoved,
)
from git_worktree_keeper.services.git.runner import GitRunner
from git_worktree_keeper.services.safety import SafetyEvaluator
from git_worktree_keeper.services.validation_service import ValidationService
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)

FORCE_HINT = "Use --force to override"


class RemovalStrategy:
    """Plain ``git worktree remove``, retried with ``--force`` when allowed."""

    def __init__(self, runner: GitRunner):
        self.runner = runner

    async def remove(self, name: str, force: bool = False) -> RemovalOutcome:
        """Remove the worktree directory ``name``.

        Args:
            name: Worktree directory relative to the repository root
            force: Retry with ``--force`` if the plain removal fails

        Returns:
            Removed, RetriedAndRemoved, or Failed with git's diagnostic
        """
        first = await self.runner.run("worktree", "remove", name)
        if first.ok:
            return Removed()

        if not force:
            logger.debug(f"git worktree remove {name} failed: {first.diagnostic}")
            return Failed(first.diagnostic, hint=FORCE_HINT)

        logger.debug(f"Retrying removal of {name} with --force: {first.diagnostic}")
        forced = await self.runner.run("worktree", "remove", "--force", name)
        if forced.ok:
            return RetriedAndRemoved(first_diagnostic=first.diagnostic)
        return Failed(forced.diagnostic)


class RemovalExecutor:
    """Removes worktrees and their branches behind the safety gate."""

    def __init__(
        self,
        context: RepoContext,
        evaluator: Optional[SafetyEvaluator] = None,
        strategy: Optional[RemovalStrategy] = None,
    ):
        """Initialize the executor.

        Args:
            context: Repository context for this invocation
            evaluator: Safety gate (built from the context if omitted)
            strategy: Removal strategy (built from the context's runner if omitted)
        """
        self.context = context
        self.runner = context.runner
        self.evaluator = evaluator or SafetyEvaluator(context)
        self.strategy = strategy or RemovalStrategy(context.runner)

    async def remove_one(self, name: str, force: bool = False) -> RemovalReport:
        """Remove a single worktree.

        Raises:
            ValidationError: invalid name
            NotFoundError: no worktree directory by that name
            SafetyViolation: blocked by safety checks (only without force)
            ExternalCommandError: git could not remove the worktree
        """
        ValidationService.validate_name(name)

        path = self.context.worktree_path(name)
        if not path.is_dir():
            raise NotFoundError(name)

        self.context.activate()

        if not force:
            issues = await self.evaluator.evaluate(name, path)
            if issues:
                raise SafetyViolation(name, issues)

        outcome = await self.strategy.remove(name, force=force)
        if isinstance(outcome, Failed):
            logger.error(f"Failed to remove worktree {name}: {outcome.diagnostic}")
            raise ExternalCommandError(
                f"remove worktree '{name}'", outcome.diagnostic, hint=outcome.hint
            )

        logger.info(f"Removed worktree {name}")
        branch_deleted = await self._delete_branch(name)
        return RemovalReport(name=name, outcome=outcome, branch_deleted=branch_deleted)

    async def remove_many(
        self,
        names: Sequence[str],
        force: bool = False,
        on_removed: Optional[Callable[[RemovalReport], None]] = None,
        on_failed: Optional[Callable[[str, GitWorktreeKeeperError], None]] = None,
    ) -> BatchRemovalResult:
        """Remove each worktree in order, independently of the others.

        A failure never undoes an earlier removal and never stops later ones.

        Args:
            names: Worktree names in request order
            force: Skip safety checks and allow forced removal
            on_removed: Called as each item succeeds
            on_failed: Called as each item fails

        Returns:
            BatchRemovalResult listing removals and per-item failures
        """
        batch = BatchRemovalResult()
        for name in names:
            try:
                report = await self.remove_one(name, force=force)
            except GitWorktreeKeeperError as e:
                logger.debug(f"Removal of {name} failed: {e}")
                batch.failures.append((name, e))
                if on_failed is not None:
                    on_failed(name, e)
                continue

            batch.removed.append(report)
            if on_removed is not None:
                on_removed(report)
        return batch

    async def _delete_branch(self, name: str) -> bool:
        """Delete the branch left behind by a removed worktree.

        The default branch is never deleted. Failure (unmerged branch, no such
        branch) is not an error.
        """
        if self.context.is_default_branch(name):
            logger.debug(f"Keeping default branch {name}")
            return False

        result = await self.runner.run("branch", "-d", name)
        if not result.ok:
            logger.debug(f"Branch {name} not deleted: {result.diagnostic}")
            return False
        logger.info(f"Deleted branch {name}")
        return True
