"""Worktree provisioning service for git-worktree-keeper."""

from typing import Optional

from git_worktree_keeper.context import RepoContext
from git_worktree_keeper.exceptions import NetworkWarning, ValidationError
from git_worktree_keeper.models.results import ProvisionPlan, ProvisionResult, ProvisionRoute
from git_worktree_keeper.services.git.refs import RefResolver
from git_worktree_keeper.services.validation_service import ValidationService
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


class WorktreeProvisioner:
    """Decides how a requested worktree attaches to a branch, then creates it.

    INIT -> (FETCH) -> RESOLVE -> FROM_LOCAL | FROM_REMOTE | FROM_NEW_BRANCH -> created or FAILED
    """

    def __init__(self, context: RepoContext, resolver: Optional[RefResolver] = None):
        """Initialize the provisioner.

        Args:
            context: Repository context for this invocation
            resolver: Ref resolver (built from the context's runner if omitted)
        """
        self.context = context
        self.runner = context.runner
        self.resolver = resolver or RefResolver(
            context.runner, preferred_remote=context.config.preferred_remote
        )

    def validate(self, name: str) -> None:
        """Check the name and target path. Never runs a git command.

        Raises:
            ValidationError: if the name is invalid or the target already exists
        """
        ValidationService.validate_name(name)
        if self.context.worktree_path(name).exists():
            raise ValidationError(f"Directory '{name}' already exists")

    def source_branch(self, from_branch: Optional[str] = None) -> str:
        """Branch a brand-new branch starts from."""
        return from_branch or self.context.default_branch or self.context.config.fallback_branch

    async def plan(self, name: str, from_branch: Optional[str] = None) -> ProvisionPlan:
        """Resolve ``name`` and pick a route.

        Priority: an existing local branch, then a remote-tracking ref, then a
        new branch from the source branch. A new branch starts from the source
        branch's remote ref when one resolves, so a stale local default branch
        is not used as the starting point.
        """
        resolution = await self.resolver.resolve(name)

        if resolution.local_exists:
            logger.info(f"Branch {name} exists locally")
            return ProvisionPlan(ProvisionRoute.FROM_LOCAL, name, start_point=name)

        if resolution.remote_ref is not None:
            logger.info(f"Branch {name} found on remote as {resolution.remote_ref}")
            return ProvisionPlan(
                ProvisionRoute.FROM_REMOTE, name, start_point=resolution.remote_ref.qualified
            )

        source = self.source_branch(from_branch)
        source_remote = await self.resolver.find_remote_ref(source)
        start_point = source_remote.qualified if source_remote else source
        logger.info(f"Branch {name} is new, starting from {start_point}")
        return ProvisionPlan(
            ProvisionRoute.FROM_NEW_BRANCH, name, start_point=start_point, source_branch=source
        )

    async def fetch(self) -> Optional[NetworkWarning]:
        """Fetch all remotes. Failure is returned as a warning, never raised."""
        result = await self.runner.run("fetch", "--all")
        if result.ok:
            return None
        logger.warning(f"Failed to fetch remotes: {result.diagnostic}")
        return NetworkWarning("Failed to fetch remotes")

    async def provision(
        self, name: str, from_branch: Optional[str] = None, fetch: bool = True
    ) -> ProvisionResult:
        """Create the worktree ``<root>/<name>``.

        Raises:
            ValidationError: before any git command, for a bad name or existing path

        Returns:
            ProvisionResult with the route taken and the new path, or route
            FAILED and git's diagnostic text
        """
        self.validate(name)
        self.context.activate()

        warnings = []
        if fetch:
            warning = await self.fetch()
            if warning is not None:
                warnings.append(warning)

        plan = await self.plan(name, from_branch)
        result = await self.runner.run(*plan.worktree_add_args(), cwd=self.context.root)
        if not result.ok:
            logger.error(f"Failed to create worktree {name}: {result.diagnostic}")
            return ProvisionResult(
                route=ProvisionRoute.FAILED,
                plan=plan,
                diagnostic=result.diagnostic,
                warnings=warnings,
            )

        path = self.context.worktree_path(name)
        logger.info(f"Created worktree at {path} ({plan.route.value})")
        return ProvisionResult(route=plan.route, plan=plan, path=path, warnings=warnings)
