"""Branch and remote-tracking ref resolution for git-worktree-keeper."""

import asyncio
from dataclasses import dataclass
from typing import Optional

from git_worktree_keeper.models.branch import RemoteRef
from git_worktree_keeper.services.git.runner import GitRunner
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)

# Probed in order when origin/HEAD is not set
DEFAULT_BRANCH_CANDIDATES = ["master", "main", "trunk", "develop", "default"]
FALLBACK_DEFAULT_BRANCH = "master"


@dataclass(frozen=True)
class RefResolution:
    """Result of looking a name up as a local branch and as a remote ref."""

    name: str
    local_exists: bool
    remote_ref: Optional[RemoteRef]


class RefResolver:
    """Service for resolving worktree names to local branches and remote refs."""

    def __init__(self, runner: GitRunner, preferred_remote: str = "origin"):
        """Initialize the resolver.

        Args:
            runner: Runner used for git commands
            preferred_remote: Remote that wins ties between matching remote refs
        """
        self.runner = runner
        self.preferred_remote = preferred_remote

    async def local_branch_exists(self, name: str) -> bool:
        """Check whether a local branch named exactly ``name`` exists."""
        result = await self.runner.run("show-ref", "--verify", "--quiet", f"refs/heads/{name}")
        return result.ok

    async def find_remote_ref(self, name: str) -> Optional[RemoteRef]:
        """Find the remote-tracking ref for ``name``.

        Candidates from remotes that are no longer configured are discarded.
        Among the rest, ``<preferred_remote>/<name>`` wins, otherwise the first
        candidate in ref enumeration order.
        """
        result = await self.runner.run(
            "for-each-ref", "--format=%(refname:short)", "refs/remotes"
        )
        if not result.ok:
            logger.debug(f"Could not enumerate remote refs: {result.diagnostic}")
            return None

        suffix = f"/{name}"
        candidates = [
            RemoteRef.from_short_ref(ref, name)
            for ref in result.output.splitlines()
            if ref.endswith(suffix) and not ref.endswith("/HEAD")
        ]
        # A ref equal to "/<name>" has no remote part
        candidates = [ref for ref in candidates if ref.remote]
        if not candidates:
            return None

        configured = await asyncio.gather(
            *(self._remote_configured(ref.remote) for ref in candidates)
        )
        valid = [ref for ref, ok in zip(candidates, configured) if ok]
        stale = [ref.qualified for ref, ok in zip(candidates, configured) if not ok]
        if stale:
            logger.debug(f"Ignoring refs from removed remotes: {', '.join(stale)}")
        if not valid:
            return None

        preferred = f"{self.preferred_remote}/{name}"
        return next((ref for ref in valid if ref.qualified == preferred), valid[0])

    async def resolve(self, name: str) -> RefResolution:
        """Run the local and remote lookups concurrently."""
        local_exists, remote_ref = await asyncio.gather(
            self.local_branch_exists(name),
            self.find_remote_ref(name),
        )
        logger.debug(f"Resolved {name}: local={local_exists}, remote={remote_ref}")
        return RefResolution(name=name, local_exists=local_exists, remote_ref=remote_ref)

    async def _remote_configured(self, remote: str) -> bool:
        result = await self.runner.run("remote", "get-url", remote)
        return result.ok

    async def detect_default_branch(self) -> str:
        """Guess the repository's default branch from origin and local config."""
        symbolic = await self.runner.run("symbolic-ref", "refs/remotes/origin/HEAD")
        if symbolic.ok and symbolic.output:
            return symbolic.output.replace("refs/remotes/origin/", "", 1)

        for branch in DEFAULT_BRANCH_CANDIDATES:
            found = await self.runner.run(
                "show-ref", "--verify", "--quiet", f"refs/remotes/origin/{branch}"
            )
            if found.ok:
                return branch

        remote_branches = await self.runner.run("branch", "-r")
        if remote_branches.ok:
            for line in remote_branches.output.splitlines():
                line = line.strip()
                if line and "->" not in line:
                    return line.replace("origin/", "", 1)

        init_default = await self.runner.run("config", "init.defaultBranch")
        if init_default.ok and init_default.output:
            return init_default.output

        return FALLBACK_DEFAULT_BRANCH
