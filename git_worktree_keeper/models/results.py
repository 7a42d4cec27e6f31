"""Result types returned by the provisioning and removal services."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

from git_worktree_keeper.exceptions import BatchRemovalError, NetworkWarning


class ProvisionRoute(Enum):
    """How a new worktree gets its branch."""
    FROM_LOCAL = "from-local"
    FROM_REMOTE = "from-remote"
    FROM_NEW_BRANCH = "from-new-branch"
    FAILED = "failed"


@dataclass(frozen=True)
class ProvisionPlan:
    """The routing decision for a requested worktree name."""

    route: ProvisionRoute
    name: str
    start_point: Optional[str] = None  # remote ref or source branch
    source_branch: Optional[str] = None  # only set for FROM_NEW_BRANCH

    def worktree_add_args(self) -> List[str]:
        """Arguments following ``git`` that create this worktree."""
        if self.route is ProvisionRoute.FROM_LOCAL:
            return ["worktree", "add", self.name, self.name]
        if self.route is ProvisionRoute.FROM_REMOTE:
            return ["worktree", "add", "--track", "-b", self.name, self.name, self.start_point]
        if self.route is ProvisionRoute.FROM_NEW_BRANCH:
            return ["worktree", "add", "--no-track", "-b", self.name, self.name, self.start_point]
        raise ValueError(f"No worktree command for route {self.route.value}")


@dataclass
class ProvisionResult:
    """Outcome of provisioning: the chosen route, or FAILED with git's diagnostic."""

    route: ProvisionRoute
    plan: Optional[ProvisionPlan] = None
    path: Optional[Path] = None
    diagnostic: Optional[str] = None
    warnings: List[NetworkWarning] = field(default_factory=list)

    @property
    def created(self) -> bool:
        return self.route is not ProvisionRoute.FAILED


@dataclass(frozen=True)
class Removed:
    """Plain ``git worktree remove`` succeeded."""


@dataclass(frozen=True)
class RetriedAndRemoved:
    """Plain removal failed, the forced retry succeeded."""
    first_diagnostic: str = ""


@dataclass(frozen=True)
class Failed:
    """Removal failed; terminal for this item."""
    diagnostic: str
    hint: Optional[str] = None


RemovalOutcome = Union[Removed, RetriedAndRemoved, Failed]


@dataclass
class RemovalReport:
    """A successfully removed worktree."""

    name: str
    outcome: Union[Removed, RetriedAndRemoved]
    branch_deleted: bool = False

    @property
    def forced(self) -> bool:
        return isinstance(self.outcome, RetriedAndRemoved)


@dataclass
class BatchRemovalResult:
    """Per-item results of a batch removal, in request order."""

    removed: List[RemovalReport] = field(default_factory=list)
    failures: List[Tuple[str, Exception]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        if self.failures:
            raise BatchRemovalError(self.failures)
