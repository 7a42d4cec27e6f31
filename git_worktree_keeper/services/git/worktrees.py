"""Worktree operations service for git-worktree-keeper."""

from pathlib import Path
from typing import Dict, Any, Optional

from git_worktree_keeper.exceptions import ValidationError
from git_worktree_keeper.models.branch import Attached, Detached
from git_worktree_keeper.models.worktree import WorktreeEntry
from git_worktree_keeper.services.git.runner import GitRunner
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)

BRANCH_REF_PREFIX = "refs/heads/"


def _entry_from_stanza(fields: Dict[str, Any]) -> Optional[WorktreeEntry]:
    path = fields.get("path")
    if not path:
        return None
    return WorktreeEntry(
        path=path,
        commit=fields.get("HEAD"),
        branch=fields.get("branch", Detached()),
        is_bare=fields.get("bare", False),
        lock_reason=fields.get("locked"),
        prunable_reason=fields.get("prunable"),
    )


def parse_worktree_list(output: str) -> list[WorktreeEntry]:
    """Parse ``git worktree list --porcelain`` output.

    Format:
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name
        (blank line between worktrees)

    Flag lines (``bare``, ``detached``, ``locked``, ``prunable``) may carry an
    optional reason after a single space. Unknown lines are ignored and stanzas
    without a ``worktree`` line are dropped.

    Returns:
        WorktreeEntry objects in stanza order
    """
    entries: list[WorktreeEntry] = []
    text = output.replace("\r\n", "\n").strip()
    if not text:
        return entries

    for stanza in text.split("\n\n"):
        fields: Dict[str, Any] = {}
        for line in stanza.split("\n"):
            keyword, _, value = line.partition(" ")

            if keyword == "worktree" and value:
                fields["path"] = value
            elif keyword == "HEAD" and value:
                fields["HEAD"] = value
            elif keyword == "branch" and value:
                if value.startswith(BRANCH_REF_PREFIX):
                    value = value[len(BRANCH_REF_PREFIX):]
                fields["branch"] = Attached(value)
            elif line == "bare":
                fields["bare"] = True
            elif line == "detached":
                fields["branch"] = Detached()
            elif keyword in ("locked", "prunable"):
                # Bare keyword means flagged without a reason
                fields[keyword] = value

        entry = _entry_from_stanza(fields)
        if entry is not None:
            entries.append(entry)

    return entries


class WorktreeService:
    """Service for listing and managing git worktrees."""

    def __init__(self, runner: GitRunner, root: Path):
        """Initialize the worktree service.

        Args:
            runner: Runner used for git commands
            root: Repository root holding the worktree directories
        """
        self.runner = runner
        self.root = Path(root)

    async def list_worktrees(self, include_bare: bool = False) -> list[WorktreeEntry]:
        """Get all worktrees, excluding the bare object store unless asked.

        Raises:
            ExternalCommandError: if git cannot list worktrees
        """
        result = await self.runner.run("worktree", "list", "--porcelain", cwd=self.root)
        result.check("list worktrees")

        entries = parse_worktree_list(result.stdout)
        logger.debug(f"Found {len(entries)} worktree entries")
        if include_bare:
            return entries
        return [entry for entry in entries if not entry.is_bare]

    async def find(self, name: str) -> Optional[WorktreeEntry]:
        """Find a worktree by directory name, or by branch name as a fallback."""
        entries = await self.list_worktrees()
        for entry in entries:
            if entry.name == name:
                return entry
        return next((entry for entry in entries if entry.branch_name == name), None)

    async def lock(self, name: str, reason: Optional[str] = None) -> None:
        """Lock a worktree so git refuses to prune or remove it."""
        args = ["worktree", "lock"]
        if reason:
            args += ["--reason", reason]
        args.append(name)
        result = await self.runner.run(*args, cwd=self.root)
        result.check("lock worktree")
        logger.info(f"Locked worktree {name}" + (f": {reason}" if reason else ""))

    async def unlock(self, name: str) -> None:
        result = await self.runner.run("worktree", "unlock", name, cwd=self.root)
        result.check("unlock worktree")
        logger.info(f"Unlocked worktree {name}")

    async def move(self, name: str, destination: str) -> Path:
        """Move a worktree to another directory inside the root.

        Raises:
            ValidationError: if the destination is the root or outside it
            ExternalCommandError: if git refuses the move
        """
        root = self.root.resolve()
        dest = (root / destination).resolve()
        if dest == root or root not in dest.parents:
            raise ValidationError("Destination must be inside the repo root")

        result = await self.runner.run("worktree", "move", name, str(dest), cwd=self.root)
        result.check("move worktree")
        logger.info(f"Moved worktree {name} to {dest}")
        return dest
