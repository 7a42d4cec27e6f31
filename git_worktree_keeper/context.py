"""Per-invocation repository context for git-worktree-keeper."""

import os
from pathlib import Path
from typing import Optional, Union

import git

from git_worktree_keeper.__version__ import __version__
from git_worktree_keeper.config import (
    CONFIG_SECTION,
    DEFAULT_BRANCH_KEY,
    VERSION_KEY,
    Config,
    RepoSettings,
    read_repo_settings,
)
from git_worktree_keeper.exceptions import SetupError
from git_worktree_keeper.services.git.runner import GitRunner
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)

BARE_DIR = ".bare"
GITDIR_PREFIX = "gitdir:"
ORIGIN_FETCH_REFSPEC = "+refs/heads/*:refs/remotes/origin/*"


def find_root(start: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Find the directory that holds the ``.bare`` object store.

    Walks up from ``start`` (default: the current directory). A directory
    qualifies if it contains ``.bare``, or if it contains a ``.git`` file
    pointing elsewhere (a worktree) and its parent contains ``.bare``.
    """
    directory = Path(start) if start is not None else Path.cwd()
    directory = directory.resolve()

    for candidate in [directory, *directory.parents]:
        if (candidate / BARE_DIR).exists():
            return candidate

        git_file = candidate / ".git"
        if git_file.is_file():
            try:
                content = git_file.read_text(encoding="utf-8")
            except OSError as e:
                logger.debug(f"Could not read {git_file}: {e}")
                continue
            if content.startswith(GITDIR_PREFIX) and (candidate.parent / BARE_DIR).exists():
                return candidate.parent

    return None


class RepoContext:
    """Everything one command invocation needs to know about the repository.

    Built once per invocation and passed to every service. Settings read from
    the config store are memoized on the instance until ``invalidate()``.
    """

    def __init__(
        self,
        root: Union[str, Path],
        runner: Optional[GitRunner] = None,
        config: Optional[Config] = None,
    ):
        self.root = Path(root)
        self.config = config or Config()
        self.runner = runner or GitRunner()
        self._settings: Optional[RepoSettings] = None
        self._activated = False

    @classmethod
    def discover(
        cls,
        start: Optional[Union[str, Path]] = None,
        runner: Optional[GitRunner] = None,
        config: Optional[Config] = None,
    ) -> "RepoContext":
        """Build a context for the repository containing ``start``.

        Raises:
            SetupError: if no ``.bare`` root is found
        """
        root = find_root(start)
        if root is None:
            raise SetupError("Not in a gwt-managed repository. Run 'gwt init' in a bare worktree repository.")
        logger.debug(f"Repository root: {root}")
        return cls(root, runner=runner, config=config)

    @property
    def bare_path(self) -> Path:
        return self.root / BARE_DIR

    @property
    def settings(self) -> RepoSettings:
        if self._settings is None:
            self._settings = read_repo_settings(self.bare_path / "config")
        return self._settings

    def invalidate(self) -> None:
        """Drop memoized settings so the next access rereads the config store."""
        self._settings = None

    @property
    def default_branch(self) -> Optional[str]:
        return self.settings.default_branch

    @property
    def schema_version(self) -> Optional[str]:
        return self.settings.schema_version

    @property
    def is_managed(self) -> bool:
        return self.schema_version is not None

    @property
    def needs_upgrade(self) -> bool:
        return self.is_managed and self.schema_version != __version__

    def is_default_branch(self, name: str) -> bool:
        return self.default_branch is not None and name == self.default_branch

    def check_setup(self) -> None:
        """Raise SetupError unless the repository has been initialized."""
        if not self.is_managed:
            raise SetupError(f"Found {BARE_DIR} but not gwt-managed. Run 'gwt init' to set up.")

    def activate(self) -> None:
        """Make the repository root the process working directory.

        Happens at most once per context; later calls are no-ops.
        """
        if self._activated:
            return
        os.chdir(self.root)
        self._activated = True
        logger.debug(f"Working directory set to {self.root}")

    def worktree_path(self, name: str) -> Path:
        return self.root / name

    def write_git_file(self) -> bool:
        """Create the root ``.git`` file pointing at ``.bare``. Returns True if created."""
        git_file = self.root / ".git"
        if git_file.exists():
            return False
        git_file.write_text(f"{GITDIR_PREFIX} ./{BARE_DIR}\n", encoding="utf-8")
        return True

    def write_settings(
        self, version: Optional[str] = None, default_branch: Optional[str] = None
    ) -> None:
        """Persist settings to the bare repository's config and invalidate the cache."""
        repo = git.Repo(self.bare_path)
        try:
            with repo.config_writer() as writer:
                if version is not None:
                    writer.set_value(CONFIG_SECTION, VERSION_KEY, version)
                if default_branch is not None:
                    writer.set_value(CONFIG_SECTION, DEFAULT_BRANCH_KEY, default_branch)
        finally:
            repo.close()
        self.invalidate()

    def configure_remote_fetch(self) -> None:
        """Make origin fetch every branch (bare clones fetch none) and prune on fetch."""
        repo = git.Repo(self.bare_path)
        try:
            with repo.config_writer() as writer:
                if writer.has_section('remote "origin"'):
                    writer.set_value('remote "origin"', "fetch", ORIGIN_FETCH_REFSPEC)
                writer.set_value("fetch", "prune", "true")
        finally:
            repo.close()
