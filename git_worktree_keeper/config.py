"""Configuration handling for git-worktree-keeper"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from git.config import GitConfigParser

from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)

CONFIG_SECTION = "gwt"
VERSION_KEY = "version"
DEFAULT_BRANCH_KEY = "defaultBranch"


@dataclass
class Config:
    """Runtime options for git-worktree-keeper with validation."""

    verbose: bool = False
    debug: bool = False

    # Fetch remotes before provisioning and before sync-filtered listings
    fetch: bool = True

    # Remote preferred when a branch name matches refs on several remotes
    preferred_remote: str = "origin"

    # Source branch for new branches when no default branch is configured
    fallback_branch: str = "master"

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_preferred_remote()
        self._validate_fallback_branch()

    def _validate_preferred_remote(self):
        """Validate preferred_remote is not empty."""
        if not self.preferred_remote or not self.preferred_remote.strip():
            raise ValueError("preferred_remote cannot be empty")
        self.preferred_remote = self.preferred_remote.strip()

    def _validate_fallback_branch(self):
        """Validate fallback_branch is not empty."""
        if not self.fallback_branch or not self.fallback_branch.strip():
            raise ValueError("fallback_branch cannot be empty")
        self.fallback_branch = self.fallback_branch.strip()

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "verbose": self.verbose,
            "debug": self.debug,
            "fetch": self.fetch,
            "preferred_remote": self.preferred_remote,
            "fallback_branch": self.fallback_branch,
        }


@dataclass(frozen=True)
class RepoSettings:
    """Settings stored in the bare repository's config under ``[gwt]``."""

    schema_version: Optional[str] = None
    default_branch: Optional[str] = None


def _strip_quotes(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _lookup(items: list, key: str) -> Optional[str]:
    # git config keys are case-insensitive
    for option, value in items:
        if option.lower() == key.lower():
            value = _strip_quotes(str(value))
            return value or None
    return None


def read_repo_settings(config_path: Union[str, Path]) -> RepoSettings:
    """Read the ``[gwt]`` section of a git config file.

    A missing file or section yields empty settings.
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        logger.debug(f"No config file at {config_path}")
        return RepoSettings()

    parser = GitConfigParser(str(config_path), read_only=True)
    try:
        parser.read()
        if not parser.has_section(CONFIG_SECTION):
            return RepoSettings()
        items = parser.items(CONFIG_SECTION)
    finally:
        parser.release()

    settings = RepoSettings(
        schema_version=_lookup(items, VERSION_KEY),
        default_branch=_lookup(items, DEFAULT_BRANCH_KEY),
    )
    logger.debug(f"Loaded settings from {config_path}: {settings}")
    return settings
