"""
git-worktree-keeper - Safe provisioning and removal of git worktrees
"""

from .__version__ import __version__
from .context import RepoContext
from .cli.main import main

__all__ = ["RepoContext", "main", "__version__"]
