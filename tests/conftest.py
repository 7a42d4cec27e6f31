"""Pytest fixtures for git-worktree-keeper tests"""
import asyncio
import tempfile
from pathlib import Path

import pytest
import git

from git_worktree_keeper.__version__ import __version__
from git_worktree_keeper.config import Config
from git_worktree_keeper.context import RepoContext
from git_worktree_keeper.services.git.runner import CommandResult


class FakeGitRunner:
    """Stand-in for GitRunner that answers from canned results.

    Responses are keyed by an argument prefix, matched after any leading
    ``-C <path>``. The longest matching prefix wins. Unmatched commands fail.
    """

    def __init__(self):
        self.responses = []
        self.calls = []
        self.passthrough_calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    def on(self, *prefix, returncode=0, stdout="", stderr=""):
        self.responses.append((tuple(prefix), returncode, stdout, stderr))
        return self

    def fail(self, *prefix, stderr="fatal: error"):
        return self.on(*prefix, returncode=1, stderr=stderr)

    @staticmethod
    def _strip_cwd(args):
        if len(args) >= 2 and args[0] == "-C":
            return args[2:]
        return args

    def _match(self, args):
        stripped = self._strip_cwd(args)
        best = None
        for prefix, returncode, stdout, stderr in self.responses:
            if stripped[: len(prefix)] == prefix:
                if best is None or len(prefix) >= len(best[0]):
                    best = (prefix, returncode, stdout, stderr)
        if best is None:
            return 1, "", f"fatal: unexpected command: {' '.join(args)}"
        return best[1:]

    async def run(self, *args, cwd=None):
        self.calls.append(tuple(args))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
        finally:
            self.in_flight -= 1
        returncode, stdout, stderr = self._match(tuple(args))
        return CommandResult(args=tuple(args), returncode=returncode, stdout=stdout, stderr=stderr)

    async def passthrough(self, command, cwd):
        self.passthrough_calls.append((list(command), cwd))
        return 0

    def called(self, *prefix):
        """True if any call (after ``-C <path>``) starts with ``prefix``."""
        return any(self._strip_cwd(call)[: len(prefix)] == prefix for call in self.calls)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def mock_config():
    """Create a test configuration."""
    return Config(verbose=False, debug=False, fetch=True)


@pytest.fixture
def fake_runner():
    return FakeGitRunner()


@pytest.fixture
def managed_root(temp_dir, monkeypatch):
    """A gwt layout on disk (``.bare`` with a [gwt] section) without real history."""
    root = temp_dir / "project"
    bare = root / ".bare"
    bare.mkdir(parents=True)
    (bare / "config").write_text(
        "[core]\n"
        "\tbare = true\n"
        "[gwt]\n"
        f"\tversion = {__version__}\n"
        "\tdefaultBranch = main\n"
    )
    (root / ".git").write_text("gitdir: ./.bare\n")
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def fake_context(managed_root, fake_runner, mock_config):
    """RepoContext over ``managed_root`` whose git commands go to ``fake_runner``."""
    return RepoContext(managed_root, runner=fake_runner, config=mock_config)


@pytest.fixture
def origin_repo(temp_dir):
    """Create a real Git repository acting as the remote."""
    repo_path = temp_dir / "origin"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    # Rename master to main if needed
    try:
        repo.git.branch('-M', 'main')
    except git.GitCommandError:
        pass

    repo.git.branch('remote-only')

    yield repo

    repo.close()


@pytest.fixture
def bare_layout(temp_dir, origin_repo, monkeypatch):
    """Create a real bare-layout repository cloned from ``origin_repo``.

    Returns the RepoContext (real GitRunner) rooted at the layout.
    """
    root = temp_dir / "project"
    root.mkdir()
    bare = git.Repo.clone_from(origin_repo.working_dir, root / ".bare", bare=True)
    bare.config_writer().set_value("user", "name", "Test User").release()
    bare.config_writer().set_value("user", "email", "test@example.com").release()
    bare.close()
    (root / ".git").write_text("gitdir: ./.bare\n")

    monkeypatch.chdir(root)
    context = RepoContext(root, config=Config())
    context.configure_remote_fetch()
    context.write_settings(version=__version__, default_branch="main")

    repo = git.Repo(root / ".bare")
    repo.git.fetch("origin")
    # A bare clone copies every branch locally; keep only the default
    repo.git.branch("-D", "remote-only")
    repo.close()

    return context
