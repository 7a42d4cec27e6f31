"""Tests for worktree list parsing"""
import pytest

from git_worktree_keeper.exceptions import ExternalCommandError, ValidationError
from git_worktree_keeper.models.branch import Attached, Detached
from git_worktree_keeper.models.worktree import WorktreeEntry
from git_worktree_keeper.services.git.worktrees import WorktreeService, parse_worktree_list


PORCELAIN = (
    "worktree /repo/.bare\n"
    "bare\n"
    "\n"
    "worktree /repo/main\n"
    "HEAD 1111111111111111111111111111111111111111\n"
    "branch refs/heads/main\n"
    "\n"
    "worktree /repo/feature\n"
    "HEAD 2222222222222222222222222222222222222222\n"
    "branch refs/heads/feature/login\n"
    "locked\n"
    "\n"
    "worktree /repo/scratch\n"
    "HEAD 3333333333333333333333333333333333333333\n"
    "detached\n"
    "prunable gitdir file points to non-existent location\n"
)


class TestParseWorktreeList:
    """Test parsing of ``git worktree list --porcelain``."""

    def test_empty_output(self):
        assert parse_worktree_list("") == []
        assert parse_worktree_list("\n\n") == []

    def test_parses_all_stanzas_in_order(self):
        entries = parse_worktree_list(PORCELAIN)
        assert [e.path for e in entries] == [
            "/repo/.bare", "/repo/main", "/repo/feature", "/repo/scratch"
        ]

    def test_bare_entry(self):
        bare = parse_worktree_list(PORCELAIN)[0]
        assert bare.is_bare is True
        assert bare.commit is None

    def test_branch_prefix_stripped(self):
        entries = parse_worktree_list(PORCELAIN)
        assert entries[1].branch == Attached("main")
        assert entries[2].branch == Attached("feature/login")
        assert entries[2].branch_name == "feature/login"

    def test_locked_without_reason(self):
        feature = parse_worktree_list(PORCELAIN)[2]
        assert feature.is_locked is True
        assert feature.lock_reason == ""

    def test_detached_and_prunable_with_reason(self):
        scratch = parse_worktree_list(PORCELAIN)[3]
        assert scratch.branch == Detached()
        assert scratch.branch_name is None
        assert scratch.is_prunable is True
        assert scratch.prunable_reason == "gitdir file points to non-existent location"

    def test_locked_with_reason(self):
        output = "worktree /repo/wip\nHEAD abc\nbranch refs/heads/wip\nlocked on a usb drive\n"
        entry = parse_worktree_list(output)[0]
        assert entry.lock_reason == "on a usb drive"

    def test_stanza_without_path_dropped(self):
        output = "HEAD abc\nbranch refs/heads/orphan\n\nworktree /repo/ok\nHEAD def\ndetached\n"
        entries = parse_worktree_list(output)
        assert len(entries) == 1
        assert entries[0].name == "ok"

    def test_unknown_lines_ignored(self):
        output = "worktree /repo/x\nHEAD abc\nbranch refs/heads/x\nsomething-new value\n"
        entries = parse_worktree_list(output)
        assert entries[0].branch == Attached("x")
        assert not entries[0].is_locked

    def test_crlf_line_endings(self):
        output = (
            "worktree /a\r\nHEAD 1\r\nbranch refs/heads/x\r\n\r\n"
            "worktree /b\r\nbare\r\n"
        )
        entries = parse_worktree_list(output)
        assert [e.path for e in entries] == ["/a", "/b"]
        assert entries[0].branch == Attached("x")
        assert entries[1].is_bare is True
        assert entries[1].branch == Detached()

    def test_serialized_entries_parse_back(self):
        """Entries written with to_porcelain read back unchanged."""
        entries = parse_worktree_list(PORCELAIN)
        text = "\n\n".join(e.to_porcelain() for e in entries)
        assert parse_worktree_list(text) == entries


class TestWorktreeEntry:
    """Test WorktreeEntry properties."""

    def test_name_is_last_path_component(self):
        entry = WorktreeEntry(path="/repo/feature-x", commit="abcdef0123")
        assert entry.name == "feature-x"
        assert entry.short_commit == "abcdef0"

    def test_defaults(self):
        entry = WorktreeEntry(path="/repo/x")
        assert entry.branch == Detached()
        assert str(entry.branch) == "(detached)"
        assert entry.short_commit == ""
        assert not entry.is_locked
        assert not entry.is_prunable


class TestWorktreeService:
    """Test WorktreeService against a fake runner."""

    @pytest.mark.asyncio
    async def test_list_excludes_bare(self, fake_runner, temp_dir):
        fake_runner.on("worktree", "list", "--porcelain", stdout=PORCELAIN)
        service = WorktreeService(fake_runner, temp_dir)

        entries = await service.list_worktrees()
        assert [e.name for e in entries] == ["main", "feature", "scratch"]

        everything = await service.list_worktrees(include_bare=True)
        assert len(everything) == 4

    @pytest.mark.asyncio
    async def test_list_failure_raises(self, fake_runner, temp_dir):
        fake_runner.fail("worktree", "list", stderr="fatal: not a git repository")
        service = WorktreeService(fake_runner, temp_dir)

        with pytest.raises(ExternalCommandError, match="Failed to list worktrees"):
            await service.list_worktrees()

    @pytest.mark.asyncio
    async def test_find_by_name_then_branch(self, fake_runner, temp_dir):
        fake_runner.on("worktree", "list", "--porcelain", stdout=PORCELAIN)
        service = WorktreeService(fake_runner, temp_dir)

        assert (await service.find("feature")).path == "/repo/feature"
        assert (await service.find("feature/login")).path == "/repo/feature"
        assert await service.find("nope") is None

    @pytest.mark.asyncio
    async def test_lock_passes_reason(self, fake_runner, temp_dir):
        fake_runner.on("worktree", "lock")
        service = WorktreeService(fake_runner, temp_dir)

        await service.lock("feature", "in review")
        assert fake_runner.calls[-1] == ("worktree", "lock", "--reason", "in review", "feature")

    @pytest.mark.asyncio
    async def test_unlock_failure_raises(self, fake_runner, temp_dir):
        fake_runner.fail("worktree", "unlock", stderr="fatal: 'x' is not locked")
        service = WorktreeService(fake_runner, temp_dir)

        with pytest.raises(ExternalCommandError) as excinfo:
            await service.unlock("x")
        assert "is not locked" in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_move_outside_root_rejected(self, fake_runner, temp_dir):
        service = WorktreeService(fake_runner, temp_dir)

        with pytest.raises(ValidationError, match="inside the repo root"):
            await service.move("feature", "../elsewhere")
        with pytest.raises(ValidationError):
            await service.move("feature", ".")
        assert fake_runner.calls == []

    @pytest.mark.asyncio
    async def test_move_inside_root(self, fake_runner, temp_dir):
        fake_runner.on("worktree", "move")
        service = WorktreeService(fake_runner, temp_dir)

        dest = await service.move("feature", "archive/feature")
        assert dest == temp_dir / "archive" / "feature"
        assert fake_runner.calls[-1] == ("worktree", "move", "feature", str(dest))
