"""Tests for branch and remote ref resolution"""
import pytest

from git_worktree_keeper.models.branch import RemoteRef
from git_worktree_keeper.services.git.refs import RefResolver


def remote_refs(*refs):
    return "\n".join(refs) + "\n"


class TestFindRemoteRef:
    """Test remote-tracking ref lookup."""

    @pytest.mark.asyncio
    async def test_prefers_origin(self, fake_runner):
        fake_runner.on("for-each-ref", stdout=remote_refs("fork/feature", "origin/feature"))
        fake_runner.on("remote", "get-url")
        resolver = RefResolver(fake_runner)

        ref = await resolver.find_remote_ref("feature")
        assert ref == RemoteRef("origin", "feature")

    @pytest.mark.asyncio
    async def test_first_candidate_without_origin(self, fake_runner):
        fake_runner.on("for-each-ref", stdout=remote_refs("upstream/feature", "fork/feature"))
        fake_runner.on("remote", "get-url")
        resolver = RefResolver(fake_runner)

        assert (await resolver.find_remote_ref("feature")).qualified == "upstream/feature"

    @pytest.mark.asyncio
    async def test_remote_name_with_slash(self, fake_runner):
        fake_runner.on("for-each-ref", stdout=remote_refs("team/shared/feature"))
        fake_runner.on("remote", "get-url", "team/shared")
        resolver = RefResolver(fake_runner)

        ref = await resolver.find_remote_ref("feature")
        assert ref.remote == "team/shared"
        assert ref.branch == "feature"

    @pytest.mark.asyncio
    async def test_branch_name_with_slash(self, fake_runner):
        fake_runner.on("for-each-ref", stdout=remote_refs("origin/feature/login", "origin/login"))
        fake_runner.on("remote", "get-url")
        resolver = RefResolver(fake_runner)

        ref = await resolver.find_remote_ref("feature/login")
        assert ref == RemoteRef("origin", "feature/login")

    @pytest.mark.asyncio
    async def test_stale_remote_discarded(self, fake_runner):
        fake_runner.on("for-each-ref", stdout=remote_refs("gone/feature", "fork/feature"))
        fake_runner.on("remote", "get-url", "fork")
        fake_runner.fail("remote", "get-url", "gone", stderr="error: No such remote 'gone'")
        resolver = RefResolver(fake_runner)

        assert (await resolver.find_remote_ref("feature")).qualified == "fork/feature"

    @pytest.mark.asyncio
    async def test_only_stale_remotes(self, fake_runner):
        fake_runner.on("for-each-ref", stdout=remote_refs("gone/feature"))
        fake_runner.fail("remote", "get-url")
        resolver = RefResolver(fake_runner)

        assert await resolver.find_remote_ref("feature") is None

    @pytest.mark.asyncio
    async def test_head_and_partial_matches_excluded(self, fake_runner):
        fake_runner.on("for-each-ref", stdout=remote_refs("origin/HEAD", "origin/my-feature"))
        fake_runner.on("remote", "get-url")
        resolver = RefResolver(fake_runner)

        assert await resolver.find_remote_ref("HEAD") is None
        assert await resolver.find_remote_ref("feature") is None

    @pytest.mark.asyncio
    async def test_remotes_validated_concurrently(self, fake_runner):
        fake_runner.on("for-each-ref", stdout=remote_refs("a/x", "b/x", "c/x"))
        fake_runner.on("remote", "get-url")
        resolver = RefResolver(fake_runner)

        await resolver.find_remote_ref("x")
        assert fake_runner.max_in_flight == 3

    @pytest.mark.asyncio
    async def test_enumeration_failure(self, fake_runner):
        fake_runner.fail("for-each-ref")
        resolver = RefResolver(fake_runner)

        assert await resolver.find_remote_ref("feature") is None


class TestResolve:
    """Test combined local and remote resolution."""

    @pytest.mark.asyncio
    async def test_local_and_remote(self, fake_runner):
        fake_runner.on("show-ref", "--verify", "--quiet", "refs/heads/feature")
        fake_runner.on("for-each-ref", stdout=remote_refs("origin/feature"))
        fake_runner.on("remote", "get-url")
        resolver = RefResolver(fake_runner)

        resolution = await resolver.resolve("feature")
        assert resolution.local_exists is True
        assert resolution.remote_ref == RemoteRef("origin", "feature")

    @pytest.mark.asyncio
    async def test_nothing_found(self, fake_runner):
        fake_runner.fail("show-ref")
        fake_runner.on("for-each-ref", stdout="")
        resolver = RefResolver(fake_runner)

        resolution = await resolver.resolve("new-thing")
        assert resolution.local_exists is False
        assert resolution.remote_ref is None


class TestDetectDefaultBranch:
    """Test default branch detection order."""

    @pytest.mark.asyncio
    async def test_origin_head(self, fake_runner):
        fake_runner.on("symbolic-ref", stdout="refs/remotes/origin/trunk\n")
        assert await RefResolver(fake_runner).detect_default_branch() == "trunk"

    @pytest.mark.asyncio
    async def test_candidate_branch_lookup(self, fake_runner):
        fake_runner.fail("symbolic-ref")
        fake_runner.fail("show-ref")
        fake_runner.on("show-ref", "--verify", "--quiet", "refs/remotes/origin/main")
        assert await RefResolver(fake_runner).detect_default_branch() == "main"

    @pytest.mark.asyncio
    async def test_first_remote_branch(self, fake_runner):
        fake_runner.fail("symbolic-ref")
        fake_runner.fail("show-ref")
        fake_runner.on("branch", "-r", stdout="  origin/HEAD -> origin/stable\n  origin/stable\n")
        assert await RefResolver(fake_runner).detect_default_branch() == "stable"

    @pytest.mark.asyncio
    async def test_init_default_branch(self, fake_runner):
        fake_runner.fail("symbolic-ref")
        fake_runner.fail("show-ref")
        fake_runner.on("branch", "-r", stdout="")
        fake_runner.on("config", "init.defaultBranch", stdout="primary\n")
        assert await RefResolver(fake_runner).detect_default_branch() == "primary"

    @pytest.mark.asyncio
    async def test_fallback(self, fake_runner):
        assert await RefResolver(fake_runner).detect_default_branch() == "master"
