"""Tests for GitRevisionHistory."""

from pathlib import Path

import pytest
from git import Repo

from vcs_agent.core.exceptions.errors import GitError
from vcs_agent.vcs.history import GitRevisionHistory
from vcs_agent.vcs.resolver import CommitResolver


class TestGitRevisionHistory:
    """Tests for GitRevisionHistory class."""

    def test_walk_commits_newest_first(
        self, origin_repo: tuple[Path, Repo, list[str]]
    ) -> None:
        """Walking yields the branch's commits newest-first."""
        _, repo, hashes = origin_repo
        history = GitRevisionHistory(repo)

        walked = [c.hash for c in history.walk_commits()]

        assert walked == list(reversed(hashes))

    def test_walk_commits_restarts(self, origin_repo: tuple[Path, Repo, list[str]]) -> None:
        """Each call starts a fresh walk from HEAD."""
        _, repo, hashes = origin_repo
        history = GitRevisionHistory(repo)

        first = next(iter(history.walk_commits()))
        again = next(iter(history.walk_commits()))

        assert first.hash == again.hash == hashes[-1]
        assert first.summary == "Commit 3"

    def test_resolve_commit(self, origin_repo: tuple[Path, Repo, list[str]]) -> None:
        """Known hashes resolve; unknown ones return None."""
        _, repo, hashes = origin_repo
        history = GitRevisionHistory(repo)

        assert history.resolve_commit(hashes[0]).hash == hashes[0]
        assert history.resolve_commit("deadbeef" * 5) is None
        assert history.resolve_commit("not-a-hash") is None

    def test_checkout_remote_branch(self, cloned_repo: Repo) -> None:
        """Checking out a branch moves HEAD to the remote branch tip."""
        history = GitRevisionHistory(cloned_repo)

        history.checkout_branch("dev")

        assert cloned_repo.head.is_detached
        assert next(iter(history.walk_commits())).summary == "Dev commit"

    def test_checkout_local_branch(self, origin_repo: tuple[Path, Repo, list[str]]) -> None:
        """A branch without a remote falls back to the local head."""
        _, repo, _ = origin_repo
        history = GitRevisionHistory(repo)

        history.checkout_branch("dev")

        assert next(iter(history.walk_commits())).summary == "Dev commit"

    def test_checkout_missing_branch_raises(self, cloned_repo: Repo) -> None:
        """Unknown branches raise GitError."""
        history = GitRevisionHistory(cloned_repo)

        with pytest.raises(GitError, match="Branch not found"):
            history.checkout_branch("nonexistent-branch")

    def test_checkout_commit(
        self, origin_repo: tuple[Path, Repo, list[str]], cloned_repo: Repo
    ) -> None:
        """Checking out a commit detaches HEAD at that commit."""
        _, _, hashes = origin_repo
        history = GitRevisionHistory(cloned_repo)

        history.checkout_commit(hashes[0])

        assert cloned_repo.head.is_detached
        assert cloned_repo.head.commit.hexsha == hashes[0]

    def test_checkout_unknown_commit_raises(self, cloned_repo: Repo) -> None:
        """Unknown commits raise GitError."""
        history = GitRevisionHistory(cloned_repo)

        with pytest.raises(GitError, match="Failed to checkout commit"):
            history.checkout_commit("deadbeef" * 5)

    def test_resolver_over_git_history(
        self, origin_repo: tuple[Path, Repo, list[str]], cloned_repo: Repo
    ) -> None:
        """The resolver works over a real repository."""
        _, repo, hashes = origin_repo
        history = GitRevisionHistory(cloned_repo)
        history.checkout_branch(repo.active_branch.name)

        result = CommitResolver().resolve(hashes[0], history)

        assert [c.hash for c in result.commits] == hashes[1:]
