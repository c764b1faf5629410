"""Read-only views over a branch's commit graph."""

from collections.abc import Iterator
from typing import Protocol

from git import Repo
from git.exc import BadName, GitCommandError, GitError as GitPythonError
from git.objects.commit import Commit as GitCommit

from vcs_agent.core.exceptions.errors import GitError
from vcs_agent.core.logger.logger import get_logger
from vcs_agent.models.scan import Commit

logger = get_logger(__name__)


class RevisionHistory(Protocol):
    """Commit graph of the checked-out branch."""

    def checkout_branch(self, name: str) -> None:
        """Switch the working tree to the tip of a branch."""
        ...

    def checkout_commit(self, commit_hash: str) -> None:
        """Switch the working tree to a commit."""
        ...

    def walk_commits(self) -> Iterator[Commit]:
        """Yield commits newest-first; every call starts a new walk."""
        ...

    def resolve_commit(self, commit_hash: str) -> Commit | None:
        """Return the commit for a hash, or None if it does not exist."""
        ...


def commit_from_git(git_commit: GitCommit) -> Commit:
    """Convert a GitPython commit into a Commit model."""
    message = git_commit.message
    if isinstance(message, bytes):
        message = message.decode("utf-8", errors="replace")
    return Commit(
        hash=git_commit.hexsha,
        message=message or "",
        author=str(git_commit.author) if git_commit.author else "",
        committed_at=git_commit.committed_datetime,
    )


class GitRevisionHistory:
    """RevisionHistory backed by a GitPython repository."""

    def __init__(self, repo: Repo, remote: str = "origin") -> None:
        """Initialize the history view.

        Args:
            repo: Cloned repository.
            remote: Remote whose branches are checked out.
        """
        self.repo = repo
        self.remote = remote

    def checkout_branch(self, name: str) -> None:
        """Force checkout of ``<remote>/<name>``, falling back to a local head.

        Raises:
            GitError: If the branch does not exist or checkout fails.
        """
        logger.info(f"Checkout to '{name}' branch")

        remote_ref = f"{self.remote}/{name}"
        if remote_ref in [ref.name for ref in self.repo.refs]:
            target = remote_ref
        elif name in [head.name for head in self.repo.heads]:
            target = name
        else:
            raise GitError(f"Branch not found: {name}", git_ref=name)

        try:
            self.repo.git.checkout(target, force=True)
        except GitCommandError as e:
            raise GitError(
                f"Failed to checkout branch: {name}",
                git_ref=name,
                details={"error": str(e)},
            ) from e

    def checkout_commit(self, commit_hash: str) -> None:
        """Force a detached checkout of a commit.

        Raises:
            GitError: If checkout fails.
        """
        logger.info(f"Checkout to '{commit_hash}' commit")
        try:
            self.repo.git.checkout(commit_hash, force=True)
        except GitCommandError as e:
            raise GitError(
                f"Failed to checkout commit: {commit_hash}",
                git_ref=commit_hash,
                details={"error": str(e)},
            ) from e

    def walk_commits(self) -> Iterator[Commit]:
        """Lazily walk history from HEAD, newest-first.

        Raises:
            GitError: If the history cannot be read.
        """
        try:
            for git_commit in self.repo.iter_commits("HEAD"):
                yield commit_from_git(git_commit)
        except (GitCommandError, ValueError) as e:
            raise GitError(
                "Failed to walk commit history",
                git_ref="HEAD",
                details={"error": str(e)},
            ) from e

    def resolve_commit(self, commit_hash: str) -> Commit | None:
        """Return the commit for a hash, or None when it is not in the repository."""
        try:
            git_commit = self.repo.commit(commit_hash)
        except (BadName, ValueError, GitPythonError):
            return None
        return commit_from_git(git_commit)
