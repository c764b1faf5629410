"""Pytest configuration and shared fixtures."""

import shutil
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import Generator

import pytest
from git import Repo

from vcs_agent.core.exceptions.errors import BuildRecordError, GitError, StepFailedError
from vcs_agent.models.scan import BuildIdentity, BuildRecord, Commit


def make_commit(index: int) -> Commit:
    """Create a commit with a deterministic 40-character hash."""
    return Commit(hash=f"{index:x}".rjust(2, "0") * 20, message=f"Commit {index}\n")


class FakeHistory:
    """In-memory RevisionHistory.

    Branches map to commit lists ordered oldest-first.
    """

    def __init__(self, branches: dict[str, list[Commit]]) -> None:
        self.branches = branches
        self.current: str | None = None
        self.checked_out: list[str] = []
        self.walks = 0
        self.fail_checkout: set[str] = set()
        self.fail_walk = False

    def checkout_branch(self, name: str) -> None:
        if name not in self.branches:
            raise GitError(f"Branch not found: {name}", git_ref=name)
        self.current = name

    def checkout_commit(self, commit_hash: str) -> None:
        if commit_hash in self.fail_checkout:
            raise GitError(f"Failed to checkout commit: {commit_hash}", git_ref=commit_hash)
        self.checked_out.append(commit_hash)

    def walk_commits(self) -> Iterator[Commit]:
        self.walks += 1
        if self.fail_walk:
            raise GitError("Failed to walk commit history")
        yield from reversed(self.branches[self.current or "main"])

    def resolve_commit(self, commit_hash: str) -> Commit | None:
        for commits in self.branches.values():
            for commit in commits:
                if commit.hash == commit_hash:
                    return commit
        return None


class FakeRecordStore:
    """In-memory BuildRecordStore."""

    def __init__(self, records: dict[str, BuildRecord] | None = None, error: bool = False) -> None:
        self.records = records or {}
        self.error = error
        self.requested: list[str] = []

    def fetch_latest(self, build_name: str) -> BuildRecord | None:
        self.requested.append(build_name)
        if self.error:
            raise BuildRecordError("Failed to download build", build_name=build_name)
        return self.records.get(build_name)


class RecordingExecutor:
    """BuildExecutor recording every step and failing on request.

    ``failures`` holds (step, commit_hash) pairs that raise StepFailedError.
    """

    def __init__(self, failures: set[tuple[str, str]] | None = None) -> None:
        self.failures = failures or set()
        self.calls: list[tuple[str, str, str]] = []

    def _record(self, step: str, identity: BuildIdentity) -> None:
        self.calls.append((step, identity.commit_hash, identity.build_number))
        if (step, identity.commit_hash) in self.failures:
            raise StepFailedError(f"Step '{step}' failed", step=step)

    def run_build(self, identity: BuildIdentity) -> None:
        self._record("build", identity)

    def collect_vcs_metadata(self, identity: BuildIdentity) -> None:
        self._record("collect-vcs", identity)

    def publish(self, identity: BuildIdentity) -> None:
        self._record("publish", identity)

    def scan(self, identity: BuildIdentity) -> None:
        self._record("scan", identity)

    def steps_for(self, commit_hash: str) -> list[str]:
        return [step for step, h, _ in self.calls if h == commit_hash]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory that is cleaned up after the test."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def commits() -> list[Commit]:
    """Three commits c1, c2, c3, oldest first."""
    return [make_commit(1), make_commit(2), make_commit(3)]


@pytest.fixture
def fake_history(commits: list[Commit]) -> FakeHistory:
    """In-memory history with a 'main' branch of three commits."""
    history = FakeHistory({"main": list(commits)})
    history.checkout_branch("main")
    return history


@pytest.fixture
def origin_repo(temp_dir: Path) -> Generator[tuple[Path, Repo, list[str]], None, None]:
    """Create a Git repository with three commits and a 'dev' branch.

    Yields:
        Tuple of (path, repo, commit hashes oldest-first on the default branch).
    """
    repo_path = temp_dir / "origin"
    repo_path.mkdir()
    repo = Repo.init(repo_path)

    hashes = []
    for i in range(1, 4):
        (repo_path / f"file{i}.txt").write_text(f"Content {i}\n")
        repo.index.add([f"file{i}.txt"])
        hashes.append(repo.index.commit(f"Commit {i}").hexsha)

    default_branch = repo.active_branch.name
    dev = repo.create_head("dev")
    dev.checkout()
    (repo_path / "dev.txt").write_text("dev\n")
    repo.index.add(["dev.txt"])
    repo.index.commit("Dev commit")
    repo.heads[default_branch].checkout()

    yield repo_path, repo, hashes
    repo.close()


@pytest.fixture
def cloned_repo(origin_repo: tuple[Path, Repo, list[str]], temp_dir: Path) -> Generator[Repo, None, None]:
    """Clone of origin_repo, so branches exist under 'origin/'."""
    repo_path, _, _ = origin_repo
    clone = Repo.clone_from(str(repo_path), str(temp_dir / "clone"))
    yield clone
    clone.close()
