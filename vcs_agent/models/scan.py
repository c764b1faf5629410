"""Scan-related data models: commits, build records and pipeline results."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Length of the commit prefix stamped into build numbers
SHORT_HASH_LENGTH = 8


def to_short_hash(commit_hash: str) -> str:
    """Return the fixed-length prefix of a commit hash."""
    return commit_hash[:SHORT_HASH_LENGTH]


class Commit(BaseModel):
    """A commit read from history."""

    model_config = ConfigDict(frozen=True)

    hash: str = Field(description="Full commit hash")
    message: str = Field(default="", description="Commit message")
    author: str = Field(default="", description="Commit author")
    committed_at: datetime | None = Field(default=None, description="Commit timestamp")

    @property
    def short_hash(self) -> str:
        """Return the 8-character hash prefix."""
        return to_short_hash(self.hash)

    @property
    def summary(self) -> str:
        """Return the first line of the commit message."""
        return self.message.strip().splitlines()[0] if self.message.strip() else ""


class BuildRecord(BaseModel):
    """The most recently published build for a build name."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Build name")
    number: str = Field(description="Build number string")
    revision: str | None = Field(
        default=None,
        description="Commit the build was produced from, if recorded for the tracked repository",
    )
    vcs_url: str | None = Field(default=None, description="Repository URL the revision belongs to")


class ResolutionReason(str, Enum):
    """Why a resolution produced its commits."""

    INCREMENTAL = "incremental"
    UP_TO_DATE = "up_to_date"
    NO_PRIOR_REVISION = "no_prior_revision"
    REVISION_NOT_FOUND = "revision_not_found"
    FULL_HISTORY = "full_history"


class ResolutionResult(BaseModel):
    """Commits still to be scanned on a branch, oldest first."""

    model_config = ConfigDict(frozen=True)

    commits: tuple[Commit, ...] = Field(default=())
    reason: ResolutionReason
    last_revision: str | None = None

    @field_validator("commits")
    @classmethod
    def validate_unique(cls, v: tuple[Commit, ...]) -> tuple[Commit, ...]:
        """Reject duplicate commits."""
        hashes = [c.hash for c in v]
        if len(set(hashes)) != len(hashes):
            raise ValueError("Resolution contains duplicate commits")
        return v

    @property
    def is_empty(self) -> bool:
        """Return True when there is nothing to scan."""
        return not self.commits


class BuildIdentity(BaseModel):
    """Build name and number stamped on one commit's pipeline."""

    model_config = ConfigDict(frozen=True)

    build_name: str
    build_number: str
    commit_hash: str
    sequence_index: int = Field(ge=0)

    @property
    def commit_short_hash(self) -> str:
        """Return the 8-character commit prefix."""
        return to_short_hash(self.commit_hash)

    def __str__(self) -> str:
        return f"{self.build_name}/{self.build_number}"


class BranchState(str, Enum):
    """Per-branch driver states."""

    IDLE = "idle"
    CHECKED_OUT_BRANCH = "checked_out_branch"
    RESOLVING_HISTORY = "resolving_history"
    NO_WORK = "no_work"
    PER_COMMIT_LOOP = "per_commit_loop"
    BRANCH_DONE = "branch_done"
    FAILED = "failed"


class CommitStatus(str, Enum):
    """Outcome of one commit's pipeline."""

    SCANNED = "scanned"
    SKIPPED = "skipped"


class CommitOutcome(BaseModel):
    """Result of driving one commit through the pipeline."""

    commit: Commit
    identity: BuildIdentity
    status: CommitStatus
    error_message: str | None = None


class BranchScanResult(BaseModel):
    """Result of scanning one branch."""

    branch: str
    build_name: str
    state: BranchState
    resolution: ResolutionResult | None = None
    outcomes: list[CommitOutcome] = Field(default_factory=list)

    @property
    def scanned(self) -> list[CommitOutcome]:
        """Commits that went through the full pipeline."""
        return [o for o in self.outcomes if o.status == CommitStatus.SCANNED]

    @property
    def skipped(self) -> list[CommitOutcome]:
        """Commits whose build failed and were skipped."""
        return [o for o in self.outcomes if o.status == CommitStatus.SKIPPED]


class BranchFailure(BaseModel):
    """A branch aborted by a fatal error."""

    branch: str
    build_name: str
    error_type: str
    message: str
    details: dict = Field(default_factory=dict)


class RunSummary(BaseModel):
    """Outcome of a full agent run over all configured branches."""

    results: list[BranchScanResult] = Field(default_factory=list)
    failures: list[BranchFailure] = Field(default_factory=list)
    aborted: bool = False

    @property
    def success(self) -> bool:
        """Return True when no branch failed."""
        return not self.failures
