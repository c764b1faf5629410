"""Data models module."""

from vcs_agent.models.config import AgentConfig, BuildToolType, JfrogDetails, VcsDetails
from vcs_agent.models.scan import (
    SHORT_HASH_LENGTH,
    BranchFailure,
    BranchScanResult,
    BranchState,
    BuildIdentity,
    BuildRecord,
    Commit,
    CommitOutcome,
    CommitStatus,
    ResolutionReason,
    ResolutionResult,
    RunSummary,
    to_short_hash,
)

__all__ = [
    "AgentConfig",
    "BuildToolType",
    "JfrogDetails",
    "VcsDetails",
    "SHORT_HASH_LENGTH",
    "BranchFailure",
    "BranchScanResult",
    "BranchState",
    "BuildIdentity",
    "BuildRecord",
    "Commit",
    "CommitOutcome",
    "CommitStatus",
    "ResolutionReason",
    "ResolutionResult",
    "RunSummary",
    "to_short_hash",
]
