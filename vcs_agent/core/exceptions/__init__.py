"""Exception definitions module."""

from vcs_agent.core.exceptions.errors import (
    BuildNumberParseError,
    BuildRecordError,
    CommandError,
    ConfigurationError,
    GitError,
    StepFailedError,
    VcsAgentError,
)

__all__ = [
    "VcsAgentError",
    "ConfigurationError",
    "GitError",
    "BuildRecordError",
    "BuildNumberParseError",
    "CommandError",
    "StepFailedError",
]
