"""Version control: commit history, frontier resolution and cloning."""

from vcs_agent.vcs.git_operations import GitOperations, authenticated_url
from vcs_agent.vcs.history import GitRevisionHistory, RevisionHistory, commit_from_git
from vcs_agent.vcs.resolver import CommitResolver

__all__ = [
    "CommitResolver",
    "GitOperations",
    "GitRevisionHistory",
    "RevisionHistory",
    "authenticated_url",
    "commit_from_git",
]
