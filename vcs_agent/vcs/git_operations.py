"""Git clone operations with retry support."""

import shutil
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar
from urllib.parse import quote, urlsplit, urlunsplit

from git import Repo
from git.exc import GitCommandError

from vcs_agent.core.config.settings import GitSettings, get_settings
from vcs_agent.core.exceptions.errors import GitError
from vcs_agent.core.logger.logger import get_logger
from vcs_agent.models.config import VcsDetails

T = TypeVar("T")

logger = get_logger(__name__)


def authenticated_url(vcs: VcsDetails) -> str:
    """Return the repository URL with HTTP basic credentials embedded.

    Non-HTTP URLs (ssh, local paths) and configs without credentials are
    returned unchanged.
    """
    parts = urlsplit(vcs.url)
    if parts.scheme not in ("http", "https") or not (vcs.user or vcs.secret):
        return vcs.url

    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    user = quote(vcs.user or "git", safe="")
    netloc = f"{user}:{quote(vcs.secret, safe='')}@{host}" if vcs.secret else f"{user}@{host}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


class GitOperations:
    """Handles preparing the clone directory and cloning the tracked repository."""

    def __init__(self, settings: GitSettings | None = None) -> None:
        """Initialize Git operations.

        Args:
            settings: Git settings. Uses global settings if not provided.
        """
        self.settings = settings or get_settings().git

    def _retry_operation(
        self,
        operation: Callable[..., T],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Execute an operation with retry logic.

        Raises:
            GitError: If all retries fail.
        """
        last_error: Exception | None = None
        attempts = self.settings.retry_attempts

        for attempt in range(1, attempts + 1):
            try:
                return operation(*args, **kwargs)
            except GitCommandError as e:
                last_error = e
                logger.warning(f"Git operation failed (attempt {attempt}/{attempts}): {e.status}")
                if attempt < attempts:
                    logger.info(f"Retrying in {self.settings.retry_delay} seconds...")
                    time.sleep(self.settings.retry_delay)

        raise GitError(
            f"Git operation failed after {attempts} attempts",
            details={"last_error": getattr(last_error, "status", None)},
        )

    def prepare_clone_dir(self, path: Path | None = None) -> Path:
        """Create an empty directory for the clone, removing any previous one.

        Args:
            path: Clone directory. Uses the configured clone_dir if not provided.

        Returns:
            Absolute path of the empty directory.
        """
        clone_dir = (path or self.settings.clone_dir).resolve()
        if clone_dir.exists():
            logger.info(f"Removing previous clone at '{clone_dir}'")
            shutil.rmtree(clone_dir)
        clone_dir.mkdir(parents=True)
        return clone_dir

    def clone(self, vcs: VcsDetails, target_path: Path) -> Repo:
        """Clone the tracked repository.

        Args:
            vcs: Repository URL and credentials.
            target_path: Local path to clone into.

        Returns:
            Cloned Repo object.

        Raises:
            GitError: If clone fails.
        """
        logger.info(f"Cloning project '{vcs.url}' to '{target_path}'")

        clone_kwargs: dict[str, Any] = {
            "url": authenticated_url(vcs),
            "to_path": str(target_path),
        }
        if self.settings.recurse_submodules:
            clone_kwargs["multi_options"] = ["--recurse-submodules"]

        def _clone() -> Repo:
            return Repo.clone_from(**clone_kwargs)

        try:
            repo = self._retry_operation(_clone)
        except GitError as e:
            # Never leak the authenticated URL
            e.add_context(repo_url=vcs.url)
            raise

        # Build steps read .git/config from the working tree; keep the secret out of it
        if clone_kwargs["url"] != vcs.url:
            try:
                repo.remote(self.settings.remote).set_url(vcs.url)
            except (GitCommandError, ValueError) as e:
                repo.close()
                raise GitError(
                    "Failed to remove credentials from the cloned remote URL",
                    repo_url=vcs.url,
                ) from e

        logger.info(f"Successfully cloned {vcs.url}")
        return repo
