"""Custom exception definitions for the VCS scan agent."""

from typing import Any


class VcsAgentError(Exception):
    """Base exception for all agent errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Error message.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message

    def add_context(self, **context: Any) -> None:
        """Attach context (branch, commit, step) without overwriting existing keys."""
        for key, value in context.items():
            if value is not None:
                self.details.setdefault(key, value)


class ConfigurationError(VcsAgentError):
    """Exception raised for configuration errors."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error.

        Args:
            message: Error message.
            config_key: Configuration key that caused the error.
            details: Additional error details.
        """
        details = details or {}
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details)


class GitError(VcsAgentError):
    """Exception raised when cloning, walking or checking out history fails."""

    def __init__(
        self,
        message: str,
        repo_url: str | None = None,
        git_ref: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize Git error.

        Args:
            message: Error message.
            repo_url: Repository URL that caused the error.
            git_ref: Git reference (branch/commit) involved.
            details: Additional error details.
        """
        details = details or {}
        if repo_url:
            details["repo_url"] = repo_url
        if git_ref:
            details["git_ref"] = git_ref
        super().__init__(message, details)


class BuildRecordError(VcsAgentError):
    """Exception raised when the latest build record cannot be looked up.

    "Not found" is not an error; this covers transport and lookup failures.
    """

    def __init__(
        self,
        message: str,
        build_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if build_name:
            details["build_name"] = build_name
        super().__init__(message, details)


class BuildNumberParseError(VcsAgentError):
    """Exception raised for a malformed build number."""

    def __init__(
        self,
        message: str,
        value: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize parse error.

        Args:
            message: Error message.
            value: The offending build-number string.
            details: Additional error details.
        """
        details = details or {}
        details["value"] = value
        super().__init__(message, details)
        self.value = value


class CommandError(VcsAgentError):
    """Exception raised when an external command fails."""

    def __init__(
        self,
        message: str,
        command: str | None = None,
        return_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if command:
            details["command"] = command
        if return_code is not None:
            details["return_code"] = return_code
        super().__init__(message, details)
        self.return_code = return_code


class StepFailedError(VcsAgentError):
    """Exception raised when a pipeline step fails for a commit."""

    def __init__(
        self,
        message: str,
        step: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize step error.

        Args:
            message: Error message.
            step: Name of the failing step (build, collect-vcs, publish, scan).
            details: Additional error details.
        """
        details = details or {}
        details["step"] = step
        super().__init__(message, details)
        self.step = step
