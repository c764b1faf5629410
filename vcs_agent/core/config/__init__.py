"""Configuration management for the VCS scan agent."""

from pathlib import Path

from pydantic import ValidationError

from vcs_agent.core.config.loader import ConfigLoader
from vcs_agent.core.config.settings import (
    AgentSettings,
    GitSettings,
    LoggingSettings,
    PipelineSettings,
    Settings,
    get_settings,
)
from vcs_agent.core.exceptions.errors import ConfigurationError
from vcs_agent.models.config import AgentConfig

__all__ = [
    "AgentSettings",
    "ConfigLoader",
    "GitSettings",
    "LoggingSettings",
    "PipelineSettings",
    "Settings",
    "get_settings",
    "load_agent_config",
]


def load_agent_config(
    config_path: Path | str | None = None,
    settings: AgentSettings | None = None,
) -> AgentConfig:
    """Load the agent configuration.

    Priority:
    1. Explicit config_path
    2. Base64-encoded YAML in the configured environment variable
    3. The configured config file

    Args:
        config_path: Optional explicit path to the YAML file.
        settings: Agent settings. Uses global settings if not provided.

    Returns:
        Validated AgentConfig.

    Raises:
        ConfigurationError: If no configuration is found or it is invalid.
    """
    # Lazy import; the logger depends on settings from this package
    from vcs_agent.core.logger.logger import get_logger

    logger = get_logger(__name__)
    settings = settings or get_settings().agent
    loader = ConfigLoader()

    data = None
    if config_path is None:
        data = loader.load_env(settings.config_env_var)
        if data is not None:
            logger.info(f"Loaded agent config from environment variable '{settings.config_env_var}'")

    if data is None:
        path = Path(config_path) if config_path else settings.config_path
        if not path.is_file():
            raise ConfigurationError(
                f"Agent config file '{path.name}' is not found in '{path}'",
                config_key="config_path",
                details={"path": str(path)},
            )
        logger.info(f"Found config file at '{path}'")
        data = loader.load(path)

    try:
        return AgentConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid agent configuration",
            details={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        ) from e
