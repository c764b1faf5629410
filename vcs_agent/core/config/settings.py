"""Application settings using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vcs_agent.core.config.loader import ConfigLoader


class GitSettings(BaseSettings):
    """Git clone and checkout settings."""

    model_config = SettingsConfigDict(
        env_prefix="VCS_AGENT_GIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    remote: str = Field(
        default="origin",
        description="Remote name of the cloned repository",
    )
    clone_dir: Path = Field(
        default=Path("project"),
        description="Directory the tracked repository is cloned into",
    )
    recurse_submodules: bool = Field(
        default=True,
        description="Clone submodules recursively",
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Retry attempts for the clone",
    )
    retry_delay: int = Field(
        default=5,
        ge=0,
        le=60,
        description="Retry delay in seconds",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="VCS_AGENT_LOGGING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = Field(
        default="INFO",
        description="Log level",
    )
    format: str = Field(
        default="[%(name)s] %(message)s",
        description="Log format string",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path",
    )
    use_rich: bool = Field(
        default=True,
        description="Use Rich console for output",
    )

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("file", mode="before")
    @classmethod
    def validate_file(cls, v: str | None) -> Path | None:
        """Validate and convert file to Path."""
        if v is None or v == "":
            return None
        return Path(v)


class PipelineSettings(BaseSettings):
    """Build, publish and scan pipeline settings."""

    model_config = SettingsConfigDict(
        env_prefix="VCS_AGENT_PIPELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    server_id: str = Field(
        default="vcs-superhighway",
        description="JFrog CLI server configuration ID",
    )
    command_timeout: int = Field(
        default=3600,
        ge=10,
        description="Timeout for each external command in seconds",
    )
    full_history_on_first_run: bool = Field(
        default=False,
        description="Scan the whole branch history when no build was published yet",
    )
    continue_on_error: bool = Field(
        default=True,
        description="Continue with the next branch after a fatal branch error",
    )
    build_number: str | None = Field(
        default=None,
        validation_alias=AliasChoices("BUILD_NUMBER", "VCS_AGENT_PIPELINE_BUILD_NUMBER"),
        description="External build-number override for the first built branch",
    )

    @field_validator("build_number", mode="before")
    @classmethod
    def validate_build_number(cls, v: str | int | None) -> str | None:
        """Treat an empty override as unset."""
        if v is None or v == "":
            return None
        return str(v).strip()


class AgentSettings(BaseSettings):
    """Where the agent configuration is read from."""

    model_config = SettingsConfigDict(
        env_prefix="VCS_AGENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config_env_var: str = Field(
        default="JFROG_VCS_AGENT_CONFIG",
        description="Environment variable holding the base64-encoded agent config",
    )
    config_path: Path = Field(
        default=Path("agent_home") / "config" / "config.yaml",
        description="Agent config file used when the environment variable is unset",
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="VCS_AGENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    git: GitSettings = Field(default_factory=GitSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    agent: AgentSettings = Field(default_factory=AgentSettings)

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Load settings from YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            Settings instance with values from YAML.
        """
        loader = ConfigLoader(path)
        loader.load()

        return cls(
            git=GitSettings(**loader.get_section("git")),
            logging=LoggingSettings(**loader.get_section("logging")),
            pipeline=PipelineSettings(**loader.get_section("pipeline")),
            agent=AgentSettings(**loader.get_section("agent")),
        )

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from default locations.

        Priority: config/default.yaml > environment variables > .env > defaults

        The overlay file is looked up relative to the working directory, so an
        installed agent reads it from the directory it is started in.

        Returns:
            Settings instance.
        """
        default_path = Path("config") / "default.yaml"
        if default_path.exists():
            return cls.from_yaml(default_path)

        return cls()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    The external build-number override is therefore read once per process.
    """
    return Settings.load()
