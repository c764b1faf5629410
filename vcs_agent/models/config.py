"""Agent configuration models (the agent's config.yaml)."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BuildToolType(str, Enum):
    """Build tool families the agent can configure."""

    MAVEN = "maven"
    GRADLE = "gradle"
    NPM = "npm"


# Alternative spellings accepted in the repositories section
_BUILD_TOOL_ALIASES = {
    "mvn": BuildToolType.MAVEN,
}


class VcsDetails(BaseModel):
    """Tracked repository and branches."""

    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(description="Git repository URL")
    user: str = Field(default="", description="User for HTTPS authentication")
    password: str = Field(default="", description="Password for HTTPS authentication")
    token: str = Field(default="", description="Access token, preferred over password")
    branches: list[str] = Field(
        default_factory=list,
        description="Branches to scan, in processing order",
    )

    @property
    def secret(self) -> str:
        """Return the credential used for authentication."""
        return self.token or self.password

    @field_validator("user", "password", "token", mode="before")
    @classmethod
    def validate_optional_str(cls, v: Any) -> str:
        """Convert null YAML values to empty strings."""
        return "" if v is None else str(v)


class JfrogDetails(BaseModel):
    """Artifactory server and build naming."""

    model_config = ConfigDict(populate_by_name=True)

    art_url: str = Field(alias="artUrl", description="Artifactory base URL")
    user: str = Field(default="", description="Artifactory user")
    password: str = Field(default="", description="Artifactory password or API key")
    repositories: dict[BuildToolType, str] = Field(
        default_factory=dict,
        description="Resolve/deploy repository per build tool",
    )
    build_name: str = Field(
        default="${projectName}-${branch}",
        alias="buildName",
        description="Build name template",
    )

    @field_validator("user", "password", mode="before")
    @classmethod
    def validate_optional_str(cls, v: Any) -> str:
        """Convert null YAML values to empty strings."""
        return "" if v is None else str(v)

    @field_validator("repositories", mode="before")
    @classmethod
    def validate_repositories(cls, v: Any) -> Any:
        """Normalize build tool keys, accepting known aliases."""
        if not isinstance(v, dict):
            return v
        return {_BUILD_TOOL_ALIASES.get(str(k).lower(), str(k).lower()): repo for k, repo in v.items()}


class AgentConfig(BaseModel):
    """Top-level agent configuration."""

    model_config = ConfigDict(populate_by_name=True)

    project_name: str = Field(alias="projectName", description="Project name")
    build_command: str = Field(
        default="",
        alias="buildCommand",
        description="Shell command building the project",
    )
    vcs: VcsDetails
    jfrog: JfrogDetails

    def branch_build_name(self, branch: str) -> str:
        """Create the build name associated with a branch.

        Replaces ``${projectName}`` and ``${branch}`` in the build name template.
        """
        return self.jfrog.build_name.replace("${projectName}", self.project_name).replace(
            "${branch}", branch
        )
