"""Build tool strategies.

Each supported build tool family knows how to point its JFrog CLI integration
at an Artifactory server and which build command to use by default.
"""

from abc import ABC, abstractmethod

from vcs_agent.core.exceptions.errors import ConfigurationError
from vcs_agent.models.config import BuildToolType


class BuildTool(ABC):
    """Strategy for one build tool family."""

    tool_type: BuildToolType
    # JFrog CLI command that writes the tool's global configuration
    config_command: str

    @abstractmethod
    def repository_args(self, repository: str) -> list[str]:
        """Return the resolve/deploy repository arguments."""

    @property
    @abstractmethod
    def default_build_command(self) -> str:
        """Build command used when the agent config does not define one."""

    def configure_args(self, server_id: str, repository: str) -> list[str]:
        """Return the JFrog CLI invocation configuring this tool globally.

        Args:
            server_id: JFrog CLI server configuration ID.
            repository: Artifactory repository used for resolution and deployment.
        """
        return [
            "jfrog",
            "rt",
            self.config_command,
            "--global",
            f"--server-id-resolve={server_id}",
            f"--server-id-deploy={server_id}",
            *self.repository_args(repository),
        ]


class MavenTool(BuildTool):
    tool_type = BuildToolType.MAVEN
    config_command = "mvnc"

    def repository_args(self, repository: str) -> list[str]:
        return [
            f"--repo-resolve-releases={repository}",
            f"--repo-resolve-snapshots={repository}",
            f"--repo-deploy-releases={repository}",
            f"--repo-deploy-snapshots={repository}",
        ]

    @property
    def default_build_command(self) -> str:
        return "jfrog rt mvn clean install"


class GradleTool(BuildTool):
    tool_type = BuildToolType.GRADLE
    config_command = "gradlec"

    def repository_args(self, repository: str) -> list[str]:
        return [f"--repo-resolve={repository}", f"--repo-deploy={repository}"]

    @property
    def default_build_command(self) -> str:
        return "jfrog rt gradle clean artifactoryPublish"


class NpmTool(BuildTool):
    tool_type = BuildToolType.NPM
    config_command = "npmc"

    def repository_args(self, repository: str) -> list[str]:
        return [f"--repo-resolve={repository}", f"--repo-deploy={repository}"]

    @property
    def default_build_command(self) -> str:
        return "jfrog rt npm-install && jfrog rt npm-publish"


BUILD_TOOLS: dict[BuildToolType, type[BuildTool]] = {
    BuildToolType.MAVEN: MavenTool,
    BuildToolType.GRADLE: GradleTool,
    BuildToolType.NPM: NpmTool,
}


def get_build_tool(tool_type: BuildToolType | str) -> BuildTool:
    """Return the strategy for a build tool.

    Raises:
        ConfigurationError: If the tool is not supported.
    """
    try:
        return BUILD_TOOLS[BuildToolType(tool_type)]()
    except (KeyError, ValueError) as e:
        raise ConfigurationError(
            f"Unsupported build tool: {tool_type}",
            config_key="jfrog.repositories",
            details={"supported": [t.value for t in BUILD_TOOLS]},
        ) from e


def resolve_build_command(build_command: str, repositories: dict[BuildToolType, str]) -> str:
    """Return the configured build command, or the default of the single configured tool.

    Raises:
        ConfigurationError: If no command is configured and it cannot be derived.
    """
    if build_command.strip():
        return build_command
    if len(repositories) == 1:
        return get_build_tool(next(iter(repositories))).default_build_command
    raise ConfigurationError(
        "buildCommand is required unless exactly one build tool is configured",
        config_key="buildCommand",
    )
