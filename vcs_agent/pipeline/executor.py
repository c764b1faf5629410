"""External command execution for the build, publish and scan steps.

The build name and number travel with each call: they are given to child
processes as explicit arguments or through the child's own environment, and
the agent's process environment is left untouched.
"""

import os
import subprocess
import time
from enum import Enum
from pathlib import Path
from typing import Protocol

from vcs_agent.core.exceptions.errors import CommandError, StepFailedError
from vcs_agent.core.logger.logger import get_logger
from vcs_agent.models.config import BuildToolType, JfrogDetails
from vcs_agent.models.scan import BuildIdentity
from vcs_agent.pipeline.tools import get_build_tool

logger = get_logger(__name__)

# Environment variables read by JFrog CLI build integrations
JFROG_BUILD_NAME_ENV = "JFROG_CLI_BUILD_NAME"
JFROG_BUILD_NUMBER_ENV = "JFROG_CLI_BUILD_NUMBER"

_SECRET_FLAGS = ("--password=", "--access-token=")


class PipelineStep(str, Enum):
    """Steps of one commit's pipeline."""

    BUILD = "build"
    COLLECT_VCS = "collect-vcs"
    PUBLISH = "publish"
    SCAN = "scan"


class BuildExecutor(Protocol):
    """The external build tool, one call per pipeline step."""

    def run_build(self, identity: BuildIdentity) -> None: ...

    def collect_vcs_metadata(self, identity: BuildIdentity) -> None: ...

    def publish(self, identity: BuildIdentity) -> None: ...

    def scan(self, identity: BuildIdentity) -> None: ...


def display_command(command: list[str] | str) -> str:
    """Render a command for logs with secret flags masked."""
    if isinstance(command, str):
        return command
    return " ".join(
        f"{arg.split('=', 1)[0]}=***" if arg.startswith(_SECRET_FLAGS) else arg for arg in command
    )


class CommandRunner:
    """Runs external commands, streaming their output to the agent's console."""

    def __init__(self, timeout: int = 3600) -> None:
        """Initialize the runner.

        Args:
            timeout: Maximum time for each command in seconds.
        """
        self.timeout = timeout

    def run(
        self,
        command: list[str] | str,
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        """Run a command to completion.

        Args:
            command: Argument list, or a string run through ``bash -c``.
            cwd: Working directory.
            env: Full environment of the child process.

        Raises:
            CommandError: If the command cannot start, times out or exits non-zero.
        """
        shown = display_command(command)
        args = ["bash", "-c", command] if isinstance(command, str) else command
        logger.debug(f"Running: {shown}")

        start_time = time.time()
        try:
            completed = subprocess.run(
                args,
                cwd=cwd,
                env=env,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandError(
                f"Command timed out after {self.timeout} seconds",
                command=shown,
            ) from e
        except OSError as e:
            raise CommandError(
                f"Failed to start command: {e}",
                command=shown,
            ) from e

        duration = time.time() - start_time
        if completed.returncode != 0:
            raise CommandError(
                f"Command exited with code {completed.returncode}",
                command=shown,
                return_code=completed.returncode,
                details={"duration_seconds": round(duration, 1)},
            )
        logger.debug(f"Command completed in {duration:.1f}s")


class JfrogCliExecutor:
    """BuildExecutor driving the JFrog CLI."""

    def __init__(
        self,
        project_path: Path,
        build_command: str,
        server_id: str = "vcs-superhighway",
        runner: CommandRunner | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            project_path: Working tree of the cloned project.
            build_command: Shell command building the project.
            server_id: JFrog CLI server configuration ID.
            runner: Command runner.
        """
        self.project_path = project_path
        self.build_command = build_command
        self.server_id = server_id
        self.runner = runner or CommandRunner()

    def configure_server(self, jfrog: JfrogDetails) -> None:
        """Configure JFrog CLI with the Artifactory server used by later commands."""
        logger.info("Setting up Artifactory server on agent")
        self.runner.run(
            [
                "jfrog",
                "rt",
                "c",
                self.server_id,
                "--interactive=false",
                f"--url={jfrog.art_url}",
                f"--user={jfrog.user}",
                f"--password={jfrog.password}",
            ]
        )

    def delete_server(self) -> None:
        """Remove the server configuration created by configure_server."""
        self.runner.run(["jfrog", "rt", "c", "delete", self.server_id, "--interactive=false"])

    def configure_build_tools(self, repositories: dict[BuildToolType, str]) -> None:
        """Point every configured build tool at its Artifactory repository."""
        for tool_type, repository in repositories.items():
            tool = get_build_tool(tool_type)
            logger.info(f"Configuring {tool_type.value} to use repository '{repository}'")
            self.runner.run(tool.configure_args(self.server_id, repository), cwd=self.project_path)

    def build_env(self, identity: BuildIdentity) -> dict[str, str]:
        """Return the build command's environment, carrying the build identity."""
        env = os.environ.copy()
        env[JFROG_BUILD_NAME_ENV] = identity.build_name
        env[JFROG_BUILD_NUMBER_ENV] = identity.build_number
        return env

    def _step(
        self,
        step: PipelineStep,
        command: list[str] | str,
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        try:
            self.runner.run(command, cwd=cwd, env=env)
        except CommandError as e:
            raise StepFailedError(
                f"Step '{step.value}' failed: {e.message}",
                step=step.value,
                details=dict(e.details),
            ) from e

    def _build_args(self, subcommand: str, identity: BuildIdentity) -> list[str]:
        return [
            "jfrog",
            "rt",
            subcommand,
            identity.build_name,
            identity.build_number,
            f"--server-id={self.server_id}",
        ]

    def run_build(self, identity: BuildIdentity) -> None:
        """Run the project's build command."""
        logger.info(f"Executing build command '{self.build_command}'...")
        self._step(
            PipelineStep.BUILD,
            self.build_command,
            cwd=self.project_path,
            env=self.build_env(identity),
        )

    def collect_vcs_metadata(self, identity: BuildIdentity) -> None:
        """Add the working tree's git details to the build-info."""
        logger.info("Collecting VCS details...")
        self._step(PipelineStep.COLLECT_VCS, self._build_args("bag", identity), cwd=self.project_path)

    def publish(self, identity: BuildIdentity) -> None:
        """Publish the build-info to Artifactory."""
        logger.info("Publishing the build to Artifactory...")
        self._step(PipelineStep.PUBLISH, self._build_args("bp", identity), cwd=self.project_path)

    def scan(self, identity: BuildIdentity) -> None:
        """Scan the published build with Xray."""
        logger.info("Scanning the published build with Xray...")
        self._step(PipelineStep.SCAN, self._build_args("bs", identity), cwd=self.project_path)
