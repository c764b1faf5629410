"""Agent orchestration: set up the clone and JFrog CLI, then scan each configured branch."""

import shutil
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from vcs_agent.artifactory.build_record import ArtifactoryBuildRecordStore
from vcs_agent.artifactory.client import ArtifactoryClient
from vcs_agent.core.config.settings import Settings, get_settings
from vcs_agent.core.exceptions.errors import VcsAgentError
from vcs_agent.core.logger.logger import get_logger
from vcs_agent.models.config import AgentConfig
from vcs_agent.models.scan import BranchFailure, ResolutionResult, RunSummary
from vcs_agent.pipeline.driver import ScanDriver
from vcs_agent.pipeline.executor import CommandRunner, JfrogCliExecutor
from vcs_agent.pipeline.sequencer import BuildSequencer
from vcs_agent.pipeline.tools import resolve_build_command
from vcs_agent.vcs.git_operations import GitOperations
from vcs_agent.vcs.history import GitRevisionHistory
from vcs_agent.vcs.resolver import CommitResolver

logger = get_logger(__name__)


class ScanAgent:
    """Runs the incremental scan for every configured branch.

    Branches are processed sequentially in configuration order against a
    single working tree.
    """

    def __init__(
        self,
        config: AgentConfig,
        settings: Settings | None = None,
        git_operations: GitOperations | None = None,
        client: ArtifactoryClient | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        """Initialize the agent.

        Args:
            config: Agent configuration.
            settings: Runtime settings. Uses global settings if not provided.
            git_operations: Clone helper.
            client: Artifactory client.
            runner: Runner for external commands.
        """
        self.config = config
        self.settings = settings or get_settings()
        self.git_operations = git_operations or GitOperations(self.settings.git)
        self.client = client or ArtifactoryClient(config.jfrog)
        self.runner = runner or CommandRunner(timeout=self.settings.pipeline.command_timeout)

    def _branches(self, only: list[str] | None) -> list[str]:
        branches = self.config.vcs.branches
        if only:
            unknown = [b for b in only if b not in branches]
            if unknown:
                logger.warning(f"Ignoring branches not in the configuration: {', '.join(unknown)}")
            branches = [b for b in branches if b in only]
        return branches

    @contextmanager
    def _workspace(self) -> Iterator[tuple[GitRevisionHistory, Path]]:
        clone_dir = self.git_operations.prepare_clone_dir()
        try:
            repo = self.git_operations.clone(self.config.vcs, clone_dir)
            try:
                yield GitRevisionHistory(repo, remote=self.settings.git.remote), clone_dir
            finally:
                repo.close()
        finally:
            shutil.rmtree(clone_dir, ignore_errors=True)

    def _driver(self, history: GitRevisionHistory, executor: JfrogCliExecutor) -> ScanDriver:
        return ScanDriver(
            history=history,
            record_store=ArtifactoryBuildRecordStore(self.client, self.config.vcs.url),
            executor=executor,
            resolver=CommitResolver(self.settings.pipeline.full_history_on_first_run),
            sequencer=BuildSequencer(self.settings.pipeline.build_number),
        )

    def _executor(self, project_path: Path) -> JfrogCliExecutor:
        return JfrogCliExecutor(
            project_path=project_path,
            build_command=resolve_build_command(
                self.config.build_command, self.config.jfrog.repositories
            ),
            server_id=self.settings.pipeline.server_id,
            runner=self.runner,
        )

    def run(self, branches: list[str] | None = None, fail_fast: bool | None = None) -> RunSummary:
        """Scan the configured branches.

        Args:
            branches: Optional subset of configured branches to scan.
            fail_fast: Stop at the first failed branch. Defaults to the
                inverse of the continue_on_error setting.

        Returns:
            RunSummary with one result or failure per processed branch.

        Raises:
            VcsAgentError: If setup (server config, clone, tool config) fails.
        """
        if fail_fast is None:
            fail_fast = not self.settings.pipeline.continue_on_error

        summary = RunSummary()
        executor = self._executor(Path.cwd())
        executor.configure_server(self.config.jfrog)
        try:
            with self._workspace() as (history, clone_dir), self.client:
                executor.project_path = clone_dir
                executor.configure_build_tools(self.config.jfrog.repositories)
                driver = self._driver(history, executor)

                for branch in self._branches(branches):
                    build_name = self.config.branch_build_name(branch)
                    logger.info(f"The associated branch build-name is '{build_name}'")
                    try:
                        summary.results.append(driver.scan_branch(branch, build_name))
                    except VcsAgentError as e:
                        logger.error(f"Branch '{branch}' aborted: {e}")
                        summary.failures.append(
                            BranchFailure(
                                branch=branch,
                                build_name=build_name,
                                error_type=type(e).__name__,
                                message=e.message,
                                details=e.details,
                            )
                        )
                        if fail_fast:
                            summary.aborted = True
                            break
        finally:
            try:
                executor.delete_server()
            except VcsAgentError as e:
                logger.error(f"Failed to delete JFrog CLI server configuration: {e}")

        return summary

    def plan(self, branches: list[str] | None = None) -> dict[str, ResolutionResult]:
        """Resolve the commits each branch would scan, without building anything.

        Raises:
            VcsAgentError: On clone, checkout, lookup or history failures.
        """
        plans: dict[str, ResolutionResult] = {}
        with self._workspace() as (history, clone_dir), self.client:
            executor = JfrogCliExecutor(
                clone_dir, self.config.build_command, self.settings.pipeline.server_id, self.runner
            )
            driver = self._driver(history, executor)
            for branch in self._branches(branches):
                plans[branch] = driver.plan_branch(branch, self.config.branch_build_name(branch))
        return plans
