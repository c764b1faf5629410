"""Tests for ScanAgent orchestration over a real local repository."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from git import Repo

from conftest import FakeRecordStore
from vcs_agent.core.config.settings import GitSettings, PipelineSettings, Settings
from vcs_agent.core.exceptions.errors import (
    BuildNumberParseError,
    BuildRecordError,
    CommandError,
    GitError,
)
from vcs_agent.models.config import AgentConfig
from vcs_agent.models.scan import BranchState, BuildRecord
from vcs_agent.pipeline.agent import ScanAgent
from vcs_agent.vcs.git_operations import GitOperations


@pytest.fixture
def agent_config(origin_repo: tuple[Path, Repo, list[str]]) -> AgentConfig:
    """Agent config tracking the default branch and 'dev' of origin_repo."""
    repo_path, repo, _ = origin_repo
    return AgentConfig.model_validate(
        {
            "projectName": "widgets",
            "buildCommand": "make",
            "vcs": {"url": str(repo_path), "branches": [repo.active_branch.name, "dev"]},
            "jfrog": {
                "artUrl": "https://acme.jfrog.io/artifactory",
                "user": "admin",
                "password": "pw",
                "repositories": {"maven": "libs"},
            },
        }
    )


def make_agent(
    config: AgentConfig,
    temp_dir: Path,
    continue_on_error: bool = True,
    build_number: str | None = None,
) -> tuple[ScanAgent, MagicMock]:
    settings = Settings(
        git=GitSettings(clone_dir=temp_dir / "project", recurse_submodules=False, retry_delay=0),
        pipeline=PipelineSettings(
            build_number=build_number,
            continue_on_error=continue_on_error,
            server_id="srv",
        ),
    )
    runner = MagicMock()
    agent = ScanAgent(
        config,
        settings=settings,
        git_operations=GitOperations(settings.git),
        client=MagicMock(),
        runner=runner,
    )
    return agent, runner


def commands(runner: MagicMock) -> list[list[str] | str]:
    return [c.args[0] for c in runner.run.call_args_list]


class TestScanAgentRun:
    """Tests for ScanAgent.run."""

    def test_first_run_scans_each_branch_head(
        self,
        agent_config: AgentConfig,
        origin_repo: tuple[Path, Repo, list[str]],
        temp_dir: Path,
    ) -> None:
        """Without previous builds every branch scans its newest commit."""
        _, repo, hashes = origin_repo
        main_branch = agent_config.vcs.branches[0]
        dev_head = repo.heads["dev"].commit.hexsha
        agent, runner = make_agent(agent_config, temp_dir)

        with patch(
            "vcs_agent.pipeline.agent.ArtifactoryBuildRecordStore",
            return_value=FakeRecordStore(),
        ):
            summary = agent.run()

        assert summary.success
        assert [r.branch for r in summary.results] == [main_branch, "dev"]
        assert all(r.state == BranchState.BRANCH_DONE for r in summary.results)
        assert summary.results[0].outcomes[0].identity.build_number == f"1.0-{hashes[-1][:8]}"
        assert summary.results[1].outcomes[0].identity.build_number == f"1.0-{dev_head[:8]}"
        assert summary.results[1].build_name == "widgets-dev"

        run_commands = commands(runner)
        assert run_commands[0][:4] == ["jfrog", "rt", "c", "srv"]
        assert run_commands[1][2] == "mvnc"
        assert run_commands.count("make") == 2
        assert [c[2] for c in run_commands if isinstance(c, list) and c[2] in ("bag", "bp", "bs")] == [
            "bag",
            "bp",
            "bs",
            "bag",
            "bp",
            "bs",
        ]
        assert run_commands[-1] == ["jfrog", "rt", "c", "delete", "srv", "--interactive=false"]
        assert not (temp_dir / "project").exists()

    def test_build_runs_in_clone(self, agent_config: AgentConfig, temp_dir: Path) -> None:
        """The build command runs inside the clone with the identity in its environment."""
        agent, runner = make_agent(agent_config, temp_dir, build_number="40")

        with patch(
            "vcs_agent.pipeline.agent.ArtifactoryBuildRecordStore",
            return_value=FakeRecordStore(),
        ):
            agent.run(branches=["dev"])

        build_calls = [c for c in runner.run.call_args_list if c.args[0] == "make"]
        assert len(build_calls) == 1
        assert build_calls[0].kwargs["cwd"] == (temp_dir / "project").resolve()
        assert build_calls[0].kwargs["env"]["JFROG_CLI_BUILD_NAME"] == "widgets-dev"
        assert build_calls[0].kwargs["env"]["JFROG_CLI_BUILD_NUMBER"].startswith("40.0-")

    def test_branch_failure_continues(self, agent_config: AgentConfig, temp_dir: Path) -> None:
        """A failing branch is reported and the next branch still runs."""
        agent, runner = make_agent(agent_config, temp_dir)

        with patch(
            "vcs_agent.pipeline.agent.ArtifactoryBuildRecordStore",
            return_value=FakeRecordStore(error=True),
        ):
            summary = agent.run()

        assert not summary.success
        assert not summary.aborted
        assert [f.branch for f in summary.failures] == agent_config.vcs.branches
        assert summary.failures[0].error_type == BuildRecordError.__name__
        assert summary.failures[1].details["branch"] == "dev"
        assert commands(runner)[-1][3] == "delete"

    def test_malformed_build_number_fails_only_its_branch(
        self, agent_config: AgentConfig, temp_dir: Path
    ) -> None:
        """A build number with non-ASCII digits is recorded as a branch failure."""
        main_branch = agent_config.vcs.branches[0]
        build_name = agent_config.branch_build_name(main_branch)
        records = {build_name: BuildRecord(name=build_name, number="².0-x", revision=None)}
        agent, _ = make_agent(agent_config, temp_dir)

        with patch(
            "vcs_agent.pipeline.agent.ArtifactoryBuildRecordStore",
            return_value=FakeRecordStore(records),
        ):
            summary = agent.run()

        assert [f.branch for f in summary.failures] == [main_branch]
        assert summary.failures[0].error_type == BuildNumberParseError.__name__
        assert [r.branch for r in summary.results] == ["dev"]
        assert summary.results[0].state == BranchState.BRANCH_DONE

    def test_fail_fast(self, agent_config: AgentConfig, temp_dir: Path) -> None:
        """With fail-fast the run stops at the first failed branch."""
        agent, runner = make_agent(agent_config, temp_dir, continue_on_error=False)

        with patch(
            "vcs_agent.pipeline.agent.ArtifactoryBuildRecordStore",
            return_value=FakeRecordStore(error=True),
        ):
            summary = agent.run()

        assert summary.aborted
        assert len(summary.failures) == 1
        assert commands(runner)[-1][3] == "delete"

    def test_unknown_branch_filter(self, agent_config: AgentConfig, temp_dir: Path) -> None:
        """Branches outside the configuration are ignored."""
        agent, _ = make_agent(agent_config, temp_dir)

        with patch(
            "vcs_agent.pipeline.agent.ArtifactoryBuildRecordStore",
            return_value=FakeRecordStore(),
        ):
            summary = agent.run(branches=["feature/x"])

        assert summary.results == []
        assert summary.failures == []

    def test_clone_failure_cleans_up(self, agent_config: AgentConfig, temp_dir: Path) -> None:
        """A failed clone is fatal and the server configuration is removed."""
        agent, runner = make_agent(agent_config, temp_dir)
        agent.git_operations = MagicMock()
        agent.git_operations.prepare_clone_dir.return_value = temp_dir / "project"
        agent.git_operations.clone.side_effect = GitError("Git operation failed after 3 attempts")

        with pytest.raises(GitError):
            agent.run()

        assert commands(runner)[-1][3] == "delete"

    def test_server_setup_failure(self, agent_config: AgentConfig, temp_dir: Path) -> None:
        """If the server cannot be configured nothing is cloned."""
        agent, runner = make_agent(agent_config, temp_dir)
        runner.run.side_effect = CommandError("Failed to start command", command="jfrog")

        with pytest.raises(CommandError):
            agent.run()

        assert not (temp_dir / "project").exists()


class TestScanAgentPlan:
    """Tests for ScanAgent.plan."""

    def test_plan_runs_no_commands(
        self,
        agent_config: AgentConfig,
        origin_repo: tuple[Path, Repo, list[str]],
        temp_dir: Path,
    ) -> None:
        """Planning resolves every branch without running external commands."""
        _, _, hashes = origin_repo
        agent, runner = make_agent(agent_config, temp_dir)

        with patch(
            "vcs_agent.pipeline.agent.ArtifactoryBuildRecordStore",
            return_value=FakeRecordStore(),
        ):
            plans = agent.plan()

        assert list(plans) == agent_config.vcs.branches
        assert [c.hash for c in plans[agent_config.vcs.branches[0]].commits] == [hashes[-1]]
        runner.run.assert_not_called()
