"""Build sequencing, build-tool strategies, execution and the per-branch driver."""

from vcs_agent.pipeline.agent import ScanAgent
from vcs_agent.pipeline.driver import ScanDriver
from vcs_agent.pipeline.executor import (
    BuildExecutor,
    CommandRunner,
    JfrogCliExecutor,
    PipelineStep,
)
from vcs_agent.pipeline.sequencer import BuildSequencer, next_build_number, parse_base
from vcs_agent.pipeline.tools import BuildTool, GradleTool, MavenTool, NpmTool, get_build_tool

__all__ = [
    "BuildExecutor",
    "BuildSequencer",
    "BuildTool",
    "CommandRunner",
    "GradleTool",
    "JfrogCliExecutor",
    "MavenTool",
    "NpmTool",
    "PipelineStep",
    "ScanAgent",
    "ScanDriver",
    "get_build_tool",
    "next_build_number",
    "parse_base",
]
