"""Main CLI entry point for the VCS scan agent."""

from pathlib import Path

import click

from vcs_agent import __version__
from vcs_agent.cli.display import (
    console,
    show_banner,
    show_error,
    show_plan,
    show_run_summary,
    show_success,
)
from vcs_agent.core.config import get_settings, load_agent_config
from vcs_agent.core.exceptions.errors import VcsAgentError
from vcs_agent.core.logger.logger import setup_logging
from vcs_agent.pipeline.agent import ScanAgent


def _setup(verbose: bool) -> None:
    """Configure logging for a command."""
    settings = get_settings().logging
    if verbose:
        settings = settings.model_copy(update={"level": "DEBUG"})
    setup_logging(settings)


@click.group(invoke_without_command=True)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def main(ctx: click.Context, version: bool) -> None:
    """Build, publish and scan every new commit of the configured branches."""
    if version:
        console.print(f"vcs-agent version {__version__}")
        return
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command()
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False), help="Agent config file")
@click.option("--branch", "-b", "branches", multiple=True, help="Only scan this branch (repeatable)")
@click.option("--fail-fast", is_flag=True, help="Stop at the first failed branch")
@click.option("--verbose", is_flag=True, help="Verbose output")
def run(config_path: str | None, branches: tuple[str, ...], fail_fast: bool, verbose: bool) -> None:
    """Scan all commits published since the last run."""
    _setup(verbose)
    show_banner(__version__)

    try:
        config = load_agent_config(Path(config_path) if config_path else None)
        summary = ScanAgent(config).run(list(branches) or None, fail_fast=True if fail_fast else None)
    except VcsAgentError as e:
        show_error("Scan Failed", str(e))
        raise SystemExit(1) from e

    show_run_summary(summary)
    if not summary.success:
        show_error("Scan Failed", f"{len(summary.failures)} branch(es) failed")
        raise SystemExit(1)

    scanned = sum(len(r.scanned) for r in summary.results)
    skipped = sum(len(r.skipped) for r in summary.results)
    show_success("Scan Complete", f"Scanned {scanned} commit(s), skipped {skipped}")


@main.command()
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False), help="Agent config file")
@click.option("--branch", "-b", "branches", multiple=True, help="Only plan this branch (repeatable)")
@click.option("--verbose", is_flag=True, help="Verbose output")
def plan(config_path: str | None, branches: tuple[str, ...], verbose: bool) -> None:
    """Show the commits the next run would scan, without building anything."""
    _setup(verbose)

    try:
        config = load_agent_config(Path(config_path) if config_path else None)
        plans = ScanAgent(config).plan(list(branches) or None)
    except VcsAgentError as e:
        show_error("Plan Failed", str(e))
        raise SystemExit(1) from e

    show_plan(plans)


if __name__ == "__main__":
    main()
