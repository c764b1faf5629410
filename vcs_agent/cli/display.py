"""Display components for CLI using Rich."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from vcs_agent.models.scan import CommitStatus, ResolutionReason, ResolutionResult, RunSummary

console = Console()

_REASON_TEXT = {
    ResolutionReason.INCREMENTAL: "new commits since last build",
    ResolutionReason.UP_TO_DATE: "up to date",
    ResolutionReason.NO_PRIOR_REVISION: "no previous build, latest commit only",
    ResolutionReason.REVISION_NOT_FOUND: "last revision missing (force push?), latest commit only",
    ResolutionReason.FULL_HISTORY: "no previous build, full history",
}


def show_banner(version: str) -> None:
    """Display the agent banner."""
    console.print()
    console.print(f"[bold cyan]vcs-agent[/] [dim]{version}[/]  incremental build, publish and scan")
    console.print()


def show_success(title: str, message: str) -> None:
    """Display a success message."""
    console.print()
    console.print(Panel(f"[bold green]{message}[/]", title=f"[bold]{title}[/]", border_style="green"))


def show_error(title: str, message: str) -> None:
    """Display an error message."""
    console.print()
    console.print(
        Panel(
            f"[bold red]{escape(message)}[/]",
            title=f"[bold]{escape(title)}[/]",
            border_style="red",
        )
    )


def show_plan(plans: dict[str, ResolutionResult]) -> None:
    """Display the commits each branch would scan."""
    table = Table(title="Pending Commits", show_lines=False)
    table.add_column("Branch", style="cyan")
    table.add_column("#", justify="right")
    table.add_column("Commit", style="yellow")
    table.add_column("Message")
    table.add_column("Reason", style="dim")

    for branch, resolution in plans.items():
        reason = _REASON_TEXT[resolution.reason]
        if resolution.is_empty:
            table.add_row(escape(branch), "-", "-", "[dim]nothing to scan[/]", reason)
            continue
        for index, commit in enumerate(resolution.commits):
            table.add_row(
                escape(branch) if index == 0 else "",
                str(index),
                commit.short_hash,
                escape(commit.summary),
                reason if index == 0 else "",
            )

    console.print(table)


def show_run_summary(summary: RunSummary) -> None:
    """Display per-branch results of a run."""
    table = Table(title="Scan Summary")
    table.add_column("Branch", style="cyan")
    table.add_column("Build")
    table.add_column("Result")

    for result in summary.results:
        if not result.outcomes:
            table.add_row(escape(result.branch), escape(result.build_name), "[dim]no new commits[/]")
            continue
        for outcome in result.outcomes:
            status = (
                "[green]scanned[/]"
                if outcome.status == CommitStatus.SCANNED
                else f"[yellow]skipped[/] [dim]{escape(outcome.error_message or '')}[/]"
            )
            table.add_row(escape(result.branch), escape(str(outcome.identity)), status)

    for failure in summary.failures:
        table.add_row(
            escape(failure.branch),
            escape(failure.build_name),
            f"[red]failed[/] [dim]{escape(failure.message)}[/]",
        )

    console.print(table)
