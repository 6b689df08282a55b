"""Display components for CLI using Rich."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from skiaboot.core.exceptions.errors import StepFailedError
from skiaboot.models.steps import PipelineResult, StepOutcome, StepStatus

console = Console()

BANNER = r"""
[bold cyan]
      _    _       _                 _
  ___| | _(_) __ _| |__   ___   ___ | |_
 / __| |/ / |/ _` | '_ \ / _ \ / _ \| __|
 \__ \   <| | (_| | |_) | (_) | (_) | |_
 |___/_|\_\_|\__,_|_.__/ \___/ \___/ \__|
[/bold cyan]
[dim]Idempotent Skia build environment bootstrap[/dim]
"""

STATUS_STYLES = {
    StepStatus.PENDING: "[yellow]pending[/]",
    StepStatus.SKIPPED: "[dim]skipped[/]",
    StepStatus.COMPLETED: "[green]completed[/]",
    StepStatus.FAILED: "[bold red]failed[/]",
}


def show_banner() -> None:
    """Display the skiaboot banner."""
    console.print()
    console.print(Panel(BANNER, border_style="cyan", padding=(0, 2)))
    console.print()


def show_success(title: str, message: str) -> None:
    """Display a success message."""
    console.print()
    console.print(
        Panel(
            f"[bold green]{escape(message)}[/]",
            title=f"[bold]{escape(title)}[/]",
            border_style="green",
        )
    )


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


def _outcome_table(title: str, outcomes: list[StepOutcome], show_duration: bool) -> Table:
    table = Table(title=f"[bold]{title}[/]")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Step", style="cyan")
    table.add_column("Status")
    if show_duration:
        table.add_column("Time", justify="right")

    for index, outcome in enumerate(outcomes, start=1):
        row = [str(index), outcome.name, STATUS_STYLES[outcome.status]]
        if show_duration:
            row.append(f"{outcome.duration_seconds:.1f}s" if outcome.status != StepStatus.SKIPPED else "-")
        table.add_row(*row)
    return table


def show_plan(outcomes: list[StepOutcome]) -> None:
    """Display which steps a run would execute.

    Args:
        outcomes: Planned outcomes, PENDING or SKIPPED.
    """
    console.print()
    console.print(_outcome_table("Bootstrap Plan", outcomes, show_duration=False))
    pending = sum(1 for o in outcomes if o.status == StepStatus.PENDING)
    console.print(f"[dim]{pending} of {len(outcomes)} step(s) would run[/]")


def show_result(result: PipelineResult) -> None:
    """Display the outcome of every step of a run."""
    console.print()
    console.print(_outcome_table("Bootstrap Result", result.outcomes, show_duration=True))


def show_failure(error: StepFailedError) -> None:
    """Display a failed step with the tool and exit status that caused it."""
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Step", escape(error.step_name))
    table.add_row("Error", escape(getattr(error.cause, "message", None) or str(error.cause)))
    if error.tool:
        table.add_row("Tool", escape(str(error.tool)))
    if error.exit_code is not None:
        table.add_row("Exit Code", str(error.exit_code))
    table.add_section()
    table.add_row("Hint", "[dim]Fix the problem and run again; completed steps are skipped.[/]")

    console.print()
    console.print(Panel(table, title="[bold red]Bootstrap Failed[/]", border_style="red"))
