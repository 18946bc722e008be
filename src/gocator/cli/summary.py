"""Rich rendering of fleet outcomes and self-test runs."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from gocator.types import DeviceOutcome, ProfileResult, TestRun

YA = "[green]+[/green]"
NA = "[red]-[/red]"
WA = "[yellow]![/yellow]"


def _outcome_detail(outcome: DeviceOutcome) -> str:
    if outcome.skipped or outcome.result is None:
        return outcome.error
    result = outcome.result
    if isinstance(result, ProfileResult):
        detail = f"{len(result.coords)} points"
        if result.simulated:
            detail += f" (simulated, {result.error})"
        elif result.error:
            detail += f" ({result.error})"
        return detail
    return result.response or outcome.error


def print_outcomes(
    title: str, outcomes: list[DeviceOutcome], console: Console | None = None
):
    console = console or Console(color_system="standard")
    table = Table(title=title)
    table.add_column("")
    table.add_column("Device")
    table.add_column("Detail")
    for outcome in outcomes:
        if outcome.skipped:
            mark = WA
        elif outcome.succeeded:
            mark = YA
        else:
            mark = NA
        table.add_row(
            mark, escape(outcome.device_name), escape(_outcome_detail(outcome))
        )
    console.print(table)


def print_run_summary(run: TestRun, console: Console | None = None):
    """Print the step table and notes of a self-test run."""
    console = console or Console(color_system="standard")

    table = Table(show_header=True, box=None)
    table.add_column("")
    table.add_column("Step", no_wrap=True)
    table.add_column("Time (s)", justify="right")
    table.add_column("Notes")
    for step in run.steps:
        notes = [escape(note) for note in step.notes]
        if step.error:
            notes.insert(0, f"[red]{escape(step.error)}[/red]")
        table.add_row(
            YA if step.passed else NA,
            step.name,
            f"{step.duration_s:.3f}",
            "\n".join(notes),
        )

    if run.notes:
        table.add_row("", "", "", "")
        for note in run.notes:
            table.add_row(WA, "", "", escape(note))

    status = "[green]DONE[/green]" if run.passed else "[red]FAILED[/red]"
    console.print(
        Panel(
            table,
            title=f"Self-test {status} ({run.duration_s:.2f} s)",
            border_style="blue" if run.passed else "red",
            padding=(1, 2),
        )
    )
