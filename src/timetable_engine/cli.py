"""CLI entry point for the timetable engine."""

import logging
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .exceptions import SchedulerError
from .scheduler import (
    EngineSettings,
    build_time_blocks,
    create_scheduler,
    export_schedule_json,
    generate_unscheduled_excel,
    load_snapshot,
)
from .scheduler.models import ScheduleResult, TimeSettings

app = typer.Typer(
    name="timetable-engine",
    help="Generate weekly university timetables",
    add_completion=False,
)
console = Console()

DEFAULT_OUTPUT = Path("output/schedule.json")


class Preset(str, Enum):
    """Engine presets."""

    default = "default"
    fast = "fast"
    quality = "quality"


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _show_summary(result: ScheduleResult, verbose: bool) -> None:
    status = "[bold green]✓[/bold green]" if result.success else "[bold red]✗[/bold red]"
    console.print(f"\n{status} {result.message}")
    console.print(f"  Schedule items: {result.scheduled_count}")
    console.print(f"  Unscheduled courses: {result.unscheduled_count}")
    console.print(f"  Success rate: {result.success_rate}%")
    console.print(f"  Seed: {result.seed}")

    if result.schedule:
        metrics = result.metrics
        console.print("\n[bold]Metrics:[/bold]")
        console.print(f"  Avg capacity margin: {metrics.avg_capacity_margin}%")
        console.print(f"  Max capacity waste: {metrics.max_capacity_waste}%")
        console.print(f"  Teacher load stddev: {metrics.teacher_load_stddev}")

    if result.statistics.by_day:
        console.print("\n[bold]Distribution by day:[/bold]")
        for day, count in result.statistics.by_day.items():
            console.print(f"  {day.capitalize()}: {count}")

    if result.lunch_overflow_warnings:
        console.print(
            f"\n[bold yellow]Fixed placements over lunch "
            f"({len(result.lunch_overflow_warnings)}):[/bold yellow]"
        )
        for warning in result.lunch_overflow_warnings:
            console.print(f"  [yellow]• {warning.code} {warning.day} {warning.time_range}[/yellow]")

    if result.unscheduled:
        table = Table(title=f"Unscheduled courses ({result.unscheduled_count})")
        table.add_column("Code", style="cyan")
        table.add_column("Course")
        table.add_column("Students", justify="right")
        table.add_column("Hours", justify="right")
        if verbose:
            table.add_column("Reason", style="yellow")

        shown = result.unscheduled if verbose else result.unscheduled[:10]
        for course in shown:
            row = [course.code, course.name, str(course.student_count), str(course.total_hours)]
            if verbose:
                row.append(course.reason)
            table.add_row(*row)
        console.print()
        console.print(table)
        if len(result.unscheduled) > len(shown):
            console.print(f"  [yellow]... and {len(result.unscheduled) - len(shown)} more[/yellow]")


@app.command()
def schedule(
    input_path: Annotated[
        Path,
        typer.Argument(help="Snapshot JSON file or configuration directory"),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("-o", "--output", help="Output JSON file path"),
    ] = None,
    preset: Annotated[
        Optional[Preset],
        typer.Option("--preset", help="Engine preset (overrides the snapshot's)"),
    ] = None,
    seed: Annotated[
        Optional[int],
        typer.Option("--seed", help="Random seed for reproducible runs"),
    ] = None,
    iterations: Annotated[
        Optional[int],
        typer.Option("--iterations", help="Hill climbing iterations"),
    ] = None,
    report: Annotated[
        Optional[Path],
        typer.Option("--report", help="Write the unscheduled courses report (.xlsx)"),
    ] = None,
    diagnostics: Annotated[
        bool,
        typer.Option(
            "--diagnostics/--no-diagnostics",
            help="Include per-window failure diagnostics in the JSON",
        ),
    ] = True,
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Show detailed output"),
    ] = False,
) -> None:
    """Generate a timetable from a snapshot."""
    _setup_logging(verbose)

    if not input_path.exists():
        console.print(f"[bold red]Error:[/bold red] File not found: {input_path}")
        raise typer.Exit(1)

    try:
        with console.status("[bold green]Loading snapshot..."):
            snapshot = load_snapshot(input_path)

        settings = snapshot.settings
        if preset is not None:
            settings = EngineSettings.from_preset(
                preset.value,
                time=settings.time,
                seed=settings.seed,
                allow_session_split=settings.allow_session_split,
                combine_theory_lab=settings.combine_theory_lab,
            )
        if seed is not None:
            settings.seed = seed
        if iterations is not None:
            settings.hill_climbing_iterations = iterations

        console.print(f"\n[bold]Timetable generation for:[/bold] {input_path.name}")
        console.print(f"  Courses: {len(snapshot.courses)}")
        console.print(f"  Classrooms: {len(snapshot.classrooms)}")
        console.print(f"  Preset: {settings.preset}")

        with console.status("[bold green]Generating timetable..."):
            scheduler = create_scheduler(snapshot.classrooms, settings)
            result = scheduler.schedule(snapshot.courses)
    except SchedulerError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    _show_summary(result, verbose)

    output_path = output or DEFAULT_OUTPUT
    if output_path.suffix != ".json":
        output_path = output_path.with_suffix(".json")
    with console.status(f"[bold green]Exporting to {output_path}..."):
        export_schedule_json(result, output_path, include_diagnostics=diagnostics)
    console.print(f"\n[bold green]✓[/bold green] Schedule exported to: {output_path}")

    if report:
        report_path = report if report.suffix == ".xlsx" else report.with_suffix(".xlsx")
        with console.status("[bold green]Writing unscheduled report..."):
            generate_unscheduled_excel(output_path, report_path)
        console.print(f"[bold green]✓[/bold green] Report written to: {report_path}")


@app.command()
def timegrid(
    slot: Annotated[int, typer.Option("--slot", help="Slot duration in minutes")] = 60,
    day_start: Annotated[str, typer.Option("--day-start", help="First block start (HH:MM)")] = "08:00",
    day_end: Annotated[str, typer.Option("--day-end", help="Latest block end (HH:MM)")] = "18:00",
    lunch_start: Annotated[str, typer.Option("--lunch-start", help="Lunch break start")] = "12:00",
    lunch_end: Annotated[str, typer.Option("--lunch-end", help="Lunch break end")] = "13:00",
) -> None:
    """Show the time blocks produced by the given time settings."""
    settings = TimeSettings(
        slot_duration=slot,
        day_start=day_start,
        day_end=day_end,
        lunch_start=lunch_start,
        lunch_end=lunch_end,
    )
    try:
        blocks = build_time_blocks(settings)
    except SchedulerError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    table = Table(title=f"Time blocks ({len(blocks)})")
    table.add_column("#", justify="right")
    table.add_column("Start", style="cyan")
    table.add_column("End", style="cyan")
    for i, block in enumerate(blocks, 1):
        table.add_row(str(i), block.start, block.end)
    console.print(table)


@app.command()
def report(
    result_file: Annotated[
        Path,
        typer.Argument(help="Schedule JSON file from the schedule command"),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("-o", "--output", help="Output Excel file path"),
    ] = None,
) -> None:
    """Render the unscheduled courses report from an exported schedule."""
    if not result_file.exists():
        console.print(f"[bold red]Error:[/bold red] File not found: {result_file}")
        raise typer.Exit(1)

    output_path = output or result_file.with_name(f"{result_file.stem}_unscheduled.xlsx")
    try:
        with console.status("[bold green]Generating report..."):
            generate_unscheduled_excel(result_file, output_path)
    except SchedulerError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    console.print(f"[bold green]✓[/bold green] Report written to: {output_path}")


if __name__ == "__main__":
    app()
