"""Typer CLI for taskboard."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from taskboard.config import Settings
from taskboard.dependencies import dependents, topological_order
from taskboard.errors import TaskboardError
from taskboard.logging_setup import setup_logging
from taskboard.models import Priority, Project
from taskboard.persistence import JsonStore
from taskboard.store import EntityStore

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="taskboard",
    help="Track projects, tasks, dependencies and upcoming due dates.",
    no_args_is_help=True,
)
console = Console()

PRIORITY_STYLE = {
    Priority.HIGH: "red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "green",
}


@app.callback()
def main_callback(
    ctx: typer.Context,
    db: Annotated[Optional[Path], typer.Option("--db", help="Path of the JSON database")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output to stderr")] = False,
) -> None:
    settings = Settings.from_env()
    if db is not None:
        settings.db_path = db
    if verbose:
        settings.log_level = "DEBUG"
    setup_logging(settings.log_level)
    ctx.obj = settings


def _open_board(ctx: typer.Context) -> EntityStore:
    """Load the database and save it back after every successful change."""
    settings: Settings = ctx.obj
    db = JsonStore(settings.db_path)
    try:
        board = EntityStore(db.load(), reminder_days=settings.reminder_days)
    except (ValueError, KeyError) as e:
        console.print(f"[red]Could not load {escape(str(db.db_path))}: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    board.subscribe(lambda b: db.save(b.projects))
    return board


@contextmanager
def _reporting_errors() -> Iterator[None]:
    try:
        yield
    except TaskboardError as e:
        logger.debug("Rejected: %s", e)
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)


def _parse_date(raw: str) -> date | None:
    """YYYY-MM-DD, or 'none' / '' to clear."""
    if raw.strip().lower() in ("", "none"):
        return None
    try:
        return datetime.strptime(raw.strip(), "%Y-%m-%d").date()
    except ValueError:
        console.print(f"[red]Invalid date format '{escape(raw)}'. Use YYYY-MM-DD.[/red]")
        raise typer.Exit(1)


def _fmt_date(d: date | None) -> str:
    return d.isoformat() if d else "-"


def _priority_label(p: Priority) -> str:
    return f"[{PRIORITY_STYLE[p]}]{p.value}[/{PRIORITY_STYLE[p]}]"


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


@app.command("add-project")
def add_project(ctx: typer.Context, name: str) -> None:
    """Create a new project."""
    board = _open_board(ctx)
    with _reporting_errors():
        project = board.create_project(name)
    console.print(f"[green]Added project '{escape(project.name)}' as {project.id}[/green]")


@app.command("rename-project")
def rename_project(ctx: typer.Context, project_id: str, name: str) -> None:
    """Rename a project."""
    board = _open_board(ctx)
    with _reporting_errors():
        board.rename_project(project_id, name)
    console.print(f"[green]Renamed {project_id}.[/green]")


@app.command("project-dates")
def project_dates(
    ctx: typer.Context,
    project_id: str,
    start: Annotated[Optional[str], typer.Option(help="Start date (YYYY-MM-DD, or 'none' to clear)")] = None,
    end: Annotated[Optional[str], typer.Option(help="End date (YYYY-MM-DD, or 'none' to clear)")] = None,
) -> None:
    """Set the overall date range of a project. Omitted dates keep their value."""
    board = _open_board(ctx)
    with _reporting_errors():
        project = board.get_project(project_id)
        new_start = _parse_date(start) if start is not None else project.start_date
        new_end = _parse_date(end) if end is not None else project.end_date
        board.update_project_dates(project_id, new_start, new_end)
    console.print(
        f"[green]{project_id}: {_fmt_date(new_start)} to {_fmt_date(new_end)}[/green]"
    )


@app.command("delete-project")
def delete_project(ctx: typer.Context, project_id: str) -> None:
    """Delete a project together with all of its tasks."""
    board = _open_board(ctx)
    with _reporting_errors():
        board.delete_project(project_id)
    console.print(f"[green]Deleted {project_id}.[/green]")


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


@app.command("add-task")
def add_task(
    ctx: typer.Context,
    project_id: str,
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="Task name")] = None,
) -> None:
    """Add a task with default fields to a project."""
    board = _open_board(ctx)
    with _reporting_errors():
        task = board.create_task(project_id, name)
    console.print(f"[green]Added '{escape(task.name)}' as {task.id} in {project_id}[/green]")


@app.command("set")
def set_field(
    ctx: typer.Context,
    project_id: str,
    task_id: str,
    field: Annotated[str, typer.Argument(help="name, priority, start_date, end_date, assigned_to or dependencies")],
    value: Annotated[str, typer.Argument(help="New value; dependencies are comma-separated task IDs")],
) -> None:
    """Change one field of a task.

    Dates use YYYY-MM-DD ('none' clears them). An empty dependency value
    removes every dependency.
    """
    field = field.replace("-", "_")
    parsed: object = value
    if field in ("start_date", "end_date"):
        parsed = _parse_date(value)
    elif field == "dependencies":
        parsed = {part.strip() for part in value.split(",") if part.strip()}

    board = _open_board(ctx)
    with _reporting_errors():
        board.update_field(project_id, task_id, field, parsed)
    console.print(f"[green]Updated {task_id}.[/green]")


@app.command("delete-task")
def delete_task(ctx: typer.Context, project_id: str, task_id: str) -> None:
    """Delete a task and remove it from dependency lists."""
    board = _open_board(ctx)
    with _reporting_errors():
        board.delete_task(project_id, task_id)
    console.print(f"[green]Deleted {task_id}.[/green]")


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


def _print_project(project: Project) -> None:
    span = ""
    if project.start_date or project.end_date:
        span = f"  [dim]{_fmt_date(project.start_date)} to {_fmt_date(project.end_date)}[/dim]"
    console.print(f"\n[bold]{project.id}[/bold]  {escape(project.name)}{span}")
    if not project.tasks:
        console.print("  [dim]No tasks.[/dim]")
        return

    table = Table(show_header=True)
    table.add_column("ID")
    table.add_column("Task")
    table.add_column("Priority")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Assigned")
    table.add_column("Depends on")
    for t in project.tasks:
        table.add_row(
            t.id,
            escape(t.name),
            _priority_label(t.priority),
            _fmt_date(t.start_date),
            _fmt_date(t.end_date),
            escape(t.assigned_to) or "-",
            ", ".join(sorted(t.dependencies)) or "-",
        )
    console.print(table)


@app.command("list")
def list_projects(ctx: typer.Context) -> None:
    """List all projects and their tasks."""
    board = _open_board(ctx)
    if not board.projects:
        console.print("No projects found.")
        return
    for project in board.projects:
        _print_project(project)
    console.print()


@app.command()
def show(ctx: typer.Context, project_id: str, task_id: str) -> None:
    """Show all details for a single task."""
    board = _open_board(ctx)
    with _reporting_errors():
        project = board.get_project(project_id)
        t = board.get_task(project_id, task_id)

    console.print(f"\n[bold]{t.id}[/bold]  {escape(t.name)}  [dim]({escape(project.name)})[/dim]")
    console.print(f"  Priority:    {_priority_label(t.priority)}")
    console.print(f"  Start:       {_fmt_date(t.start_date)}")
    console.print(f"  End:         {_fmt_date(t.end_date)}")
    console.print(f"  Assigned to: {escape(t.assigned_to) or '-'}")
    console.print(f"  Depends on:  {', '.join(sorted(t.dependencies)) or 'none'}")
    console.print(f"  Blocks:      {', '.join(dependents(project, t.id)) or 'none'}")
    console.print()


@app.command()
def timeline(
    ctx: typer.Context,
    project_id: str,
    width: Annotated[int, typer.Option(help="Width of the bar area in characters")] = 40,
) -> None:
    """Draw the project timeline from its dated tasks."""
    board = _open_board(ctx)
    with _reporting_errors():
        project = board.get_project(project_id)
        tl = board.timeline(project_id)

    if tl is None:
        console.print(f"No timeline for {project_id}: no task has both a start and an end date.")
        return

    console.print(
        f"\n[bold underline]Timeline[/bold underline]  {escape(project.name)}: "
        f"{tl.start.isoformat()} to {tl.end.isoformat()} ({tl.total_days} days)"
    )
    table = Table(show_header=True, box=None, pad_edge=False)
    table.add_column("ID", style="bold")
    table.add_column("Task")
    table.add_column("Bar", no_wrap=True)
    table.add_column("Dates", style="dim")
    for bar in tl.bars:
        left = round(bar.offset_fraction * width)
        length = max(1, round(bar.width_fraction * width))
        length = min(length, width - left) or 1
        style = PRIORITY_STYLE[bar.priority]
        drawn = " " * left + f"[{style}]{'█' * length}[/{style}]" + " " * (width - left - length)
        table.add_row(
            bar.task_id,
            escape(bar.name),
            drawn,
            f"{bar.start_date.isoformat()} to {bar.end_date.isoformat()}",
        )
    console.print(table)

    undated = len(project.tasks) - len(tl.bars)
    if undated:
        console.print(f"[dim]{undated} task(s) without both dates not shown[/dim]")
    console.print()


@app.command()
def reminders(
    ctx: typer.Context,
    today: Annotated[Optional[str], typer.Option(help="Reference date (YYYY-MM-DD), defaults to today")] = None,
    days: Annotated[Optional[int], typer.Option(help="Look-ahead window in days")] = None,
) -> None:
    """List tasks due within the next few days (due today or overdue excluded)."""
    board = _open_board(ctx)
    if days is not None:
        board.reminder_days = days
    now = _parse_date(today) if today else None
    upcoming = board.reminders(now)

    if not upcoming:
        console.print(f"No reminders for the next {board.reminder_days} days.")
        return

    console.print(f"\n[bold underline]Reminders[/bold underline]  ({len(upcoming)})")
    for r in upcoming:
        unit = "day" if r.days_until_due == 1 else "days"
        console.print(
            f"  [bold]{escape(r.task_name)}[/bold] in {escape(r.project_name)}: "
            f"due in {r.days_until_due} {unit} ({r.due_date.isoformat()})"
        )
    console.print()


@app.command()
def viz(
    ctx: typer.Context,
    project_id: str,
    output: Annotated[str, typer.Option("-o", "--output", help="Output file path")] = "dependencies.md",
) -> None:
    """Generate a Mermaid flowchart of a project's task dependencies."""
    board = _open_board(ctx)
    with _reporting_errors():
        project = board.get_project(project_id)
    if not project.tasks:
        console.print("No tasks to visualize.")
        return

    node = {t.id: t.id.replace("-", "_") for t in project.tasks}
    lines = ["```mermaid", "flowchart LR"]
    lines.append("    classDef high fill:#e63946,stroke:#9d0208,color:#fff")
    lines.append("    classDef medium fill:#f4a261,stroke:#e76f51,color:#000")
    lines.append("    classDef low fill:#2d6a4f,stroke:#1b4332,color:#d8f3dc")

    for tid in topological_order(project):
        task = project.find_task(tid)
        # Sanitize name for mermaid (escape quotes)
        label = task.name.replace('"', "'")
        lines.append(f'    {node[tid]}["{tid}: {label}"]')

    for task in project.tasks:
        for dep in sorted(task.dependencies):
            lines.append(f"    {node[dep]} --> {node[task.id]}")

    for priority in Priority:
        ids = [node[t.id] for t in project.tasks if t.priority == priority]
        if ids:
            lines.append(f"    class {','.join(ids)} {priority.value}")

    lines.append("```")
    Path(output).write_text("\n".join(lines) + "\n", encoding="utf-8")
    console.print(f"[green]Wrote Mermaid diagram to {escape(output)}[/green]")


if __name__ == "__main__":
    app()
