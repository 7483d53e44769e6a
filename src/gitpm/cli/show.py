"""
pm show command: the board view and single-task detail.

Read-only. All dates shown here come from the task's change ledger.
"""

from datetime import datetime

import typer
from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from gitpm.cli.context import get_config, load_store
from gitpm.cli.errors import handle_store_errors
from gitpm.core.store import Status, Task, TaskStore
from gitpm.core.store.ledger import finished_at, started_at

console = Console()

STATUS_COLORS = {
    Status.TODO: "white",
    Status.DOING: "yellow",
    Status.DONE: "green",
}


def display_id(task: Task) -> str:
    """The zero-padded id exactly as it appears in the task's file name."""
    return task.slug.partition("-")[0]


def _format_date(value: datetime | None) -> str:
    if value is None:
        return ""
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


def _format_labels(task: Task) -> str:
    return f":{':'.join(task.labels)}:" if task.labels else ""


def render_board(store: TaskStore, include_archived: bool = False) -> Group:
    """
    Build the board: one table per status in Todo, Doing, Done order.

    Doing tasks show when they were started, Done tasks when they were
    finished.
    """
    renderables = []
    for status, tasks in store.board(include_archived=include_archived).items():
        color = STATUS_COLORS[status]
        if not tasks:
            renderables.append(Text(f"{status.value}", style=f"bold {color}"))
            renderables.append(Text("  ... no tasks", style="dim"))
            renderables.append(Text(""))
            continue

        table = Table(
            title=f"[bold {color}]{status.value}[/bold {color}] ({len(tasks)})",
            title_justify="left",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Title", overflow="fold")
        table.add_column("Labels", style="magenta")
        if status == Status.DOING:
            table.add_column("Started", no_wrap=True)
        elif status == Status.DONE:
            table.add_column("Finished", no_wrap=True)

        for task in tasks:
            title = escape(task.title)
            if task.archived:
                title = f"[dim]{title} (archived)[/dim]"
            row = [display_id(task), title, escape(_format_labels(task))]
            if status == Status.DOING:
                row.append(_format_date(started_at(task)))
            elif status == Status.DONE:
                row.append(_format_date(finished_at(task)))
            table.add_row(*row)

        renderables.append(table)
        renderables.append(Text(""))

    return Group(*renderables)


def render_task(store: TaskStore, task: Task) -> Group:
    """Build the detail view of one task, including its change history."""
    color = STATUS_COLORS[task.status]
    header = Text()
    header.append(f"{display_id(task)} ", style="dim")
    header.append(task.title, style="bold")

    meta = Table.grid(padding=(0, 2))
    meta.add_column(style="cyan")
    meta.add_column()
    meta.add_row("Status", f"[{color}]{task.status.value}[/{color}]")
    if task.labels:
        meta.add_row("Labels", escape(_format_labels(task)))
    if task.archived:
        meta.add_row("Archived", "yes")
    meta.add_row("File", str(store.task_path(task).relative_to(store.root)))

    parts: list = [header, meta]

    if task.description:
        parts.append(Panel(Text(task.description), title="Description", title_align="left"))

    if task.changes:
        history = Table(title="History", title_justify="left", header_style="bold cyan")
        history.add_column("When", no_wrap=True)
        history.add_column("From")
        history.add_column("To")
        for change in task.changes:
            history.add_row(
                _format_date(change.on), change.from_status.value, change.to_status.value
            )
        parts.append(history)

    return Group(*parts)


def show(
    ctx: typer.Context,
    task_id: int | None = typer.Argument(
        None, help="Show one task in detail instead of the board", min=1
    ),
    show_all: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Include archived tasks in the board",
    ),
) -> None:
    """
    Show the task board, or one task in detail.

    Examples:
        pm show
        pm show --all
        pm show 3
    """
    with handle_store_errors():
        store = load_store(ctx)
        if task_id is not None:
            console.print(render_task(store, store.get_task(task_id)))
            return
        include_archived = show_all or get_config(ctx).show_archived

    heading = f"[bold]{escape(store.project.name)}[/bold]"
    if store.project.description:
        heading += f" [dim]{escape(store.project.description)}[/dim]"
    console.print(heading)
    console.print()
    console.print(render_board(store, include_archived=include_archived))
