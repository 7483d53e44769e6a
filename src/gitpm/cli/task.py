"""
pm task commands: add, status, start, finish, edit, archive.

Each command loads the store, performs exactly one operation and saves.
If anything fails nothing is written.
"""

import os
import shlex
import subprocess

import typer
from rich.console import Console
from rich.markup import escape

from gitpm.cli.context import get_config, load_store
from gitpm.cli.errors import ExitCode, handle_store_errors, print_error
from gitpm.cli.show import display_id
from gitpm.core.store import Status
from gitpm.core.store.labels import parse_entry

console = Console()

DEFAULT_EDITOR = "vim"


def add(
    ctx: typer.Context,
    entry: list[str] = typer.Argument(
        ...,
        help="Task title; words like :bug:ui: add labels",
    ),
    description: str = typer.Option(
        "",
        "--description",
        "-d",
        help="Longer task description",
    ),
) -> None:
    """
    Add a new task in Todo.

    Examples:
        pm add Draft the roadmap
        pm add Fix login redirect :bug:auth:
        pm add "Cache board view" -d "Rendering reads every task file"
    """
    with handle_store_errors():
        title, labels = parse_entry(entry)
        store = load_store(ctx)
        task = store.add_task(title, labels=labels, description=description)
        store.save()

    console.print(
        f"[green]✓[/green] Added task [bold]{display_id(task)}[/bold]: {escape(task.title)}",
        highlight=False,
    )
    console.print(f"[dim]{store.task_path(task).relative_to(store.root)}[/dim]")


def _move(ctx: typer.Context, task_id: int, to: Status) -> None:
    with handle_store_errors():
        store = load_store(ctx)
        change = store.transition(task_id, to)
        store.save()

    task = store.get_task(task_id)
    console.print(
        f"[green]✓[/green] Task [bold]{display_id(task)}[/bold] "
        f"{change.from_status.value} → [bold]{change.to_status.value}[/bold]: "
        f"{escape(task.title)}",
        highlight=False,
    )


def status(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Task id", min=1),
    new_status: str = typer.Argument(..., help="New status: todo, doing, done"),
) -> None:
    """
    Move a task to another status.

    Tasks move Todo → Doing → Done and can be pushed back one step
    (Doing → Todo, Done → Doing).

    Examples:
        pm status 3 doing
        pm status 3 done
    """
    try:
        to = Status.parse(new_status)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(ExitCode.USER_ERROR)
    _move(ctx, task_id, to)


def start(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Task id", min=1),
) -> None:
    """Move a task to Doing (same as 'pm status <id> doing')."""
    _move(ctx, task_id, Status.DOING)


def finish(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Task id", min=1),
) -> None:
    """Move a task to Done (same as 'pm status <id> done')."""
    _move(ctx, task_id, Status.DONE)


def archive(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Task id", min=1),
) -> None:
    """
    Hide a task from the board.

    The task keeps its file and its place in the index, so its id is never
    handed out again. Use 'pm show --all' to see archived tasks.
    """
    with handle_store_errors():
        store = load_store(ctx)
        task = store.archive_task(task_id)
        store.save()

    console.print(
        f"[green]✓[/green] Archived task [bold]{display_id(task)}[/bold]: {escape(task.title)}",
        highlight=False,
    )


def edit(
    ctx: typer.Context,
    task_id: int = typer.Argument(..., help="Task id", min=1),
) -> None:
    """
    Edit a task's title, labels and description in your editor.

    Opens the task file in the editor from config, $EDITOR, or vim. The
    file keeps its name even if the title changes. After the editor exits
    the store is re-read, so a broken edit is reported immediately.
    """
    with handle_store_errors():
        store = load_store(ctx)
        path = store.task_path(store.get_task(task_id))

    editor = get_config(ctx).editor or os.environ.get("EDITOR") or DEFAULT_EDITOR

    try:
        result = subprocess.run([*shlex.split(editor), str(path)], check=False)
    except FileNotFoundError:
        print_error(
            f"Editor not found: {editor}",
            solution="set $EDITOR or PM_EDITOR to your preferred editor",
        )
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if result.returncode != 0:
        print_error(f"Editor exited with code {result.returncode}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    with handle_store_errors():
        # Re-read to validate the edit, then save to normalize the file
        store = load_store(ctx)
        store.save()

    task = store.get_task(task_id)
    console.print(
        f"[green]✓[/green] Edited task [bold]{display_id(task)}[/bold]: {escape(task.title)}",
        highlight=False,
    )
