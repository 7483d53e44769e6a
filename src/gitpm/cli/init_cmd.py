"""
pm init command.

Creates the pm/ tracking directory with an empty index in the project root.
"""

import typer
from rich.console import Console
from rich.markup import escape

from gitpm.cli.context import get_config, get_root
from gitpm.cli.errors import handle_store_errors
from gitpm.core.store import TaskStore

console = Console()


def main(
    ctx: typer.Context,
    name: str | None = typer.Option(
        None,
        "--name",
        "-n",
        help="Project name (defaults to the project directory name)",
    ),
    description: str | None = typer.Option(
        None,
        "--description",
        "-d",
        help="Optional one-line project description",
    ),
) -> None:
    """
    Initialize task tracking for this project.

    Creates pm/index.yml and pm/tasks/ in the project root. Commit the
    pm/ directory like any other source file.

    Examples:
        pm init
        pm init --name my-app --description "Backend for my app"
    """
    root = get_root(ctx)
    project_name = name if name is not None else root.resolve().name

    with handle_store_errors():
        store = TaskStore.init(
            root, name=project_name, description=description, config=get_config(ctx)
        )

    console.print(
        f"[green]✓[/green] Initialized task store for [bold]{escape(store.project.name)}[/bold] "
        f"in {store.pm_dir}",
        highlight=False,
    )
