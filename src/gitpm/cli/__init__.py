"""
pm CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys
from pathlib import Path

import typer

from gitpm import __version__
from gitpm.cli import init_cmd, show, task
from gitpm.core.config import load_layered_env
from gitpm.utils.project import find_project_root

app = typer.Typer(
    name="pm",
    help="Track a project's tasks as plain files committed with its code",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for pm commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"pm {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    root: Path | None = typer.Option(
        None,
        "--root",
        "-C",
        help="Project root containing pm/ (defaults to the enclosing repository)",
        file_okay=False,
        resolve_path=True,
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """
    pm - plain-file task tracking.

    Tasks live in pm/index.yml and pm/tasks/*.md next to your code, so their
    history is committed, diffed and merged with everything else.

    Quick Start:
        pm init                      # Create pm/ in the repository root
        pm add Draft the roadmap :docs: # Add a task with a label
        pm start 1                   # Todo -> Doing
        pm finish 1                  # Doing -> Done
        pm show                      # Board view
    """
    setup_logging(debug)

    if root is None:
        root = find_project_root() or Path.cwd()

    # Precedence: OS env > project .env > user .env
    load_layered_env(project_dir=root)

    ctx.obj = {"debug": debug, "root": root}


app.command(name="init")(init_cmd.main)
app.command(name="add")(task.add)
app.command(name="status")(task.status)
app.command(name="start")(task.start)
app.command(name="finish")(task.finish)
app.command(name="edit")(task.edit)
app.command(name="archive")(task.archive)
app.command(name="show")(show.show)


def cli_main() -> None:
    """Entry point for the pm console script."""
    app()


__all__ = ["app", "cli_main"]
