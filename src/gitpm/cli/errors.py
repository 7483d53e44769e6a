"""
Standardized error handling and exit codes for the pm CLI.

Store errors are terminal for an invocation: the command prints one error
message to stderr and exits non-zero without saving anything.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from enum import IntEnum

import typer
from rich.console import Console

from gitpm.core.store.exceptions import (
    AlreadyInitialized,
    ClockSkew,
    CorruptState,
    InvalidTransition,
    NotInitialized,
    PmError,
    StoreIOError,
    TaskNotFound,
)
from gitpm.core.store.transitions import allowed_targets

logger = logging.getLogger(__name__)

err_console = Console(stderr=True)


class ExitCode(IntEnum):
    """Standard exit codes for pm operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Corrupt state, clock skew or an I/O failure."""

    USER_ERROR = 2
    """Invalid input or a request the store refused (actionable by user)."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message to stderr.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it
    """
    # markup=False on the problem: messages carry paths and user text
    err_console.print("[red]Error:[/red] ", end="")
    err_console.print(problem, markup=False, highlight=False)

    if reason:
        err_console.print(f"[dim]{reason}[/dim]")

    if solution:
        err_console.print(f"[cyan]→ Try:[/cyan] {solution}")


def report_error(error: Exception) -> ExitCode:
    """
    Print an error with guidance and return the exit code it maps to.

    Args:
        error: Exception raised by a store operation or input parsing

    Returns:
        Exit code for the invocation
    """
    if isinstance(error, InvalidTransition):
        targets = ", ".join(s.value for s in allowed_targets(error.from_status))
        print_error(
            str(error),
            reason=f"From {error.from_status.value} a task can move to: {targets}",
        )
        return ExitCode.USER_ERROR

    if isinstance(error, AlreadyInitialized):
        print_error(str(error), reason="This project already has a task store")
        return ExitCode.USER_ERROR

    if isinstance(error, NotInitialized):
        print_error(
            str(error),
            reason="This project has no task store yet",
            solution="pm init --name <project-name>",
        )
        return ExitCode.USER_ERROR

    if isinstance(error, TaskNotFound):
        print_error(str(error), solution="pm show  # to see available tasks")
        return ExitCode.USER_ERROR

    if isinstance(error, CorruptState):
        print_error(
            str(error),
            reason="The pm/ directory is inconsistent; it was probably hand-edited "
            "or merged badly. Nothing was changed.",
            solution="fix the file by hand or restore it from version control",
        )
        return ExitCode.GENERAL_ERROR

    if isinstance(error, ClockSkew):
        print_error(
            str(error),
            reason="The system clock appears to be behind the task history",
        )
        return ExitCode.GENERAL_ERROR

    if isinstance(error, (StoreIOError, OSError)):
        print_error(str(error))
        return ExitCode.GENERAL_ERROR

    if isinstance(error, ValueError):
        print_error(str(error))
        return ExitCode.USER_ERROR

    print_error(str(error))
    return ExitCode.GENERAL_ERROR


@contextmanager
def handle_store_errors() -> Iterator[None]:
    """
    Turn store errors raised inside the block into a message and exit code.

    Example:
        >>> with handle_store_errors():
        ...     store = TaskStore.load(root)
    """
    try:
        yield
    except (PmError, ValueError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        raise typer.Exit(report_error(e)) from e


__all__ = [
    "ExitCode",
    "err_console",
    "handle_store_errors",
    "print_error",
    "report_error",
]
