"""
Per-task change ledger.

The ledger is the audit trail of a task: an append-only list of status
changes in time order. Anything that reports when work started or finished
derives it from here, never from a separately stored field.
"""

import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from gitpm.core.store.exceptions import ClockSkew, CorruptState
from gitpm.core.store.models import Change, Status, Task

logger = logging.getLogger(__name__)


def current_status(changes: Sequence[Change]) -> Status:
    """Status implied by a ledger: the last change's target, or Todo."""
    if not changes:
        return Status.TODO
    return changes[-1].to_status


def append(task: Task, change: Change) -> None:
    """
    Append a change to a task's ledger.

    Raises:
        ClockSkew: If the change is timestamped before the last recorded one;
            the task is left untouched
    """
    if task.changes and change.on < task.changes[-1].on:
        raise ClockSkew(task.changes[-1].on, change.on)
    # Reassign rather than mutate in place so validate_assignment runs
    task.changes = [*task.changes, change]
    logger.debug(
        f"Task {task.id}: recorded {change.from_status.value} -> "
        f"{change.to_status.value} at {change.on.isoformat()}"
    )


def validate_history(task: Task, path: Path | None = None) -> None:
    """
    Check a loaded task's ledger against its stored status.

    Verifies that timestamps never go backward, that each change starts
    where the previous one ended (the first from Todo), that every change
    is an allowed transition, and that the stored status matches the
    ledger.

    Raises:
        CorruptState: On the first inconsistency found
    """
    # Imported here: transitions depends on this module
    from gitpm.core.store.transitions import is_allowed

    expected_from = Status.TODO
    previous_on: datetime | None = None
    for position, change in enumerate(task.changes, start=1):
        if previous_on is not None and change.on < previous_on:
            raise CorruptState(
                f"task {task.id}: change {position} is earlier than the change before it",
                path,
            )
        if change.from_status != expected_from:
            raise CorruptState(
                f"task {task.id}: change {position} starts from "
                f"{change.from_status.value} but task was {expected_from.value}",
                path,
            )
        if not is_allowed(change.from_status, change.to_status):
            raise CorruptState(
                f"task {task.id}: change {position} "
                f"{change.from_status.value} -> {change.to_status.value} is not allowed",
                path,
            )
        expected_from = change.to_status
        previous_on = change.on

    derived = current_status(task.changes)
    if task.status != derived:
        raise CorruptState(
            f"task {task.id}: status is {task.status.value} "
            f"but its changes end in {derived.value}",
            path,
        )


def _last_entry_into(task: Task, status: Status) -> datetime | None:
    for change in reversed(task.changes):
        if change.to_status == status:
            return change.on
    return None


def started_at(task: Task) -> datetime | None:
    """When the task last moved into Doing, if it ever did."""
    return _last_entry_into(task, Status.DOING)


def finished_at(task: Task) -> datetime | None:
    """When the task was finished, or None unless it is currently Done."""
    if task.status != Status.DONE:
        return None
    return _last_entry_into(task, Status.DONE)
