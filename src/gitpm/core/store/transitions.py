"""
Task status state machine.

A task moves forward Todo -> Doing -> Done and can be pushed back one
stage at a time (Doing -> Todo, Done -> Doing). Skipping Doing in either
direction is not allowed.

``transition`` is the only code path that changes a task's status; it
records the change in the ledger and updates the status together.
"""

import logging
from datetime import datetime

from gitpm.core.store import ledger
from gitpm.core.store.exceptions import InvalidTransition
from gitpm.core.store.models import Change, Status, Task, utcnow

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: frozenset[tuple[Status, Status]] = frozenset(
    {
        (Status.TODO, Status.DOING),
        (Status.DOING, Status.DONE),
        (Status.DOING, Status.TODO),
        (Status.DONE, Status.DOING),
    }
)


def is_allowed(from_status: Status, to_status: Status) -> bool:
    """Return True if moving from one status to another is a permitted edge."""
    return (from_status, to_status) in ALLOWED_TRANSITIONS


def allowed_targets(status: Status) -> list[Status]:
    """Statuses reachable from ``status`` in one step, in board order."""
    return [s for s in Status if is_allowed(status, s)]


def transition(task: Task, to: Status, now: datetime | None = None) -> Change:
    """
    Move a task to a new status.

    Args:
        task: Task to move
        to: Target status
        now: Timestamp to record (defaults to the current UTC time)

    Returns:
        The Change appended to the task's ledger

    Raises:
        InvalidTransition: If the edge is not allowed; the task is unchanged
        ClockSkew: If ``now`` is earlier than the last change; the task is unchanged
    """
    if not is_allowed(task.status, to):
        raise InvalidTransition(task.status, to)

    change = Change(
        from_status=task.status,
        to_status=to,
        on=now if now is not None else utcnow(),
    )
    ledger.append(task, change)
    task.status = to

    logger.info(f"Task {task.id} moved {change.from_status.value} -> {to.value}")
    return change
