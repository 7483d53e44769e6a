"""
Exceptions raised by the task store.

Every error is terminal for the current invocation: nothing is retried and
no partial state is written. Corruption errors carry the offending path so
the CLI can surface it verbatim.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gitpm.core.store.models import Status


class PmError(Exception):
    """Base class for all task store errors."""


class CorruptState(PmError):
    """Raised when the index and task files disagree or cannot be parsed."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


class DuplicateId(CorruptState):
    """Raised when the same task id appears more than once."""

    def __init__(self, task_id: int, path: Path | None = None):
        self.task_id = task_id
        super().__init__(f"duplicate task id {task_id}", path)


class AlreadyInitialized(PmError):
    """Raised by init when the tracking directory already exists."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"tracking directory already exists: {path}")


class NotInitialized(PmError):
    """Raised by load when there is no index to read."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"no index found at {path}")


class InvalidTransition(PmError):
    """Raised when a requested status change is not an allowed edge."""

    def __init__(self, from_status: Status, to_status: Status):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"cannot move task from {from_status.value} to {to_status.value}"
        )


class ClockSkew(PmError):
    """Raised when a change would be recorded before the ledger's last entry."""

    def __init__(self, last: datetime, attempted: datetime):
        self.last = last
        self.attempted = attempted
        super().__init__(
            f"change at {attempted.isoformat()} is earlier than "
            f"last recorded change at {last.isoformat()}"
        )


class TaskNotFound(PmError):
    """Raised when a task id is not in the store."""

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"task not found: {task_id}")


class StoreIOError(PmError):
    """Raised when reading, writing or renaming a store file fails."""

    def __init__(self, message: str, path: Path):
        self.path = path
        super().__init__(f"{message}: {path}")
