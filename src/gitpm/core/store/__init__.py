"""
Task state store.

Models a project's tasks, their Todo/Doing/Done lifecycle and the on-disk
``pm/`` directory (an index file plus one Markdown file per task) that is
meant to be committed alongside the code it describes.
"""

from gitpm.core.store.exceptions import (
    AlreadyInitialized,
    ClockSkew,
    CorruptState,
    DuplicateId,
    InvalidTransition,
    NotInitialized,
    PmError,
    StoreIOError,
    TaskNotFound,
)
from gitpm.core.store.models import Change, Project, Status, Task
from gitpm.core.store.store import TaskStore
from gitpm.core.store.transitions import ALLOWED_TRANSITIONS, transition

__all__ = [
    # Models
    "Change",
    "Project",
    "Status",
    "Task",
    # Store and state machine
    "TaskStore",
    "ALLOWED_TRANSITIONS",
    "transition",
    # Errors
    "AlreadyInitialized",
    "ClockSkew",
    "CorruptState",
    "DuplicateId",
    "InvalidTransition",
    "NotInitialized",
    "PmError",
    "StoreIOError",
    "TaskNotFound",
]
