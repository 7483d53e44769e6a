"""
Task data models for gitpm.

Defines the in-memory shape of a project's tasks: the status enum, the
immutable Change record that makes up a task's ledger, the Task itself and
the Project metadata. Validation is done by Pydantic.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from gitpm.core.store.labels import normalize_labels

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


class Status(str, Enum):
    """Task status values, in board order."""

    TODO = "Todo"
    DOING = "Doing"
    DONE = "Done"

    @classmethod
    def parse(cls, value: str) -> "Status":
        """
        Parse a status name case-insensitively.

        Raises:
            ValueError: If the value is not a known status
        """
        for status in cls:
            if status.value.lower() == value.strip().lower():
                return status
        valid = ", ".join(s.value.lower() for s in cls)
        raise ValueError(f"Invalid status {value!r} (expected one of: {valid})")


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class Change(BaseModel):
    """
    One recorded status transition.

    Changes are frozen once created; the ledger only ever appends them.
    """

    from_status: Status = Field(..., alias="from")
    to_status: Status = Field(..., alias="to")
    on: datetime

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="forbid",
    )

    @field_validator("on")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC and normalize aware ones to UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @field_serializer("on")
    def serialize_on(self, v: datetime) -> str:
        return v.strftime(TIMESTAMP_FORMAT)


class Task(BaseModel):
    """
    A single tracked task.

    ``status`` is stored for readability of the index but is always equal to
    the ``to`` of the last change (or Todo with no changes). Only the state
    machine in ``gitpm.core.store.transitions`` should change it.

    Example:
        >>> task = Task(id=1, title="Write spec", slug="001-write-spec")
        >>> task.status
        <Status.TODO: 'Todo'>
    """

    id: int = Field(..., ge=1, description="Unique, never reused task id")
    title: str = Field(..., min_length=1, description="Short task title")
    description: str = Field(default="", description="Free-form multi-line details")
    status: Status = Field(default=Status.TODO)
    changes: list[Change] = Field(default_factory=list)
    labels: list[str] = Field(default_factory=list)
    slug: str = Field(..., min_length=1, description="Frozen file stem")
    archived: bool = Field(default=False)

    model_config = ConfigDict(validate_assignment=True)

    @field_validator("labels")
    @classmethod
    def sort_labels(cls, v: list[str]) -> list[str]:
        return normalize_labels(v)

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        return v.strip()


class Project(BaseModel):
    """Project metadata stored at the top of the index."""

    name: str = Field(..., min_length=1)
    description: str | None = None

    model_config = ConfigDict(extra="forbid")
