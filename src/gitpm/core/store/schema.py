"""
On-disk document shapes for the task store.

Two kinds of files make up a tracked project:

    pm/index.yml            project metadata plus each task's status and ledger
    pm/tasks/NNN-slug.md    Markdown task file; YAML frontmatter holds the
                            title and labels, the body is the description

The models here are strict: unknown keys and wrong types are rejected so a
hand-edited file that drifted from the format is reported as corrupt
instead of being half-understood.
"""

from pathlib import Path
from typing import Any

import frontmatter
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gitpm.core.store.exceptions import CorruptState
from gitpm.core.store.models import Change, Project, Status, Task

PM_DIR = "pm"
INDEX_FILE = "index.yml"
TASKS_DIR = "tasks"
TASK_SUFFIX = ".md"


class IndexEntry(BaseModel):
    """Status and ledger of one task as stored in the index."""

    id: int = Field(..., ge=1)
    status: Status
    archived: bool = False
    changes: list[Change] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_task(cls, task: Task) -> "IndexEntry":
        return cls(
            id=task.id,
            status=task.status,
            archived=task.archived,
            changes=list(task.changes),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "status": self.status.value}
        if self.archived:
            data["archived"] = True
        data["changes"] = [c.model_dump(mode="json", by_alias=True) for c in self.changes]
        return data


class IndexDocument(BaseModel):
    """The whole index file."""

    meta: Project
    tasks: list[IndexEntry] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    def to_yaml(self) -> str:
        """
        Render the index as YAML.

        Tasks are written in ascending id order so rewriting the file only
        produces diffs for tasks that actually changed.
        """
        meta: dict[str, Any] = {"name": self.meta.name}
        if self.meta.description is not None:
            meta["description"] = self.meta.description

        data = {
            "meta": meta,
            "tasks": [e.to_dict() for e in sorted(self.tasks, key=lambda e: e.id)],
        }
        return yaml.safe_dump(
            data, sort_keys=False, default_flow_style=False, allow_unicode=True
        )

    @classmethod
    def from_yaml(cls, text: str, path: Path) -> "IndexDocument":
        """
        Parse and validate index YAML.

        Raises:
            CorruptState: If the text is not valid YAML or does not match the schema
        """
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise CorruptState(f"unparseable index: {e}", path) from e

        if not isinstance(data, dict):
            raise CorruptState("index must be a mapping with 'meta' and 'tasks'", path)
        # An empty task list is commonly written as a bare "tasks:" key
        if data.get("tasks") is None and "tasks" in data:
            data["tasks"] = []
        if isinstance(data.get("tasks"), list):
            for entry in data["tasks"]:
                if isinstance(entry, dict) and isinstance(entry.get("changes"), list):
                    entry["changes"] = [_restore_on_key(c) for c in entry["changes"]]

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise CorruptState(f"invalid index: {e}", path) from e


def _restore_on_key(change: Any) -> Any:
    # YAML 1.1 reads a bare `on:` key as boolean true; safe_dump quotes it,
    # but a hand-edited index may not
    if isinstance(change, dict) and True in change and "on" not in change:
        change = dict(change)
        change["on"] = change.pop(True)
    return change


class TaskDocument(BaseModel):
    """Frontmatter of a task file."""

    # Titles are stripped before the length check, so a blank title is rejected
    title: str = Field(..., min_length=1)
    labels: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    @classmethod
    def from_task(cls, task: Task) -> "TaskDocument":
        return cls(title=task.title, labels=list(task.labels))

    def to_frontmatter_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"title": self.title}
        if self.labels:
            data["labels"] = list(self.labels)
        return data


def render_task_file(task: Task) -> str:
    """Render a task's detail file as Markdown with YAML frontmatter."""
    post = frontmatter.Post(task.description)
    post.metadata = TaskDocument.from_task(task).to_frontmatter_dict()
    return frontmatter.dumps(post, sort_keys=False, allow_unicode=True) + "\n"


def parse_task_file(text: str, path: Path) -> tuple[TaskDocument, str]:
    """
    Parse a task file into its frontmatter document and description body.

    Raises:
        CorruptState: If the frontmatter is malformed or fails validation
    """
    try:
        post = frontmatter.loads(text)
    except yaml.YAMLError as e:
        raise CorruptState(f"unparseable task file: {e}", path) from e

    try:
        document = TaskDocument.model_validate(post.metadata)
    except ValidationError as e:
        raise CorruptState(f"invalid task file: {e}", path) from e

    return document, post.content.strip()
