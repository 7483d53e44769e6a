"""
Task store: the tracked ``pm/`` directory loaded into memory.

A command loads the store, performs one operation and saves it again.
Loading is strict: any disagreement between the index and the task files
raises CorruptState instead of being repaired, because a silent repair
could hide lost work. Saving writes every file through a temporary sibling
and an atomic rename, so an interrupted save leaves either the old or the
new file, never a torn one.

Example:
    >>> store = TaskStore.init(Path("."), name="my-project")
    >>> task = store.add_task("Write spec", labels=["docs"])
    >>> store.transition(task.id, Status.DOING)
    >>> store.save()
"""

import logging
import os
import tempfile
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from gitpm.core.config.models import PmConfig
from gitpm.core.store import ledger, transitions
from gitpm.core.store.exceptions import (
    AlreadyInitialized,
    CorruptState,
    DuplicateId,
    NotInitialized,
    StoreIOError,
    TaskNotFound,
)
from gitpm.core.store.ids import next_id
from gitpm.core.store.models import Change, Project, Status, Task
from gitpm.core.store.schema import (
    INDEX_FILE,
    PM_DIR,
    TASK_SUFFIX,
    TASKS_DIR,
    IndexDocument,
    IndexEntry,
    parse_task_file,
    render_task_file,
)
from gitpm.core.store.slug import parse_task_id, slug

logger = logging.getLogger(__name__)


class TaskStore:
    """
    In-memory project and tasks for one tracked directory.

    Tasks are kept in ascending id order. Equality compares the project and
    the tasks, which is what a save/load round trip must preserve.
    """

    def __init__(
        self,
        root: Path,
        project: Project,
        tasks: Iterable[Task] = (),
        config: PmConfig | None = None,
    ):
        """
        Args:
            root: Project root (the directory containing ``pm/``)
            project: Project metadata
            tasks: Initial tasks
            config: Naming settings; defaults are used when omitted
        """
        self.root = Path(root)
        self.project = project
        self.config = config or PmConfig()
        self._tasks: dict[int, Task] = {}
        for task in sorted(tasks, key=lambda t: t.id):
            if task.id in self._tasks:
                raise DuplicateId(task.id)
            self._tasks[task.id] = task

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @property
    def pm_dir(self) -> Path:
        return self.root / PM_DIR

    @property
    def index_path(self) -> Path:
        return self.pm_dir / INDEX_FILE

    @property
    def tasks_dir(self) -> Path:
        return self.pm_dir / TASKS_DIR

    def task_path(self, task: Task) -> Path:
        """Path of a task's detail file."""
        return self.tasks_dir / f"{task.slug}{TASK_SUFFIX}"

    # ------------------------------------------------------------------
    # Init / load / save
    # ------------------------------------------------------------------

    @classmethod
    def init(
        cls,
        root: Path,
        name: str,
        description: str | None = None,
        config: PmConfig | None = None,
    ) -> "TaskStore":
        """
        Create the tracking directory with an empty index.

        Raises:
            AlreadyInitialized: If ``pm/`` already exists under root
            ValueError: If the project name is empty
            StoreIOError: If the directory or index cannot be written
        """
        store = cls(root, Project(name=name, description=description), config=config)
        if store.pm_dir.exists():
            raise AlreadyInitialized(store.pm_dir)

        try:
            store.tasks_dir.mkdir(parents=True)
        except OSError as e:
            raise StoreIOError("failed to create directory", store.tasks_dir) from e

        store.save()
        logger.info(f"Initialized task store at {store.pm_dir}")
        return store

    @classmethod
    def load(cls, root: Path, config: PmConfig | None = None) -> "TaskStore":
        """
        Load the index and every task file under root.

        Raises:
            NotInitialized: If there is no index file
            DuplicateId: If an id appears twice in the index or in task file names
            CorruptState: If the index or a task file is unparseable, a listed
                task has no file, a task file has no index entry, or a ledger
                contradicts its task's status
            StoreIOError: If a file cannot be read
        """
        root = Path(root)
        index_path = root / PM_DIR / INDEX_FILE
        tasks_dir = root / PM_DIR / TASKS_DIR
        if not index_path.is_file():
            raise NotInitialized(index_path)

        document = IndexDocument.from_yaml(_read_text(index_path), index_path)

        entries: dict[int, IndexEntry] = {}
        for entry in document.tasks:
            if entry.id in entries:
                raise DuplicateId(entry.id, index_path)
            entries[entry.id] = entry

        files = _scan_task_files(tasks_dir)

        missing = sorted(entries.keys() - files.keys())
        if missing:
            raise CorruptState(
                f"task {missing[0]} is listed in the index but has no task file "
                f"in {tasks_dir}",
                index_path,
            )
        orphans = sorted(files.keys() - entries.keys())
        if orphans:
            raise CorruptState("task file has no entry in the index", files[orphans[0]])

        tasks = []
        for task_id in sorted(entries):
            entry = entries[task_id]
            path = files[task_id]
            detail, description = parse_task_file(_read_text(path), path)
            try:
                task = Task(
                    id=task_id,
                    title=detail.title,
                    description=description,
                    status=entry.status,
                    changes=entry.changes,
                    labels=detail.labels,
                    slug=path.stem,
                    archived=entry.archived,
                )
            except ValidationError as e:
                raise CorruptState(f"invalid task: {e}", path) from e
            ledger.validate_history(task, index_path)
            tasks.append(task)

        logger.debug(f"Loaded {len(tasks)} tasks from {index_path}")
        return cls(root, document.meta, tasks, config=config)

    def save(self) -> None:
        """
        Write every task file and then the index.

        Each file is replaced atomically. Output is deterministic: the same
        store always serializes to the same bytes. If any write fails, the
        task files this save already replaced are put back, so the directory
        is left exactly as it was before the call.

        Raises:
            StoreIOError: If a file cannot be read or written
        """
        try:
            self.tasks_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreIOError("failed to create directory", self.tasks_dir) from e

        # (path, previous bytes or None if the file is new) for every file replaced
        replaced: list[tuple[Path, bytes | None]] = []
        try:
            for task in self._tasks.values():
                path = self.task_path(task)
                content = render_task_file(task).encode("utf-8")
                previous = _read_existing(path)
                if previous == content:
                    continue
                _atomic_write(path, content)
                replaced.append((path, previous))
            _atomic_write(self.index_path, self.render_index().encode("utf-8"))
        except StoreIOError:
            _roll_back(replaced)
            raise
        logger.debug(f"Saved index and {len(replaced)} changed task file(s) to {self.pm_dir}")

    def render_index(self) -> str:
        """Serialize the index exactly as save() writes it."""
        document = IndexDocument(
            meta=self.project,
            tasks=[IndexEntry.from_task(t) for t in self._tasks.values()],
        )
        return document.to_yaml()

    # ------------------------------------------------------------------
    # Task operations
    # ------------------------------------------------------------------

    def add_task(
        self,
        title: str,
        labels: Iterable[str] | None = None,
        description: str = "",
    ) -> Task:
        """
        Create a new Todo task with the next free id.

        The file name is derived from the title now and never changes.

        Raises:
            ValueError: If the title is empty or a label is invalid
        """
        title = title.strip()
        if not title:
            raise ValueError("task title cannot be empty")

        task_id = next_id(self._tasks)
        task = Task(
            id=task_id,
            title=title,
            description=description,
            labels=list(labels or []),
            slug=slug(
                task_id,
                title,
                width=self.config.id_width,
                max_length=self.config.slug_max_length,
            ),
        )
        # New ids are always the largest, so insertion order stays ascending
        self._tasks[task_id] = task
        logger.info(f"Added task {task_id}: {title}")
        return task

    def get_task(self, task_id: int) -> Task:
        """
        Raises:
            TaskNotFound: If no task has this id
        """
        try:
            return self._tasks[task_id]
        except KeyError:
            raise TaskNotFound(task_id) from None

    def transition(
        self, task_id: int, to: Status, now: datetime | None = None
    ) -> Change:
        """
        Move a task to a new status; see ``transitions.transition``.

        Raises:
            TaskNotFound: If no task has this id
            InvalidTransition: If the edge is not allowed
            ClockSkew: If ``now`` is before the task's last change
        """
        return transitions.transition(self.get_task(task_id), to, now)

    def edit_task(
        self,
        task_id: int,
        title: str | None = None,
        description: str | None = None,
        labels: Iterable[str] | None = None,
    ) -> Task:
        """
        Update a task's detail fields. The task file keeps its name.

        Raises:
            TaskNotFound: If no task has this id
            ValueError: If the new title is empty or a label is invalid
        """
        task = self.get_task(task_id)
        if title is not None:
            title = title.strip()
            if not title:
                raise ValueError("task title cannot be empty")
            task.title = title
        if description is not None:
            task.description = description
        if labels is not None:
            task.labels = list(labels)
        return task

    def archive_task(self, task_id: int) -> Task:
        """
        Hide a task from the board without removing it.

        The task stays in the index and on disk so its id is never reused.

        Raises:
            TaskNotFound: If no task has this id
        """
        task = self.get_task(task_id)
        task.archived = True
        logger.info(f"Archived task {task_id}")
        return task

    def tasks(self, include_archived: bool = False) -> list[Task]:
        """All tasks in ascending id order."""
        return [t for t in self._tasks.values() if include_archived or not t.archived]

    def board(self, include_archived: bool = False) -> dict[Status, list[Task]]:
        """
        Group tasks by status for the board view.

        Returns:
            Mapping with every status as a key, in Todo, Doing, Done order;
            tasks within a group are in ascending id order
        """
        columns: dict[Status, list[Task]] = {status: [] for status in Status}
        for task in self.tasks(include_archived=include_archived):
            columns[task.status].append(task)
        return columns

    def next_id(self) -> int:
        """The id the next added task will get."""
        return next_id(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TaskStore):
            return NotImplemented
        return self.project == other.project and self._tasks == other._tasks

    def __repr__(self) -> str:
        return f"TaskStore(root={self.root!r}, project={self.project.name!r}, tasks={len(self)})"


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise CorruptState(f"not valid UTF-8: {e}", path) from e
    except OSError as e:
        raise StoreIOError("failed to read", path) from e


def _scan_task_files(tasks_dir: Path) -> dict[int, Path]:
    """
    Map task ids to their files.

    Raises:
        DuplicateId: If two files carry the same id
        CorruptState: If a Markdown file's name does not start with an id
    """
    files: dict[int, Path] = {}
    if not tasks_dir.is_dir():
        return files

    for path in sorted(tasks_dir.glob(f"*{TASK_SUFFIX}")):
        # Leftover temp files and editor droppings
        if path.name.startswith(".") or not path.is_file():
            continue
        task_id = parse_task_id(path.stem)
        if task_id is None:
            raise CorruptState("task file name does not start with a task id", path)
        if task_id in files:
            raise DuplicateId(task_id, path)
        files[task_id] = path
    return files


def _read_existing(path: Path) -> bytes | None:
    """Current bytes of a file, or None if it does not exist yet."""
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise StoreIOError("failed to read", path) from e


def _roll_back(replaced: list[tuple[Path, bytes | None]]) -> None:
    """Undo the task file writes of a failed save, newest first."""
    for path, previous in reversed(replaced):
        try:
            if previous is None:
                path.unlink(missing_ok=True)
            else:
                _atomic_write(path, previous)
        except (OSError, StoreIOError) as e:
            logger.error(f"Failed to restore {path} after an aborted save: {e}")
        else:
            logger.debug(f"Restored {path} after an aborted save")


def _atomic_write(path: Path, data: bytes) -> None:
    """
    Replace a file's content atomically.

    Writes to a temporary file in the same directory and renames it over
    the target, so readers see either the old or the new content.

    Raises:
        StoreIOError: If the write or rename fails; the temp file is removed
    """
    try:
        fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".pm_", suffix=".tmp")
    except OSError as e:
        raise StoreIOError("failed to create temporary file for", path) from e

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        # mkstemp creates files readable only by the owner
        os.chmod(temp_path, 0o644)
        os.replace(temp_path, path)
    except OSError as e:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise StoreIOError("failed to write", path) from e
