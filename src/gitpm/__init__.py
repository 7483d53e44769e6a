"""
gitpm - task tracking in plain files

Keeps a project's tasks as YAML and Markdown files inside the repository,
so task history is committed, diffed and merged like the code it describes.
"""

__version__ = "0.1.0"

# Re-export core models for convenience
from gitpm.core.store.models import Status, Task
from gitpm.core.store.store import TaskStore

__all__ = ["Status", "Task", "TaskStore", "__version__"]
