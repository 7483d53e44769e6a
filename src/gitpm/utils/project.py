"""
Project root discovery.

The task store itself always takes an explicit root; discovery happens
once at the CLI edge so commands work from any subdirectory of a project.
"""

from pathlib import Path

# Markers that indicate a project root, checked in order in each directory
PROJECT_ROOT_MARKERS = [
    "pm/index.yml",  # An initialized task store
    ".pm.json",  # gitpm project config
    ".git",  # Git repository (worktrees use a .git file)
]


def find_project_root(start: Path | None = None) -> Path | None:
    """
    Find the project root directory by searching upward for marker files.

    Args:
        start: Directory to start searching from. Defaults to current working directory.

    Returns:
        Path to the project root directory, or None if not found.

    Example:
        >>> find_project_root(Path("/project/src/module"))
        PosixPath('/project')
    """
    if start is None:
        start = Path.cwd()

    for current in [start.resolve(), *start.resolve().parents]:
        for marker in PROJECT_ROOT_MARKERS:
            if (current / marker).exists():
                return current
    return None

