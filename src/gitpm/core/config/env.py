"""Environment loading helpers.

PM_* settings may also come from .env files. Precedence:

    exported shell environment > project .env/.env.local > ~/.config/gitpm/.env

Only PM_* keys are imported; other entries in a shared project .env belong
to other tools and are left alone.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values

ENV_PREFIX = "PM_"


def read_pm_env(path: Path) -> dict[str, str]:
    """Return the PM_* assignments of a .env file (empty if it doesn't exist)."""
    if not path.exists():
        return {}
    return {
        str(k): str(v)
        for k, v in dotenv_values(path).items()
        if k is not None and v is not None and str(k).startswith(ENV_PREFIX)
    }


def load_layered_env(
    *,
    project_dir: Path,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> list[str]:
    """Load PM_* variables from user and project .env files into os.environ.

    Args:
        project_dir: Project root holding .env / .env.local
        user_env_paths: explicit user env file paths
        project_env_paths: explicit project env file paths

    Returns:
        Names of the variables that were set
    """
    if user_env_paths is None:
        xdg_home = Path(os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config")))
        user_env_paths = [xdg_home / "gitpm" / ".env"]
    if project_env_paths is None:
        project_env_paths = [project_dir / ".env", project_dir / ".env.local"]

    # Later layers win over earlier ones but never over the shell
    layered: dict[str, str] = {}
    for p in [*user_env_paths, *project_env_paths]:
        layered.update(read_pm_env(Path(p)))

    applied = []
    for key, value in layered.items():
        if key not in os.environ:
            os.environ[key] = value
            applied.append(key)
    return applied
