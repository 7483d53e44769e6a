"""
Pytest configuration and shared fixtures.

Provides fixtures for temporary project directories, initialized task
stores, deterministic timestamps and config isolation.
"""

import os
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from gitpm.core.config import clear_cache
from gitpm.core.store import Status, TaskStore

# ==============================================================================
# Isolation
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep user config, PM_* env vars and the config cache out of every test."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    for var in [k for k in os.environ if k.startswith("PM_")]:
        monkeypatch.delenv(var)
    clear_cache()
    yield
    # .env loading writes straight into os.environ
    for var in [k for k in os.environ if k.startswith("PM_")]:
        del os.environ[var]
    clear_cache()


# ==============================================================================
# Directory Fixtures
# ==============================================================================


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Provide an empty project directory that looks like a git checkout."""
    project = tmp_path / "project"
    project.mkdir()
    (project / ".git").mkdir()
    return project


@pytest.fixture
def store(project_root: Path) -> TaskStore:
    """Provide a freshly initialized, empty task store."""
    return TaskStore.init(project_root, name="demo")


# ==============================================================================
# Time Fixtures
# ==============================================================================

T0 = datetime(2026, 1, 16, 14, 32, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Provide a fake clock that advances one minute per call."""
    state = {"now": T0}

    def tick() -> datetime:
        current = state["now"]
        state["now"] = current + timedelta(minutes=1)
        return current

    return tick


# ==============================================================================
# Sample Data Fixtures
# ==============================================================================


@pytest.fixture
def populated_store(store: TaskStore, clock: Callable[[], datetime]) -> TaskStore:
    """
    Provide a saved store with one task in each status.

    Tasks:
        1 "Write spec" - Done, labels docs
        2 "Build store" - Doing, labels backend, core
        3 "Ship it" - Todo
    """
    spec = store.add_task("Write spec", labels=["docs"], description="First draft.")
    build = store.add_task("Build store", labels=["core", "backend"])
    store.add_task("Ship it")

    store.transition(spec.id, Status.DOING, now=clock())
    store.transition(spec.id, Status.DONE, now=clock())
    store.transition(build.id, Status.DOING, now=clock())
    store.save()
    return store
