"""
Shared per-invocation state for pm commands.

The root callback resolves the project root once and stores it on the
typer context; commands read it back from here instead of relying on the
current directory.
"""

from pathlib import Path

import typer

from gitpm.core.config import PmConfig, load_config
from gitpm.core.store import TaskStore


def get_root(ctx: typer.Context) -> Path:
    """Project root resolved by the root callback."""
    obj = ctx.find_root().obj or {}
    root = obj.get("root")
    return Path(root) if root is not None else Path.cwd()


def get_config(ctx: typer.Context) -> PmConfig:
    """Configuration for the resolved project root."""
    return load_config(get_root(ctx))


def load_store(ctx: typer.Context) -> TaskStore:
    """Load the task store for this invocation."""
    return TaskStore.load(get_root(ctx), config=get_config(ctx))
