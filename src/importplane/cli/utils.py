"""CLI utilities."""

import json
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import click

from importplane.autoimport.ops import Workspace
from importplane.config.constants import CONFIG_DIR_NAME
from importplane.core.errors import ImportPlaneError

_ROOT_MARKERS = (CONFIG_DIR_NAME, "pyproject.toml", ".git")


def find_project_root(start_path: Path | None = None) -> Path:
    """Find the project root from the given path.

    Walks up looking for a .importplane directory, a pyproject.toml or a
    .git directory. Falls back to the starting directory when none is found.
    """
    if start_path is None:
        start_path = Path.cwd()

    start = start_path.resolve()
    if start.is_file():
        start = start.parent

    current = start
    while True:
        if any((current / marker).exists() for marker in _ROOT_MARKERS):
            return current
        if current == current.parent:
            return start
        current = current.parent


def open_workspace(root: Path | None, near: Path | None = None) -> Workspace:
    """Build a workspace for ROOT, or for the project containing NEAR.

    Honors the group-level ``--config`` file when one was given.
    """
    project_root = root.resolve() if root is not None else find_project_root(near)
    ctx = click.get_current_context(silent=True)
    obj = ctx.obj if ctx is not None else None
    config_file = obj.get("config_file") if isinstance(obj, dict) else None
    with reported_errors():
        return Workspace.from_root(project_root, config_file=config_file)


@contextmanager
def reported_errors() -> Iterator[None]:
    """Turn importplane errors into click errors with a readable message."""
    try:
        yield
    except ImportPlaneError as e:
        raise click.ClickException(f"{e.error_name}: {e.message}") from e


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))
