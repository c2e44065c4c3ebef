"""Implementation of the 'edit-module-dependency' command."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from monorelease.cli.commands._inputs import fail
from monorelease.config import delete_dependency, set_dependency
from monorelease.config.loader import PYPROJECT
from monorelease.exceptions import ConfigNotFoundError, MonoreleaseError
from monorelease.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console


def run_edit_module_dependency(
    path: str | None,
    set_module: str | None,
    delete_module: str | None,
    version: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Pin or unpin a dependency in the repository's pyproject.toml.

    Exactly one of ``set_module`` and ``delete_module`` is given;
    ``version`` goes with ``set_module``.

    Args:
        path: Optional path inside the repository
        set_module: Dependency to pin to ``version``
        delete_module: Dependency to remove
        version: Version to pin
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    try:
        root = GitRepository(project_path).root()
        if not (root / PYPROJECT).is_file():
            raise ConfigNotFoundError(f"No {PYPROJECT} in repository root {root}")

        if set_module is not None and version is not None:
            previous = set_dependency(root, set_module, version)
            if previous is None:
                console.print(f"[green]Added[/] [cyan]{set_module}[/] {version}")
            else:
                console.print(f"[green]Updated[/] [cyan]{set_module}[/] {previous} -> {version}")
        elif delete_module is not None:
            removed = delete_dependency(root, delete_module)
            console.print(f"[green]Deleted[/] [cyan]{delete_module}[/] {removed}")
    except MonoreleaseError as e:
        fail(err_console, e)
