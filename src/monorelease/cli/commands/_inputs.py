"""Collaborators shared by the release commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

from rich.markup import escape

from monorelease.config import load_config
from monorelease.core.changelog import load_annotations
from monorelease.exceptions import MonoreleaseError
from monorelease.project import Discoverer
from monorelease.vcs import GitRepository, parse_module_tags

if TYPE_CHECKING:
    from rich.console import Console

    from monorelease.config import MonoreleaseConfig
    from monorelease.core.changelog import Annotation
    from monorelease.vcs import ModuleTags


@dataclass
class ReleaseInputs:
    """Everything a release calculation reads from the repository."""

    repo: GitRepository
    config: MonoreleaseConfig
    discoverer: Discoverer
    tags: list[str]
    module_tags: ModuleTags
    annotations: list[Annotation]


def load_release_inputs(path: str | None, err_console: Console) -> ReleaseInputs:
    """Gather the repository state, exiting with status 1 on failure."""
    project_path = Path(path) if path else Path.cwd()

    try:
        root = GitRepository(project_path).root()
        repo = GitRepository(root)
        config = load_config(root)

        discoverer = Discoverer(root)
        discoverer.discover()

        tags = repo.tags()
        annotations = load_annotations(root)
    except MonoreleaseError as e:
        fail(err_console, e)

    return ReleaseInputs(
        repo=repo,
        config=config,
        discoverer=discoverer,
        tags=tags,
        module_tags=parse_module_tags(tags),
        annotations=annotations,
    )


def fail(err_console: Console, error: Exception) -> NoReturn:
    """Print an error and exit with status 1."""
    err_console.print(f"[red]Error:[/] {escape(str(error))}")
    raise SystemExit(1) from error
