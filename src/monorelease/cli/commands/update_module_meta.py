"""Implementation of the 'update-module-meta' command.

Writes the generated version metadata file of every module, recording the
latest tagged version of each. Tags of a release manifest that have not been
created yet can be merged in with ``--release``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from monorelease.cli.commands._inputs import fail, load_release_inputs
from monorelease.core.manifest import load_manifest
from monorelease.exceptions import MonoreleaseError
from monorelease.logging import get_logger
from monorelease.project.metadata import update_module_metadata
from monorelease.vcs import parse_module_tags

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

logger = get_logger(__name__)


def run_update_module_meta(
    path: str | None,
    release: Path | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the update-module-meta command.

    Args:
        path: Optional path inside the repository
        release: Release manifest whose tags are added to the repository tags
        console: Console for standard output
        err_console: Console for error output
    """
    inputs = load_release_inputs(path, err_console)
    root = inputs.discoverer.root

    try:
        tags = list(inputs.tags)
        if release is not None:
            manifest = load_manifest(release)
            logger.info("Adding %d tags from release %s", len(manifest.tags), manifest.id)
            tags.extend(manifest.tags)

        written = update_module_metadata(
            root,
            inputs.discoverer.modules,
            inputs.config,
            parse_module_tags(tags),
        )
    except MonoreleaseError as e:
        fail(err_console, e)

    for file_path in written:
        console.print(f"[green]Updated[/] [cyan]{file_path.relative_to(root)}[/]")
