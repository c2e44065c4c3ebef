"""Implementation of the 'calculate' command.

Calculates the release manifest for the repository and prints it as JSON,
or writes it to a file.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

from monorelease.cli.commands._inputs import fail, load_release_inputs
from monorelease.core.calculate import calculate
from monorelease.core.manifest import build_release_manifest, next_release_id
from monorelease.exceptions import MonoreleaseError
from monorelease.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

    from monorelease.core.manifest import Manifest

logger = get_logger(__name__)


def run_calculate(
    path: str | None,
    preview: str | None,
    verbose: bool,
    output: Path | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the calculate command.

    Args:
        path: Optional path inside the repository
        preview: Pre-release identifier to release every module with
        verbose: Include the changed files of each module in the manifest
        output: File to write the manifest to; must not exist yet
        console: Console for standard output
        err_console: Console for error output
    """
    inputs = load_release_inputs(path, err_console)

    logger.info("Calculating module changes")
    try:
        modules = calculate(
            inputs.discoverer,
            inputs.module_tags,
            inputs.config,
            inputs.annotations,
            inputs.repo,
        )
        manifest = build_release_manifest(
            inputs.discoverer.modules,
            next_release_id(inputs.tags),
            modules,
            verbose=verbose,
            pre_release=preview or "",
            tags=inputs.module_tags,
        )
    except MonoreleaseError as e:
        fail(err_console, e)

    if output is None:
        console.out(manifest.to_json(), highlight=False)
        return

    try:
        with output.open("x", encoding="utf-8") as f:
            f.write(manifest.to_json())
    except FileExistsError:
        fail(err_console, FileExistsError(f"{output} already exists"))
    except OSError as e:
        fail(err_console, e)

    console.print(_summary(manifest))
    console.print(f"[green]Wrote release manifest to[/] [cyan]{output}[/]")


def _summary(manifest: Manifest) -> Table:
    table = Table(title=f"Release {manifest.id}")
    table.add_column("Module", style="cyan")
    table.add_column("From")
    table.add_column("To", style="green")
    table.add_column("Changes")

    for rel_path, module in manifest.modules.items():
        table.add_row(rel_path, module.from_ or "-", module.to, str(module.changes))

    return table
