"""monorelease command-line application."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from monorelease import __version__
from monorelease.logging import configure_logging

app = typer.Typer(
    name="monorelease",
    help="Plan releases for monorepos of independently versioned Python packages.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"monorelease {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    debug: Annotated[bool, typer.Option("--debug", help="Show debug logging.")] = False,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version."),
    ] = False,
) -> None:
    """Plan releases for monorepos of independently versioned Python packages."""
    configure_logging(verbose=debug, console=err_console)


@app.command("calculate")
def calculate_command(
    path: Annotated[str | None, typer.Argument(help="Path inside the repository.")] = None,
    preview: Annotated[
        str | None,
        typer.Option("--preview", help="Release every module as this pre-release, e.g. 'rc'."),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Include changed files in the manifest.")
    ] = False,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write the manifest to this new file.")
    ] = None,
) -> None:
    """Calculate the release manifest of the repository."""
    from monorelease.cli.commands.calculate import run_calculate

    run_calculate(path, preview, verbose, output, console, err_console)


@app.command("module-version")
def module_version_command(
    module: Annotated[str, typer.Argument(help="Relative repository path of the module.")],
    path: Annotated[str | None, typer.Argument(help="Path inside the repository.")] = None,
    unreleased: Annotated[
        bool,
        typer.Option("--unreleased", help="Show the tag the module gets in the next release."),
    ] = False,
    preview: Annotated[
        str | None,
        typer.Option("--preview", help="Pre-release identifier, used with --unreleased."),
    ] = None,
) -> None:
    """Print the current version of a module."""
    from monorelease.cli.commands.module_version import run_module_version

    run_module_version(module, path, unreleased, preview, console, err_console)


@app.command("update-module-meta")
def update_module_meta_command(
    path: Annotated[str | None, typer.Argument(help="Path inside the repository.")] = None,
    release: Annotated[
        Path | None,
        typer.Option("--release", help="Release manifest whose tags are not created yet."),
    ] = None,
) -> None:
    """Write the generated version metadata file of every module."""
    from monorelease.cli.commands.update_module_meta import run_update_module_meta

    run_update_module_meta(path, release, console, err_console)


@app.command("edit-module-dependency")
def edit_module_dependency_command(
    path: Annotated[str | None, typer.Argument(help="Path inside the repository.")] = None,
    set_module: Annotated[
        str | None, typer.Option("--set", "-s", help="Dependency to pin, used with --version.")
    ] = None,
    delete_module: Annotated[
        str | None, typer.Option("--delete", "-d", help="Dependency to remove.")
    ] = None,
    version: Annotated[
        str | None, typer.Option("--version", "-v", help="Version to pin the dependency to.")
    ] = None,
) -> None:
    """Pin or remove a dependency in [tool.monorelease.dependencies]."""
    if (set_module is None) == (delete_module is None):
        raise typer.BadParameter("pass exactly one of --set or --delete")
    if set_module is not None and not version:
        raise typer.BadParameter("--set requires --version")
    if delete_module is not None and version is not None:
        raise typer.BadParameter("--version can't be used with --delete")

    from monorelease.cli.commands.edit_module_dependency import run_edit_module_dependency

    run_edit_module_dependency(path, set_module, delete_module, version, console, err_console)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
