"""Implementation of the 'module-version' command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from monorelease.cli.commands._inputs import fail, load_release_inputs
from monorelease.core.calculate import calculate
from monorelease.core.manifest import build_release_manifest, next_release_id
from monorelease.exceptions import MonoreleaseError
from monorelease.vcs import to_module_tag

if TYPE_CHECKING:
    from rich.console import Console

UNRELEASED_VERSION = "v0.0.0"


def run_module_version(
    module: str,
    path: str | None,
    unreleased: bool,
    preview: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Print the version of a module.

    Args:
        module: Relative repository path of the module
        path: Optional path inside the repository
        unreleased: Print the tag the module would get in the next release
        preview: Pre-release identifier for the next release
        console: Console for standard output
        err_console: Console for error output
    """
    inputs = load_release_inputs(path, err_console)

    if inputs.discoverer.modules.get(module) is None:
        fail(err_console, LookupError(f"module {module!r} not found in the repository"))

    if unreleased:
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
                pre_release=preview or "",
                tags=inputs.module_tags,
            )
        except MonoreleaseError as e:
            fail(err_console, e)

        if module in manifest.modules:
            console.out(to_module_tag(module, manifest.modules[module].to), highlight=False)
            return

    console.out(inputs.module_tags.latest(module) or UNRELEASED_VERSION, highlight=False)
