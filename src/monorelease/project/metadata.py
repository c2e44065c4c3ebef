"""Generated version metadata for modules.

Each module can carry a generated file recording the version it was last
released as, so the package can report its own version at runtime::

    # Code generated by monorelease update-module-meta. DO NOT EDIT.

    __version__ = "1.4.0"

The file is written into the module directory, or into the package named by
the module's ``metadata_package`` setting.
"""

from __future__ import annotations

import json
import posixpath
from typing import TYPE_CHECKING

from monorelease.exceptions import MetadataLocationError
from monorelease.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from monorelease.config.models import ModuleConfig, MonoreleaseConfig
    from monorelease.core.tree import ModuleTree, ModuleTreeNode
    from monorelease.vcs.tags import ModuleTags

logger = get_logger(__name__)

METADATA_FILE = "_module_metadata.py"
TIP_VERSION = "tip"

_TEMPLATE = """\
# Code generated by monorelease update-module-meta. DO NOT EDIT.

__version__ = {version}
"""


def metadata_version(latest: str | None, config: ModuleConfig) -> str:
    """Version recorded for a module: its latest tag without the ``v``, or ``tip``."""
    if config.no_tag or latest is None:
        return TIP_VERSION
    return latest.removeprefix("v")


def metadata_directory(root: Path, module: ModuleTreeNode, config: ModuleConfig) -> Path:
    """Directory that holds the metadata file of a module.

    Raises:
        MetadataLocationError: If ``metadata_package`` points outside the
            module or into one of its sub-modules
    """
    if not config.metadata_package:
        return root / module.path

    location = posixpath.normpath(posixpath.join(module.path, config.metadata_package))
    if (
        posixpath.isabs(location)
        or location == ".."
        or location.startswith("../")
        or not module.ancestor_of(location)
        or module.search(location) is not None
    ):
        raise MetadataLocationError(module.path, config.metadata_package)

    return root / location


def is_metadata_target(directory: Path) -> bool:
    """Return True if the metadata file belongs in ``directory``.

    Only Python packages get one, unless a metadata file is already there.
    """
    return (directory / METADATA_FILE).is_file() or (directory / "__init__.py").is_file()


def write_module_metadata(directory: Path, version: str) -> Path:
    """Write (or overwrite) the metadata file in ``directory``."""
    path = directory / METADATA_FILE
    path.write_text(_TEMPLATE.format(version=json.dumps(version)), encoding="utf-8")
    return path


def update_module_metadata(
    root: Path,
    tree: ModuleTree,
    config: MonoreleaseConfig,
    tags: ModuleTags,
) -> list[Path]:
    """Write the metadata file of every module in the tree.

    Args:
        root: Repository root
        tree: Module tree of the repository
        config: Repository configuration
        tags: Module tags, whose latest versions are recorded

    Returns:
        Paths of the files written

    Raises:
        MetadataLocationError: If a module's ``metadata_package`` is invalid
    """
    written: list[Path] = []

    for module in tree.iterator():
        module_config = config.module(module.path)
        directory = metadata_directory(root, module, module_config)

        if not is_metadata_target(directory):
            logger.warning("No Python package for %s in %s, skipping", module.path, directory)
            continue

        version = metadata_version(tags.latest(module.path), module_config)
        written.append(write_module_metadata(directory, version))
        logger.debug("%s: wrote version %s", module.path, version)

    return written
