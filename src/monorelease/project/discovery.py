"""Discovery of the modules in a repository."""

from __future__ import annotations

import os
from pathlib import Path

from monorelease.core.changes import MODULE_FILE_NAME
from monorelease.core.tree import ModuleTree
from monorelease.logging import get_logger

logger = get_logger(__name__)

TEST_DATA_DIRS = frozenset({"testdata"})


class Discoverer:
    """Finds every module nested within a repository root.

    Hidden directories and test fixture directories are not searched.
    Calling :meth:`discover` again resets the previously found modules.
    """

    def __init__(self, root: Path | str, skip_dirs: frozenset[str] = TEST_DATA_DIRS) -> None:
        self._root = Path(root)
        self._skip_dirs = skip_dirs
        self._modules = ModuleTree(root_path=self._root)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def modules(self) -> ModuleTree:
        return self._modules

    def discover(self) -> ModuleTree:
        self._modules = ModuleTree(root_path=self._root)

        for directory, dir_names, file_names in os.walk(self._root, onerror=_raise):
            # Prune in place so os.walk doesn't descend into skipped directories.
            dir_names[:] = sorted(
                d for d in dir_names if not d.startswith(".") and d not in self._skip_dirs
            )
            if MODULE_FILE_NAME in file_names:
                node = self._modules.insert(directory)
                logger.debug("Discovered module %s", node.path)

        return self._modules


def _raise(error: OSError) -> None:
    raise error
