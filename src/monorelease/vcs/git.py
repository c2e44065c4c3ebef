"""Git access for release calculation.

All git interaction goes through the ``git`` executable. Commands run
synchronously and are not retried: a failing command aborts the release
calculation with a :class:`~monorelease.exceptions.GitError`.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from monorelease.exceptions import GitError
from monorelease.logging import get_logger

logger = get_logger(__name__)


class GitRepository:
    """A git working tree.

    Args:
        path: Top level directory of the working tree. Paths passed to and
            returned by the methods are relative to it.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def root(self) -> Path:
        """Return the top level directory of the working tree."""
        return Path(self._run("rev-parse", "--show-toplevel").strip())

    def tags(self) -> list[str]:
        """Return every tag in the repository."""
        return _lines(self._run("tag", "--list"))

    def changes(self, from_ref: str, to_ref: str, path: str = ".") -> list[str]:
        """Return the files that differ between two references.

        Args:
            from_ref: Starting reference, e.g. a module tag
            to_ref: Ending reference, e.g. ``HEAD``
            path: Restrict the diff to this path, relative to the repository root

        Returns:
            Changed file paths relative to the repository root
        """
        return _entries(self._run("diff", "--name-only", "-z", from_ref, to_ref, "--", path))

    def ls_tree(self, ref: str, path: str) -> list[str]:
        """Return the files under ``path`` as of ``ref``.

        Paths are relative to the repository root. A path that didn't exist
        at ``ref`` yields an empty list.
        """
        return _entries(
            self._run("ls-tree", "-r", "-z", "--name-only", "--full-tree", ref, "--", path)
        )

    def _run(self, *args: str) -> str:
        cmd = ["git", *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                check=True,
                cwd=self.path,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {args[0]} failed with exit code {e.returncode}",
                stderr=e.stderr,
            ) from e
        return result.stdout


def _lines(output: str) -> list[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


def _entries(output: str) -> list[str]:
    # NUL separated output leaves paths unquoted, non-ASCII names included.
    return [entry for entry in output.split("\0") if entry]
