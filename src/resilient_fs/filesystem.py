"""Filesystem abstraction for testability.

This module provides the platform filesystem used by every operation in
the package. The RealFileSystem implementation wraps standard library
``os``, ``shutil`` and ``open`` calls without adding policy of its own:
retries, idempotence and best-effort walks live in the callers.
"""

from __future__ import annotations

import os
import shutil
from typing import BinaryIO, Iterator


class RealFileSystem:
    """Production filesystem implementation.

    Wraps standard library os and shutil operations.
    Satisfies the FileSystem protocol structurally.
    """

    def stat(self, path: str) -> os.stat_result:
        """Return metadata for a path, following symlinks."""
        return os.stat(path)

    def lstat(self, path: str) -> os.stat_result:
        """Return metadata for a path without following symlinks."""
        return os.lstat(path)

    def exists(self, path: str) -> bool:
        """Check if a path exists.

        Unlike ``os.path.exists`` this only reports False for a missing
        path; any other stat failure is raised.
        """
        try:
            os.stat(path)
        except FileNotFoundError:
            return False
        return True

    def mkdir(self, path: str, mode: int) -> None:
        """Create a single directory."""
        os.mkdir(path, mode)

    def makedirs(self, path: str, mode: int, exist_ok: bool = False) -> None:
        """Create a directory and any missing ancestors."""
        os.makedirs(path, mode, exist_ok=exist_ok)

    def chmod(self, path: str, mode: int) -> None:
        """Set permission bits on a path."""
        os.chmod(path, mode)

    def listdir(self, path: str) -> list[str]:
        """List entry names in a directory."""
        return os.listdir(path)

    def scandir(self, path: str) -> Iterator[os.DirEntry[str]]:
        """Iterate over directory entries lazily."""
        return os.scandir(path)

    def rmtree(self, path: str) -> None:
        """Remove a directory tree."""
        shutil.rmtree(path)

    def remove(self, path: str) -> None:
        """Remove a single file."""
        os.remove(path)

    def rename(self, old: str, new: str) -> None:
        """Rename a path."""
        os.replace(old, new)

    def open_read(self, path: str) -> BinaryIO:
        """Open a file for binary reading."""
        return open(path, "rb")

    def open_write(self, path: str, mode: int | None = None) -> BinaryIO:
        """Create or truncate a file for binary writing."""
        if mode is None:
            return open(path, "wb")
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        return os.fdopen(fd, "wb")

    def read_bytes(self, path: str) -> bytes:
        """Read the full contents of a file."""
        with open(path, "rb") as f:
            return f.read()
