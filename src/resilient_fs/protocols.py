"""Protocol definitions for external collaborators.

This module defines abstract interfaces (Protocols) for the services the
filesystem operations depend on. Designing to interfaces enables:
- Substituting test doubles for the platform filesystem
- Sharing a buffer pool between independent content-identity records
- Injecting a deterministic clock for latency measurement

All concrete implementations satisfy these protocols structurally (duck typing).
"""

from __future__ import annotations

import os
from typing import BinaryIO, Iterator, Protocol, runtime_checkable


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for platform filesystem primitives.

    Every operation takes a plain string path and raises ``OSError``
    subclasses exactly as the platform reports them.
    """

    def stat(self, path: str) -> os.stat_result:
        """Return metadata for a path, following symlinks.

        Raises:
            FileNotFoundError: If the path does not exist.
        """
        ...

    def lstat(self, path: str) -> os.stat_result:
        """Return metadata for a path without following symlinks."""
        ...

    def exists(self, path: str) -> bool:
        """Check if a path exists.

        Raises:
            OSError: If existence cannot be determined (e.g. permission denied
                on a parent directory).
        """
        ...

    def mkdir(self, path: str, mode: int) -> None:
        """Create a single directory.

        Raises:
            FileExistsError: If the path already exists.
            FileNotFoundError: If the parent does not exist.
        """
        ...

    def makedirs(self, path: str, mode: int, exist_ok: bool = False) -> None:
        """Create a directory and any missing ancestors."""
        ...

    def chmod(self, path: str, mode: int) -> None:
        """Set permission bits on a path."""
        ...

    def listdir(self, path: str) -> list[str]:
        """List entry names in a directory."""
        ...

    def scandir(self, path: str) -> Iterator[os.DirEntry[str]]:
        """Iterate over directory entries lazily."""
        ...

    def rmtree(self, path: str) -> None:
        """Remove a directory tree."""
        ...

    def remove(self, path: str) -> None:
        """Remove a single file.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        ...

    def rename(self, old: str, new: str) -> None:
        """Rename a path, replacing the destination where the platform allows."""
        ...

    def open_read(self, path: str) -> BinaryIO:
        """Open a file for binary reading."""
        ...

    def open_write(self, path: str, mode: int | None = None) -> BinaryIO:
        """Create or truncate a file for binary writing.

        Args:
            path: File to open.
            mode: Permission bits applied on creation, or None for the
                platform default.
        """
        ...

    def read_bytes(self, path: str) -> bytes:
        """Read the full contents of a file."""
        ...


@runtime_checkable
class BufferPoolProtocol(Protocol):
    """Protocol for a shared pool of reusable byte buffers.

    Implementations must be safe for concurrent acquire/release.
    """

    def acquire(self) -> bytearray:
        """Take an empty buffer out of the pool (or allocate one).

        Returns:
            An empty buffer exclusively owned by the caller.
        """
        ...

    def release(self, buf: bytearray | None) -> None:
        """Return a buffer to the pool.

        Args:
            buf: Buffer previously obtained from ``acquire``.
        """
        ...


@runtime_checkable
class Clock(Protocol):
    """Protocol for a monotonic clock returning seconds."""

    def __call__(self) -> float:
        """Return the current monotonic time in seconds."""
        ...
