"""File and directory-tree copying.

Two copy flavours are provided and deliberately kept apart:

- ``copy_file`` is strict: the first error while opening, streaming or
  applying permissions is raised.
- ``copy_tree`` is best-effort: each entry is copied with ``copy_file`` and
  failures are collected so the rest of the tree is still copied. Nothing
  is rolled back.
"""

from __future__ import annotations

import io
import logging
import os
import shutil
import stat
from typing import BinaryIO, Union

from resilient_fs.directories import DEFAULT_DIR_MODE, ensure
from resilient_fs.filesystem import RealFileSystem
from resilient_fs.protocols import FileSystem
from resilient_fs.types import CopyFailure, CopyTreeResult, PathLike

logger = logging.getLogger(__name__)

DEFAULT_FILE_MODE = 0o644

# Chunk size for streaming writes
COPY_BUFSIZE = 64 * 1024

Source = Union[BinaryIO, bytes, bytearray, memoryview]


def copy_file(
    source: PathLike, dest: PathLike, mode: int = 0, fs: FileSystem | None = None
) -> None:
    """Copy a single file and set its permissions.

    Args:
        source: File to copy.
        dest: Destination file, created or truncated.
        mode: Permission bits for the destination. Zero copies the source's
            own permission bits.
        fs: Filesystem implementation (defaults to RealFileSystem).

    Raises:
        OSError: The first failure opening, copying or chmod-ing.
    """
    fs = fs or RealFileSystem()
    source, dest = os.fspath(source), os.fspath(dest)

    with fs.open_read(source) as src, fs.open_write(dest) as dst:
        shutil.copyfileobj(src, dst, COPY_BUFSIZE)

    if mode == 0:
        mode = stat.S_IMODE(fs.stat(source).st_mode)
    fs.chmod(dest, mode)


def copy_file_ensure_dir(
    source: PathLike,
    dest: PathLike,
    file_mode: int = 0,
    dir_mode: int = DEFAULT_DIR_MODE,
    fs: FileSystem | None = None,
) -> None:
    """Copy a file after making sure the destination directory exists.

    Args:
        source: File to copy.
        dest: Destination file.
        file_mode: Permission bits for the copy (0 inherits the source's).
        dir_mode: Permission bits for any directory created.
        fs: Filesystem implementation (defaults to RealFileSystem).

    Raises:
        OSError: If the directory cannot be ensured or the copy fails.
    """
    fs = fs or RealFileSystem()
    dest = os.fspath(dest)
    ensure(os.path.dirname(dest) or os.curdir, dir_mode, fs)
    copy_file(source, dest, file_mode, fs)


def copy_tree(
    source_dir: PathLike,
    dest_dir: PathLike,
    mode: int = 0,
    fs: FileSystem | None = None,
) -> CopyTreeResult:
    """Recursively copy a directory, continuing past per-entry failures.

    The destination root is created with the source root's permission bits.
    Subdirectories are created the same way as they are reached.

    Args:
        source_dir: Directory to copy.
        dest_dir: Destination directory (created if missing).
        mode: Permission override for copied files; zero keeps each source
            file's own bits.
        fs: Filesystem implementation (defaults to RealFileSystem).

    Returns:
        CopyTreeResult listing copied files and every failed entry.

    Raises:
        OSError: If the source root cannot be read or the destination root
            cannot be created.
    """
    fs = fs or RealFileSystem()
    result = CopyTreeResult()
    _copy_dir(os.fspath(source_dir), os.fspath(dest_dir), mode, fs, result)
    return result


def _copy_dir(
    source: str, dest: str, mode: int, fs: FileSystem, result: CopyTreeResult
) -> None:
    """Copy one directory level; errors about this directory itself propagate."""
    source_mode = stat.S_IMODE(fs.stat(source).st_mode)
    fs.makedirs(dest, source_mode, exist_ok=True)

    with fs.scandir(source) as it:
        entries = list(it)

    for entry in entries:
        src_path = os.path.join(source, entry.name)
        dst_path = os.path.join(dest, entry.name)
        try:
            if entry.is_dir(follow_symlinks=False):
                _copy_dir(src_path, dst_path, mode, fs, result)
            else:
                copy_file(src_path, dst_path, mode, fs)
                result.copied.append(dst_path)
        except OSError as e:
            logger.warning("Failed to copy %s to %s: %s", src_path, dst_path, e)
            result.failures.append(CopyFailure(src_path, dst_path, e))


def rename(
    old: PathLike,
    new: PathLike,
    dir_mode: int = DEFAULT_DIR_MODE,
    fs: FileSystem | None = None,
) -> None:
    """Rename a path after making sure the destination directory exists.

    A single rename is attempted; see ``retry.retry_move`` for retries.

    Raises:
        OSError: If the parent cannot be ensured or the rename fails.
    """
    fs = fs or RealFileSystem()
    old, new = os.fspath(old), os.fspath(new)
    ensure(os.path.dirname(new) or os.curdir, dir_mode, fs)
    fs.rename(old, new)


def write_file(
    path: PathLike,
    src: Source,
    dir_mode: int = DEFAULT_DIR_MODE,
    file_mode: int = DEFAULT_FILE_MODE,
    fs: FileSystem | None = None,
) -> int:
    """Write a stream to a file, creating its directory if needed.

    ``file_mode`` only applies when the file is created; an existing file is
    truncated and keeps its permissions.

    Args:
        path: Destination file.
        src: Binary reader or bytes-like content.
        dir_mode: Permission bits for any directory created.
        file_mode: Permission bits for a newly created file.
        fs: Filesystem implementation (defaults to RealFileSystem).

    Returns:
        Number of bytes written.
    """
    fs = fs or RealFileSystem()
    path = os.fspath(path)
    ensure(os.path.dirname(path) or os.curdir, dir_mode, fs)

    if isinstance(src, (bytes, bytearray, memoryview)):
        src = io.BytesIO(src)

    written = 0
    with fs.open_write(path, file_mode) as dst:
        for chunk in iter(lambda: src.read(COPY_BUFSIZE), b""):
            dst.write(chunk)
            written += len(chunk)
    return written


def to_file(
    path: PathLike,
    mode: int,
    reader: BinaryIO,
    fs: FileSystem | None = None,
) -> None:
    """Stream a reader into a new file, creating its directory with ``mode``.

    The file itself is created with the platform default permissions.
    """
    fs = fs or RealFileSystem()
    path = os.fspath(path)
    ensure(os.path.dirname(path) or os.curdir, mode, fs)
    with fs.open_write(path) as dst:
        shutil.copyfileobj(reader, dst, COPY_BUFSIZE)
