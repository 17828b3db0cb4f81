"""Idempotent directory creation.

``ensure_directory`` walks up the path until it finds an existing ancestor
and then creates each missing component on the way back down, re-applying
the permission mode after every ``mkdir`` so the process umask cannot
narrow it. A concurrent creator winning the race is not an error.
"""

from __future__ import annotations

import errno
import logging
import os
import stat
from collections.abc import Iterable

from resilient_fs.filesystem import RealFileSystem
from resilient_fs.protocols import FileSystem
from resilient_fs.retry import RetryPolicy, retry_remove
from resilient_fs.types import PathLike, PathModePair

logger = logging.getLogger(__name__)

DEFAULT_DIR_MODE = 0o755

_SEPARATORS = os.sep + (os.altsep or "")


def _stat_or_none(fs: FileSystem, path: str, follow: bool = True) -> os.stat_result | None:
    """Stat a path, mapping any failure to None."""
    try:
        return fs.stat(path) if follow else fs.lstat(path)
    except OSError:
        return None


def ensure_directory(
    path: PathLike, mode: int = DEFAULT_DIR_MODE, fs: FileSystem | None = None
) -> None:
    """Make sure a directory exists, creating missing ancestors.

    Args:
        path: Directory to ensure.
        mode: Permission bits for every directory created by this call.
        fs: Filesystem implementation (defaults to RealFileSystem).

    Raises:
        NotADirectoryError: If ``path`` (or an ancestor) exists but is not a
            directory.
        OSError: If a missing component cannot be created.
    """
    fs = fs or RealFileSystem()
    path = os.fspath(path)

    st = _stat_or_none(fs, path)
    if st is not None:
        if stat.S_ISDIR(st.st_mode):
            return
        raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), path)

    stripped = path.rstrip(_SEPARATORS)
    parent = os.path.dirname(stripped)
    if parent and parent != stripped:
        ensure_directory(parent, mode, fs)

    try:
        fs.mkdir(path, mode)
    except OSError:
        # Handles "foo/." as well as another process creating the directory
        st = _stat_or_none(fs, path, follow=False)
        if st is not None and stat.S_ISDIR(st.st_mode):
            logger.debug("Directory %s already created, skipping", path)
            return
        raise

    fs.chmod(path, mode)


def ensure(path: PathLike, mode: int = DEFAULT_DIR_MODE, fs: FileSystem | None = None) -> None:
    """Create a directory only if nothing exists at the path yet.

    This is a cheaper front for ``ensure_directory``: an existing path of
    any type is accepted as-is.

    Args:
        path: Directory to ensure.
        mode: Permission bits for created directories.
        fs: Filesystem implementation (defaults to RealFileSystem).

    Raises:
        OSError: If existence cannot be determined or creation fails.
    """
    fs = fs or RealFileSystem()
    path = os.fspath(path)
    if not fs.exists(path):
        ensure_directory(path, mode, fs)


def ensure_many(pairs: Iterable[PathModePair], fs: FileSystem | None = None) -> None:
    """Create every missing directory in a batch.

    Pairs are processed in order. Paths that already exist are skipped
    without checking their type; absent ones are created together with
    their ancestors. The first failure stops the batch.

    Args:
        pairs: Directories to create with their modes.
        fs: Filesystem implementation (defaults to RealFileSystem).

    Raises:
        OSError: The first stat or creation failure encountered.
    """
    fs = fs or RealFileSystem()
    for pair in pairs:
        if not fs.exists(pair.path):
            fs.makedirs(pair.path, pair.mode)


def is_dir_empty(path: PathLike, fs: FileSystem | None = None) -> bool:
    """Check whether a directory has no entries.

    Only the first entry is read, so this is cheap on large directories.

    Raises:
        OSError: If the directory cannot be opened.
    """
    fs = fs or RealFileSystem()
    with fs.scandir(os.fspath(path)) as entries:
        return next(iter(entries), None) is None


def clear_directory(
    path: PathLike,
    policy: RetryPolicy | None = None,
    fs: FileSystem | None = None,
) -> None:
    """Remove everything inside a directory but keep the directory itself.

    Every child is attempted even if an earlier one fails.

    Args:
        path: Directory to clear. A missing path is a no-op.
        policy: Retry policy for each child removal.
        fs: Filesystem implementation (defaults to RealFileSystem).

    Raises:
        OSError: The last removal failure, after all children were attempted.
    """
    fs = fs or RealFileSystem()
    path = os.fspath(path)
    if not fs.exists(path):
        return

    last_error: OSError | None = None
    for name in fs.listdir(path):
        try:
            retry_remove(os.path.join(path, name), policy=policy, fs=fs)
        except OSError as e:
            last_error = e

    if last_error is not None:
        raise last_error
