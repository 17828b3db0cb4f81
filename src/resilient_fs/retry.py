"""Bounded retries for destructive filesystem operations.

Removal and rename are known to fail transiently on some backends (busy
files on network mounts, stale handles, antivirus scanners holding a lock).
Both are retried a fixed number of times before the last error is
surfaced to the caller.
"""

from __future__ import annotations

import logging
import os
import stat
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TypeVar

from resilient_fs.filesystem import RealFileSystem
from resilient_fs.protocols import FileSystem
from resilient_fs.types import PathLike

logger = logging.getLogger(__name__)

T = TypeVar("T")

REMOVE_ATTEMPTS = 20
MOVE_ATTEMPTS = 20


class RetryExhaustedError(OSError):
    """Operation kept failing until the retry budget ran out.

    Carries errno and filename of the final attempt's error,
    which is also chained as ``__cause__``.

    Attributes:
        attempts: Number of attempts made.
        last_error: Error raised by the final attempt.
    """

    def __init__(self, description: str, attempts: int, last_error: OSError) -> None:
        reason = last_error.strerror or str(last_error)
        message = f"{description} failed after {attempts} attempts: {reason}"
        if last_error.errno is None:
            super().__init__(message)
        else:
            super().__init__(last_error.errno, message, last_error.filename)
        self.attempts = attempts
        self.last_error = last_error


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try an operation and how long to wait in between.

    Attributes:
        attempts: Maximum number of attempts (at least 1).
        delay: Seconds to sleep between attempts. Zero retries immediately.
    """

    attempts: int = REMOVE_ATTEMPTS
    delay: float = 0.0

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.attempts < 1:
            raise ValueError(f"attempts must be at least 1, got {self.attempts}")
        if self.delay < 0:
            raise ValueError(f"delay cannot be negative, got {self.delay}")


DEFAULT_REMOVE_POLICY = RetryPolicy(attempts=REMOVE_ATTEMPTS)
DEFAULT_MOVE_POLICY = RetryPolicy(attempts=MOVE_ATTEMPTS)


def retry_call(
    operation: Callable[..., T],
    *args: object,
    policy: RetryPolicy = DEFAULT_REMOVE_POLICY,
    description: str | None = None,
) -> T:
    """Call an operation until it succeeds or the policy gives up.

    Only ``OSError`` is retried; anything else propagates on the first
    occurrence.

    Args:
        operation: Callable to invoke.
        *args: Positional arguments for the callable.
        policy: Attempt budget and inter-attempt delay.
        description: Human-readable name used in logs and errors.

    Returns:
        Whatever the first successful call returns.

    Raises:
        RetryExhaustedError: If every attempt raised OSError.
    """
    description = description or getattr(operation, "__name__", "operation")
    attempt = 1

    while True:
        try:
            return operation(*args)
        except OSError as e:
            logger.debug(
                "%s failed (attempt %d/%d): %s", description, attempt, policy.attempts, e
            )
            if attempt >= policy.attempts:
                logger.warning(
                    "%s gave up after %d attempts: %s", description, policy.attempts, e
                )
                raise RetryExhaustedError(description, policy.attempts, e) from e
        if policy.delay:
            time.sleep(policy.delay)
        attempt += 1


def _remove_all(fs: FileSystem, path: str) -> None:
    """Remove a file or directory tree; a missing path is success."""
    try:
        st = fs.lstat(path)
        if stat.S_ISDIR(st.st_mode):
            fs.rmtree(path)
        else:
            fs.remove(path)
    except FileNotFoundError:
        return


def retry_remove(
    path: PathLike,
    policy: RetryPolicy | None = None,
    fs: FileSystem | None = None,
) -> None:
    """Remove a path and everything under it, retrying on failure.

    Args:
        path: File or directory to remove. A missing path is success.
        policy: Retry policy (defaults to REMOVE_ATTEMPTS immediate retries).
        fs: Filesystem implementation (defaults to RealFileSystem).

    Raises:
        RetryExhaustedError: If removal failed on every attempt.
    """
    fs = fs or RealFileSystem()
    path = os.fspath(path)
    retry_call(
        _remove_all,
        fs,
        path,
        policy=policy or DEFAULT_REMOVE_POLICY,
        description=f"remove {path}",
    )


def retry_move(
    old: PathLike,
    new: PathLike,
    policy: RetryPolicy | None = None,
    fs: FileSystem | None = None,
) -> None:
    """Rename a path, retrying on failure.

    Missing ancestors of ``new`` are not created; use ``copying.rename`` or
    ensure the parent first.

    Args:
        old: Existing path.
        new: Destination path.
        policy: Retry policy (defaults to MOVE_ATTEMPTS immediate retries).
        fs: Filesystem implementation (defaults to RealFileSystem).

    Raises:
        RetryExhaustedError: If the rename failed on every attempt.
    """
    fs = fs or RealFileSystem()
    old, new = os.fspath(old), os.fspath(new)
    retry_call(
        fs.rename,
        old,
        new,
        policy=policy or DEFAULT_MOVE_POLICY,
        description=f"move {old} -> {new}",
    )


def absent_many(
    paths: Iterable[PathLike],
    policy: RetryPolicy | None = None,
    fs: FileSystem | None = None,
) -> None:
    """Make sure none of the given paths exist.

    Every path is attempted even if an earlier one fails.

    Raises:
        RetryExhaustedError: The last failure seen, after all paths were tried.
    """
    fs = fs or RealFileSystem()
    last_error: OSError | None = None
    for path in paths:
        try:
            retry_remove(path, policy=policy, fs=fs)
        except OSError as e:
            last_error = e

    if last_error is not None:
        raise last_error


def remove_file_if_exists(path: PathLike, fs: FileSystem | None = None) -> None:
    """Remove a single file, treating a missing file as success.

    Raises:
        OSError: Any failure other than the file not existing.
    """
    fs = fs or RealFileSystem()
    try:
        fs.remove(os.fspath(path))
    except FileNotFoundError:
        logger.debug("%s already absent", path)
