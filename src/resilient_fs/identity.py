"""Content identity: digest, size and latency of a file's bytes.

A ``ContentIdentity`` record keeps the raw bytes it read in a buffer taken
from a shared ``BufferPool``. The record owns that buffer until
``release()`` hands it back; computing again on the same record reuses the
buffer instead of allocating a new one.

Typical use::

    with ContentIdentity() as ident:
        for path in paths:
            ident.compute(path)
            print(ident.hexdigest, ident.size)
"""

from __future__ import annotations

import hashlib
import logging
import os
import threading
import time
from types import TracebackType

from resilient_fs.filesystem import RealFileSystem
from resilient_fs.protocols import BufferPoolProtocol, Clock, FileSystem
from resilient_fs.types import PathLike

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "md5"
DEFAULT_POOL_SIZE = 16


class BufferPool:
    """Thread-safe free list of reusable byte buffers.

    Buffers are handed out empty. A released buffer is cleared and kept
    for the next ``acquire`` unless the pool is already full, in which case
    it is dropped.
    """

    def __init__(self, max_size: int = DEFAULT_POOL_SIZE) -> None:
        """Initialize the pool.

        Args:
            max_size: Maximum number of idle buffers kept.
        """
        if max_size < 0:
            raise ValueError(f"max_size cannot be negative, got {max_size}")
        self.max_size = max_size
        self._free: list[bytearray] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._free)

    def acquire(self) -> bytearray:
        """Take an empty buffer from the pool, allocating one if none is idle."""
        with self._lock:
            if self._free:
                return self._free.pop()
        return bytearray()

    def release(self, buf: bytearray | None) -> None:
        """Return a buffer to the pool.

        Releasing ``None`` or a buffer that is already idle in the pool is
        ignored, so a double release cannot hand the same buffer to two
        owners.
        """
        if buf is None:
            return
        buf.clear()
        with self._lock:
            if any(idle is buf for idle in self._free):
                logger.debug("Ignoring release of buffer already in pool")
                return
            if len(self._free) < self.max_size:
                self._free.append(buf)


default_pool = BufferPool()


class ContentIdentity:
    """Digest, size and computation latency of a file's full contents.

    Attributes:
        digest: Raw digest bytes (empty until the first ``compute``).
        size: Number of bytes hashed.
        latency: Seconds spent in the last ``compute`` call, failed or not.
        buffer: Bytes read by the last ``compute``; None once released.

    The record is single-owner: after ``release()`` the buffer belongs to
    the pool again and must not be used through any reference kept earlier.
    """

    def __init__(
        self,
        pool: BufferPoolProtocol | None = None,
        algorithm: str = DEFAULT_ALGORITHM,
        fs: FileSystem | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        """Initialize an empty record.

        Args:
            pool: Buffer pool (defaults to the shared module pool).
            algorithm: Any ``hashlib`` algorithm name.
            fs: Filesystem implementation (defaults to RealFileSystem).
            clock: Monotonic clock in seconds.

        Raises:
            ValueError: If the algorithm is unknown to hashlib.
        """
        hashlib.new(algorithm)
        self.pool = pool if pool is not None else default_pool
        self.algorithm = algorithm
        self.fs = fs or RealFileSystem()
        self.clock = clock
        self.digest = b""
        self.size = 0
        self.latency = 0.0
        self.buffer: bytearray | None = None

    def __enter__(self) -> ContentIdentity:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    @property
    def hexdigest(self) -> str:
        """Digest as a lowercase hex string."""
        return self.digest.hex()

    def compute(self, path: PathLike) -> ContentIdentity:
        """Read a file and record its digest, size and latency.

        Args:
            path: File to fingerprint.

        Returns:
            This record, for chaining.

        Raises:
            OSError: If the file cannot be stat-ed or read.
        """
        start = self.clock()
        try:
            path = os.fspath(path)
            self.fs.stat(path)
            data = self.fs.read_bytes(path)
            digest = hashlib.new(self.algorithm, data).digest()

            # Nothing is recorded until stat, read and hash all succeed
            if self.buffer is None:
                self.buffer = self.pool.acquire()
            else:
                logger.debug("Reusing buffer for %s", path)
                self.buffer.clear()
            self.buffer += data
            self.digest = digest
            # The file may have changed size between stat and read
            self.size = len(data)
        finally:
            self.latency = self.clock() - start
        return self

    def release(self) -> None:
        """Return the owned buffer to the pool. Safe to call more than once."""
        buf, self.buffer = self.buffer, None
        self.pool.release(buf)
