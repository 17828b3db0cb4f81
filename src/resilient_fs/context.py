"""Application context for dependency injection.

This module separates object creation from object use, enabling testability
and reducing coupling in CLI commands.

Dependencies are typed using Protocols (abstract interfaces) rather than
concrete implementations, so tests can inject doubles for the filesystem
and buffer pool without inheritance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from resilient_fs.config import Settings, load_settings
from resilient_fs.identity import ContentIdentity
from resilient_fs.protocols import BufferPoolProtocol, FileSystem


def _default_filesystem() -> FileSystem:
    """Create the default filesystem implementation."""
    from resilient_fs.filesystem import RealFileSystem

    return RealFileSystem()


def _default_pool() -> BufferPoolProtocol:
    """Use the process-wide buffer pool."""
    from resilient_fs.identity import default_pool

    return default_pool


@dataclass
class AppContext:
    """Container for the dependencies used by CLI commands."""

    settings: Settings = field(default_factory=Settings)
    filesystem: FileSystem = field(default_factory=_default_filesystem)
    pool: BufferPoolProtocol = field(default_factory=_default_pool)

    def new_identity(self) -> ContentIdentity:
        """Create a content-identity record wired to this context."""
        return ContentIdentity(
            pool=self.pool,
            algorithm=self.settings.digest_algorithm,
            fs=self.filesystem,
        )


def create_context(config_path: Path | None = None) -> AppContext:
    """Factory for application dependencies.

    Use this in production code. For tests, construct AppContext directly
    with test doubles.

    Args:
        config_path: Optional YAML settings file.

    Returns:
        Configured AppContext.

    Raises:
        ValueError: If the settings file is invalid.
    """
    from resilient_fs.filesystem import RealFileSystem
    from resilient_fs.identity import BufferPool

    settings = load_settings(config_path)
    return AppContext(
        settings=settings,
        filesystem=RealFileSystem(),
        pool=BufferPool(max_size=settings.buffer_pool_size),
    )
