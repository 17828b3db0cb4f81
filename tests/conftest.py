"""Shared test fixtures."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from resilient_fs.filesystem import RealFileSystem
from resilient_fs.identity import BufferPool


# ============================================================================
# Filesystem Fixtures
# ============================================================================


class FlakyFileSystem(RealFileSystem):
    """RealFileSystem that fails chosen operations a fixed number of times.

    ``failures`` maps an operation name to how many calls should raise
    ``error`` before the real call goes through. ``broken`` names paths
    whose open_read always fails.
    """

    def __init__(
        self,
        failures: dict[str, int] | None = None,
        error: OSError | None = None,
        broken: set[str] | None = None,
    ) -> None:
        self.failures = dict(failures or {})
        self.error = error or BlockingIOError(11, "Resource temporarily unavailable")
        self.broken = broken or set()
        self.calls: dict[str, int] = {}

    def _maybe_fail(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1
        remaining = self.failures.get(name, 0)
        if remaining:
            self.failures[name] = remaining - 1
            raise self.error

    def rmtree(self, path: str) -> None:
        self._maybe_fail("rmtree")
        super().rmtree(path)

    def remove(self, path: str) -> None:
        self._maybe_fail("remove")
        super().remove(path)

    def rename(self, old: str, new: str) -> None:
        self._maybe_fail("rename")
        super().rename(old, new)

    def open_read(self, path: str):
        if os.path.basename(path) in self.broken:
            raise PermissionError(13, "Permission denied", path)
        return super().open_read(path)


@pytest.fixture
def flaky_fs() -> type[FlakyFileSystem]:
    """Factory for filesystems with injected transient failures."""
    return FlakyFileSystem


@pytest.fixture
def mock_filesystem() -> MagicMock:
    """Create a mock FileSystem for testing.

    The mock tracks all filesystem operations without touching real files.
    """
    fs = MagicMock()
    fs.exists.return_value = False
    return fs


# ============================================================================
# Content Fixtures
# ============================================================================


@pytest.fixture
def pool() -> BufferPool:
    """A private buffer pool so tests do not share state."""
    return BufferPool(max_size=4)


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Create a source tree with files A, B and C/D.txt."""
    src = tmp_path / "src"
    (src / "C").mkdir(parents=True)
    (src / "A").write_bytes(b"alpha")
    (src / "B").write_bytes(b"bravo\n" * 100)
    (src / "C" / "D.txt").write_text("delta")
    os.chmod(src / "A", 0o640)
    os.chmod(src / "B", 0o755)
    os.chmod(src / "C" / "D.txt", 0o600)
    return src
