"""Shared data types for resilient-fs."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Union

__all__ = [
    "CopyFailure",
    "CopyTreeResult",
    "PathLike",
    "PathModePair",
    "PathModePairs",
]

PathLike = Union[str, "os.PathLike[str]"]


@dataclass(frozen=True)
class PathModePair:
    """A path paired with the permission bits to create it with.

    Attributes:
        path: Filesystem path.
        mode: Permission bits (e.g. ``0o755``).
    """

    path: str
    mode: int

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not self.path:
            raise ValueError("path cannot be empty")
        if self.mode < 0:
            raise ValueError(f"mode must be non-negative, got {self.mode:o}")


class PathModePairs(list[PathModePair]):
    """Ordered batch of PathModePair entries."""

    def append_pair(self, path: PathLike, mode: int) -> None:
        """Append a new pair built from a path and mode.

        Args:
            path: Filesystem path.
            mode: Permission bits.
        """
        self.append(PathModePair(os.fspath(path), mode))


@dataclass(frozen=True)
class CopyFailure:
    """A single entry that could not be copied during a tree walk.

    Attributes:
        source: Source path of the failed entry.
        destination: Destination path of the failed entry.
        error: The exception raised while copying it.
    """

    source: str
    destination: str
    error: OSError

    def __str__(self) -> str:
        return f"{self.source} -> {self.destination}: {self.error}"


@dataclass
class CopyTreeResult:
    """Outcome of a best-effort tree copy.

    Attributes:
        copied: Destination paths of files copied successfully.
        failures: One entry per file or directory that failed.
    """

    copied: list[str] = field(default_factory=list)
    failures: list[CopyFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if every entry was copied."""
        return not self.failures
