"""Retrying, idempotent filesystem operations with content identity."""

__version__ = "0.1.0"

from resilient_fs.copying import (
    copy_file,
    copy_file_ensure_dir,
    copy_tree,
    rename,
    to_file,
    write_file,
)
from resilient_fs.directories import (
    clear_directory,
    ensure,
    ensure_directory,
    ensure_many,
    is_dir_empty,
)
from resilient_fs.identity import BufferPool, ContentIdentity, default_pool
from resilient_fs.protocols import BufferPoolProtocol, Clock, FileSystem
from resilient_fs.retry import (
    RetryExhaustedError,
    RetryPolicy,
    absent_many,
    remove_file_if_exists,
    retry_call,
    retry_move,
    retry_remove,
)
from resilient_fs.types import CopyFailure, CopyTreeResult, PathModePair, PathModePairs

__all__ = [
    "__version__",
    "BufferPool",
    "BufferPoolProtocol",
    "Clock",
    "ContentIdentity",
    "CopyFailure",
    "CopyTreeResult",
    "FileSystem",
    "PathModePair",
    "PathModePairs",
    "RetryExhaustedError",
    "RetryPolicy",
    "absent_many",
    "clear_directory",
    "copy_file",
    "copy_file_ensure_dir",
    "copy_tree",
    "default_pool",
    "ensure",
    "ensure_directory",
    "ensure_many",
    "is_dir_empty",
    "remove_file_if_exists",
    "rename",
    "retry_call",
    "retry_move",
    "retry_remove",
    "to_file",
    "write_file",
]
