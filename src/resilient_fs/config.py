"""Settings for the command-line front end and library defaults."""

from __future__ import annotations

import hashlib
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from resilient_fs.copying import DEFAULT_FILE_MODE
from resilient_fs.directories import DEFAULT_DIR_MODE
from resilient_fs.identity import DEFAULT_ALGORITHM, DEFAULT_POOL_SIZE
from resilient_fs.retry import MOVE_ATTEMPTS, REMOVE_ATTEMPTS, RetryPolicy


class Settings(BaseModel):
    """Tunable parameters, loadable from a YAML file."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    remove_attempts: int = Field(default=REMOVE_ATTEMPTS, ge=1, alias="removeAttempts")
    move_attempts: int = Field(default=MOVE_ATTEMPTS, ge=1, alias="moveAttempts")
    retry_delay: float = Field(default=0.0, ge=0.0, alias="retryDelay")
    digest_algorithm: str = Field(default=DEFAULT_ALGORITHM, alias="digestAlgorithm")
    dir_mode: int = Field(default=DEFAULT_DIR_MODE, ge=0, le=0o7777, alias="dirMode")
    file_mode: int = Field(default=DEFAULT_FILE_MODE, ge=0, le=0o7777, alias="fileMode")
    buffer_pool_size: int = Field(default=DEFAULT_POOL_SIZE, ge=0, alias="bufferPoolSize")

    @field_validator("digest_algorithm")
    @classmethod
    def _known_algorithm(cls, value: str) -> str:
        if value.lower() not in hashlib.algorithms_available:
            raise ValueError(f"unknown digest algorithm: {value}")
        return value.lower()

    @field_validator("dir_mode", "file_mode", mode="before")
    @classmethod
    def _parse_octal(cls, value: object) -> object:
        # "0755" / "0o755" in YAML arrive as strings
        if isinstance(value, str):
            return int(value, 8)
        return value

    def remove_policy(self) -> RetryPolicy:
        """Retry policy for removals."""
        return RetryPolicy(attempts=self.remove_attempts, delay=self.retry_delay)

    def move_policy(self) -> RetryPolicy:
        """Retry policy for renames."""
        return RetryPolicy(attempts=self.move_attempts, delay=self.retry_delay)


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a YAML file.

    Args:
        path: YAML file to read. None or a missing file yields defaults.

    Returns:
        Validated Settings.

    Raises:
        ValueError: If the file is not valid YAML, is not a mapping, or
            contains invalid values.
    """
    if path is None or not path.exists():
        return Settings()

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")
    return Settings.model_validate(data)
