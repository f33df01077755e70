"""Configuration management for i3mscene.

This module defines the converter configuration using Pydantic for validation.
Configuration can be loaded from JSON files or constructed programmatically,
and CLI options override whatever was loaded.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError


class ConverterConfig(BaseModel):
    """Settings for a directory conversion run."""

    source_extension: str = Field(
        default=".rgs",
        description="Extension of source scene files to convert"
    )
    target_extension: str = Field(
        default=".i3m",
        description="Extension given to converted documents"
    )
    file_type: str | None = Field(
        default=None,
        description="Format hint passed to the engine loader (None = infer from extension)"
    )
    workers: int = Field(default=1, ge=1, le=64, description="Files converted in parallel")
    indent: int = Field(default=2, ge=0, le=8, description="JSON indentation of output documents")
    follow_symlinks: bool = Field(default=False, description="Follow symlinked directories while walking")

    @field_validator("source_extension", "target_extension")
    @classmethod
    def _normalize_extension(cls, value: str) -> str:
        value = value.strip().lower()
        if not value or value == ".":
            raise ValueError("extension must not be empty")
        if not value.startswith("."):
            value = "." + value
        if "/" in value or "\\" in value:
            raise ValueError(f"extension must not contain path separators: {value!r}")
        return value

    @classmethod
    def from_file(cls, path: Path | str) -> ConverterConfig:
        """Load configuration from a JSON file.

        Raises:
            ConfigError: If the file cannot be read or fails validation
        """
        path = Path(path)
        try:
            with open(path) as f:
                data = json.load(f)
            return cls.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid configuration file {path}: {e}") from e

    def to_file(self, path: Path | str) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)

    @classmethod
    def default(cls) -> ConverterConfig:
        """Create a default configuration."""
        return cls()
