"""Core modules for i3mscene."""

from .config import ConverterConfig
from .errors import (
    ConfigError,
    FileConversionError,
    LoadError,
    RunError,
    SceneConversionError,
    SerializationError,
    StructureError,
    WriteError,
)

__all__ = [
    "ConverterConfig",
    "ConfigError",
    "FileConversionError",
    "LoadError",
    "RunError",
    "SceneConversionError",
    "SerializationError",
    "StructureError",
    "WriteError",
]
