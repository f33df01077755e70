"""Project-specific exception types.

Per-file errors derive from ``FileConversionError`` and are reported without
stopping a run. ``RunError`` and ``ConfigError`` abort the whole run.
"""


class SceneConversionError(Exception):
    """Base class for all i3mscene errors."""


class FileConversionError(SceneConversionError):
    """Raised when a single source file cannot be converted."""


class LoadError(FileConversionError):
    """Raised when a source file is missing, unreadable, or rejected by the engine."""


class StructureError(FileConversionError):
    """Raised when the scene graph hierarchy is inconsistent."""


class SerializationError(FileConversionError):
    """Raised when a document cannot be encoded or decoded."""


class WriteError(FileConversionError):
    """Raised when an output directory or file cannot be created or written."""


class RunError(SceneConversionError):
    """Raised when a conversion run cannot start."""


class ConfigError(SceneConversionError):
    """Raised when a configuration file is invalid."""
