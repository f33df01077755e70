"""i3mscene - Engine scene to portable .i3m document converter.

Converts a game engine's scene files into a hierarchical, human-readable
interchange format: node tree with local transforms plus the identifiers of
every referenced asset.
"""

__version__ = "0.1.0"

from .core.config import ConverterConfig
from .core.errors import (
    FileConversionError,
    LoadError,
    RunError,
    SceneConversionError,
    SerializationError,
    StructureError,
    WriteError,
)
from .engine.trimesh_backend import TrimeshResourceManager
from .pipeline import ConversionReport, ConversionResult, build_document, convert_file, convert_tree
from .scene import NodeRecord, SceneDocument, Transform, deserialize, serialize

__all__ = [
    "ConverterConfig",
    "FileConversionError",
    "LoadError",
    "RunError",
    "SceneConversionError",
    "SerializationError",
    "StructureError",
    "WriteError",
    "TrimeshResourceManager",
    "ConversionReport",
    "ConversionResult",
    "build_document",
    "convert_file",
    "convert_tree",
    "NodeRecord",
    "SceneDocument",
    "Transform",
    "deserialize",
    "serialize",
]
