"""Engine collaborators: the scene graph contract and a trimesh backend."""

from .protocol import EngineNode, LocalTransform, ResourceManager, SceneGraph
from .trimesh_backend import TrimeshNode, TrimeshResourceManager, TrimeshSceneGraph

__all__ = [
    "EngineNode",
    "LocalTransform",
    "ResourceManager",
    "SceneGraph",
    "TrimeshNode",
    "TrimeshResourceManager",
    "TrimeshSceneGraph",
]
