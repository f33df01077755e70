"""Capability surface the converter expects from a game engine.

The engine owns parsing of its native scene files. The converter only needs
a handle that can report a node count and resolve an index to a node. Any
object with this shape works, which lets tests simulate arbitrary (including
broken) hierarchies.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Protocol, Sequence


class LocalTransform(Protocol):
    """Position, rotation (x, y, z, w quaternion) and scale of a node."""

    @property
    def position(self) -> Sequence[float]: ...

    @property
    def rotation(self) -> Sequence[float]: ...

    @property
    def scale(self) -> Sequence[float]: ...


class EngineNode(Protocol):
    """One node of the engine scene graph."""

    @property
    def name(self) -> str: ...

    @property
    def local_transform(self) -> LocalTransform: ...

    @property
    def parent_index(self) -> Optional[int]: ...

    @property
    def resources(self) -> Sequence[str]: ...


class SceneGraph(Protocol):
    """Read-only handle to a loaded scene graph.

    Indices are stable for the lifetime of the handle.
    """

    def node_count(self) -> int:
        """Return the number of nodes in the graph."""

    def node(self, index: int) -> EngineNode:
        """Resolve an index in ``range(node_count())`` to its node."""

    def resource_references(self) -> Iterable[str]:
        """Return identifiers of materials, textures and animation sources used by the model."""


class ResourceManager(Protocol):
    """Engine resource-loading service.

    ``request`` blocks until the scene and any sub-resources it depends on
    are loaded, however the engine schedules that work internally.
    """

    def request(self, path: Path) -> SceneGraph:
        """Load the scene at ``path``.

        Raises:
            LoadError: If the file is missing, unreadable, or invalid
        """
