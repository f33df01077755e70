"""Engine backend built on trimesh.

Loads scene files with trimesh and exposes the trimesh scene graph through
the SceneGraph protocol. The graph's base frame is a synthetic container and
is not reported as a node: its direct children become roots.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import trimesh

from ..core.errors import LoadError
from ..scene.transform import Transform

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrimeshNode:
    """Snapshot of one trimesh graph node."""

    name: str
    local_transform: Transform
    parent_index: int | None
    resources: tuple[str, ...]


class TrimeshSceneGraph:
    """SceneGraph adapter over a ``trimesh.Scene``.

    Node indices follow the order in which edges were added to the graph,
    which is the declaration order of the source file.
    """

    def __init__(self, scene: trimesh.Scene):
        self._scene = scene
        graph = scene.graph
        base = graph.base_frame

        self._order: list[str] = []
        self._parents: dict[str, str | None] = {}
        for parent, child, *_ in graph.to_edgelist():
            if child in self._parents:
                continue
            self._order.append(child)
            self._parents[child] = None if parent == base else parent

        self._index = {name: i for i, name in enumerate(self._order)}

    @property
    def scene(self) -> trimesh.Scene:
        return self._scene

    def node_count(self) -> int:
        return len(self._order)

    def node(self, index: int) -> TrimeshNode:
        name = self._order[index]
        parent = self._parents[name]
        frame_from = parent if parent is not None else self._scene.graph.base_frame

        try:
            matrix, geometry_name = self._scene.graph.get(frame_to=name, frame_from=frame_from)
        except Exception as e:
            raise LoadError(f"Cannot resolve transform of node {name!r}: {e}") from e
        try:
            local_transform = Transform.from_matrix(matrix)
        except ValueError as e:
            raise LoadError(f"Node {name!r} has an invalid transform matrix: {e}") from e

        return TrimeshNode(
            name=name,
            local_transform=local_transform,
            parent_index=None if parent is None else self._index.get(parent, -1),
            resources=tuple(self._node_resources(geometry_name)),
        )

    def _node_resources(self, geometry_name: str | None) -> Iterator[str]:
        if not geometry_name:
            return
        yield geometry_name

        geometry = self._scene.geometry.get(geometry_name)
        visual = getattr(geometry, "visual", None)
        material = getattr(visual, "material", None)
        material_name = getattr(material, "name", None)
        if material_name:
            yield str(material_name)

    def resource_references(self) -> list[str]:
        return [str(name) for name in self._scene.geometry.keys()]

    def __iter__(self) -> Iterator[TrimeshNode]:
        for index in range(self.node_count()):
            yield self.node(index)


class TrimeshResourceManager:
    """ResourceManager that decodes scene files with ``trimesh.load``."""

    def __init__(self, file_type: str | None = None):
        """Create the resource manager.

        Args:
            file_type: Format hint for trimesh (e.g. "glb"). None infers the
                       format from the file extension.
        """
        self.file_type = file_type

    def request(self, path: Path | str) -> TrimeshSceneGraph:
        """Load a scene file into a TrimeshSceneGraph.

        Raises:
            LoadError: If the file is missing or trimesh cannot decode it
        """
        path = Path(path)
        if not path.is_file():
            raise LoadError(f"Scene file not found: {path}")

        try:
            loaded = trimesh.load(str(path), file_type=self.file_type, force="scene")
        except Exception as e:
            raise LoadError(f"Failed to load scene from '{path}': {e}") from e

        if not isinstance(loaded, trimesh.Scene):
            raise LoadError(f"Unexpected type from trimesh.load: {type(loaded).__name__}")

        try:
            graph = TrimeshSceneGraph(loaded)
        except Exception as e:
            raise LoadError(f"Cannot read scene graph of '{path}': {e}") from e

        logger.debug(f"Loaded {path.name}: {graph.node_count()} nodes")
        return graph
