"""Flat traversal of an engine scene graph.

Index order is the engine's native order and carries no structural meaning;
the resulting views are input to the hierarchy builder only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator

from ..core.errors import LoadError, SceneConversionError, StructureError
from .transform import Transform

if TYPE_CHECKING:
    from ..engine.protocol import SceneGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeView:
    """Read-only projection of one source node."""

    index: int
    name: str
    transform: Transform
    parent: int | None = None
    resources: tuple[str, ...] = ()

    @property
    def is_root(self) -> bool:
        return self.parent is None


def read_node(graph: SceneGraph, index: int) -> NodeView:
    """Resolve one index of the graph to a NodeView.

    Raises:
        LoadError: If the engine fails to produce the node
        StructureError: If the node's local transform is invalid
    """
    try:
        node = graph.node(index)
        local = node.local_transform
    except SceneConversionError:
        raise
    except Exception as e:
        raise LoadError(f"Engine failed to read node {index}: {type(e).__name__}: {e}") from e

    try:
        transform = Transform.from_components(local.position, local.rotation, local.scale)
    except (ValueError, TypeError) as e:
        raise StructureError(f"Node {index} ({node.name!r}) has an invalid transform: {e}") from e

    if transform.is_degenerate:
        logger.warning(f"Node {index} ({node.name!r}) has a zero scale component: {transform.scale}")

    parent = node.parent_index
    try:
        parent = None if parent is None else int(parent)
    except (ValueError, TypeError) as e:
        raise StructureError(f"Node {index} ({node.name!r}) has an invalid parent {parent!r}") from e

    return NodeView(
        index=index,
        name=str(node.name),
        transform=transform,
        parent=parent,
        resources=tuple(getattr(node, "resources", ()) or ()),
    )


def iter_node_views(graph: SceneGraph) -> Iterator[NodeView]:
    """Yield a NodeView for every index in ``range(graph.node_count())``."""
    for index in range(graph.node_count()):
        yield read_node(graph, index)
