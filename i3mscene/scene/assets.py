"""Collection of external resource identifiers referenced by a scene."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from ..engine.protocol import SceneGraph
    from .traversal import NodeView


def collect_assets(views: Iterable[NodeView], graph: SceneGraph | None = None) -> list[str]:
    """Gather every referenced asset identifier once.

    The result is sorted ascending by code point and is independent of
    discovery order, so unchanged input always yields the same list.
    Identifiers are compared case-sensitively; empty identifiers are dropped.

    Args:
        views: Traversed nodes (every node of the graph)
        graph: Scene graph whose model-level references are included

    Returns:
        Sorted, deduplicated asset identifiers
    """
    found: set[str] = set()
    for view in views:
        found.update(view.resources)

    if graph is not None:
        references = getattr(graph, "resource_references", None)
        if callable(references):
            found.update(str(ref) for ref in references())

    found.discard("")
    return sorted(found)
