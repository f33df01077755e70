"""Reconstruction of the parent/child tree from flat node views."""

from __future__ import annotations

from typing import Sequence

from ..core.errors import StructureError
from .document import NodeRecord
from .traversal import NodeView


def _check_parent_links(views: Sequence[NodeView]) -> None:
    """Verify that every parent chain ends at a root.

    Each node is visited a bounded number of times: chains already known to
    reach a root are not followed again.

    Raises:
        StructureError: On a dangling parent reference or a cycle
    """
    parents = {view.index: view.parent for view in views}
    names = {view.index: view.name for view in views}
    resolved: set[int] = set()

    for view in views:
        chain: list[int] = []
        seen: set[int] = set()
        current: int | None = view.index

        while current is not None and current not in resolved:
            if current in seen:
                cycle = " -> ".join(repr(names[i]) for i in chain[chain.index(current):])
                raise StructureError(f"Cyclic parent chain: {cycle} -> {names[current]!r}")
            seen.add(current)
            chain.append(current)

            parent = parents[current]
            if parent is not None and parent not in parents:
                raise StructureError(
                    f"Dangling parent reference: node {current} ({names[current]!r}) "
                    f"names missing parent {parent}"
                )
            current = parent

        resolved.update(chain)


def build_hierarchy(views: Sequence[NodeView]) -> list[NodeRecord]:
    """Rebuild the node tree from a flat sequence of views.

    Children keep their source order under each parent, and parentless
    nodes become roots in their source order.

    Args:
        views: Node views in engine index order

    Returns:
        Root records of the reconstructed tree

    Raises:
        StructureError: On duplicate identifiers, dangling parents or cycles
    """
    records: dict[int, NodeRecord] = {}
    for view in views:
        if view.index in records:
            raise StructureError(f"Duplicate node identifier: {view.index}")
        records[view.index] = NodeRecord.from_view(view)

    _check_parent_links(views)

    roots: list[NodeRecord] = []
    for view in views:
        record = records[view.index]
        if view.parent is None:
            roots.append(record)
        else:
            records[view.parent].children.append(record)

    return roots
