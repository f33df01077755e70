"""Shared fixtures and engine test doubles."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from i3mscene.core.errors import LoadError

IDENTITY = {
    "position": (0.0, 0.0, 0.0),
    "rotation": (0.0, 0.0, 0.0, 1.0),
    "scale": (1.0, 1.0, 1.0),
}


@dataclass(frozen=True)
class FakeTransform:
    position: tuple = IDENTITY["position"]
    rotation: tuple = IDENTITY["rotation"]
    scale: tuple = IDENTITY["scale"]


@dataclass(frozen=True)
class FakeNode:
    name: str
    parent_index: int | None = None
    local_transform: FakeTransform = field(default_factory=FakeTransform)
    resources: tuple = ()


class FakeSceneGraph:
    """In-memory scene graph; may hold any hierarchy, including broken ones."""

    def __init__(self, nodes: list[FakeNode], references: list[str] | None = None):
        self.nodes = list(nodes)
        self.references = list(references or [])
        self.node_reads = 0
        self.closed = False

    def node_count(self) -> int:
        return len(self.nodes)

    def node(self, index: int) -> FakeNode:
        self.node_reads += 1
        return self.nodes[index]

    def resource_references(self) -> list[str]:
        return list(self.references)

    def close(self) -> None:
        self.closed = True


def graph_from_payload(payload: dict) -> FakeSceneGraph:
    nodes = [
        FakeNode(
            name=entry["name"],
            parent_index=entry.get("parent"),
            local_transform=FakeTransform(
                position=tuple(entry.get("position", IDENTITY["position"])),
                rotation=tuple(entry.get("rotation", IDENTITY["rotation"])),
                scale=tuple(entry.get("scale", IDENTITY["scale"])),
            ),
            resources=tuple(entry.get("resources", ())),
        )
        for entry in payload.get("nodes", [])
    ]
    return FakeSceneGraph(nodes, payload.get("references", []))


class FixtureResourceManager:
    """Loads scene graphs from small JSON fixture files.

    Stands in for the engine: anything that is not a JSON object with a
    ``nodes`` list is rejected with LoadError, like a corrupt engine file.
    """

    def __init__(self):
        self.requested: list[Path] = []

    def request(self, path: Path) -> FakeSceneGraph:
        self.requested.append(Path(path))
        try:
            payload = json.loads(Path(path).read_text())
        except (OSError, ValueError) as e:
            raise LoadError(f"Corrupt scene file {path}: {e}") from e
        if not isinstance(payload, dict) or not isinstance(payload.get("nodes"), list):
            raise LoadError(f"Corrupt scene file {path}: missing node table")
        return graph_from_payload(payload)


def write_scene(path: Path, nodes: list[dict], references: list[str] | None = None) -> Path:
    """Write a fixture scene file readable by FixtureResourceManager."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"nodes": nodes, "references": references or []}))
    return path


ROOT_CHILD_NODES = [
    {"name": "Root"},
    {"name": "Child", "parent": 0},
]


@pytest.fixture
def resource_manager() -> FixtureResourceManager:
    return FixtureResourceManager()


@pytest.fixture
def root_child_graph() -> FakeSceneGraph:
    return FakeSceneGraph([FakeNode("Root"), FakeNode("Child", parent_index=0)])
