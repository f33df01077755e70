"""Portable scene document data structures.

A SceneDocument is built fresh for every source file, fully populated in
memory and handed to the serializer once. Hierarchy is expressed purely by
nesting: records carry no reference to their parent.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator

from pydantic import BaseModel, Field, field_validator

from .transform import Transform, check_unit_rotation, to_f32_tuple

if TYPE_CHECKING:
    from .traversal import NodeView


class NodeRecord(BaseModel):
    """A node of the output tree with its local transform and children."""

    name: str = Field(description="Display name (not required to be unique)")
    position: tuple[float, float, float] = Field(default=(0.0, 0.0, 0.0))
    rotation: tuple[float, float, float, float] = Field(default=(0.0, 0.0, 0.0, 1.0))
    scale: tuple[float, float, float] = Field(default=(1.0, 1.0, 1.0))
    children: list[NodeRecord] = Field(
        default_factory=list,
        description="Child records in source sibling order"
    )

    @field_validator("position", "rotation", "scale")
    @classmethod
    def _quantize(cls, value: tuple[float, ...]) -> tuple[float, ...]:
        return to_f32_tuple(value)

    @field_validator("rotation")
    @classmethod
    def _check_unit_rotation(cls, value: tuple[float, ...]) -> tuple[float, ...]:
        return check_unit_rotation(value)

    @classmethod
    def from_view(cls, view: NodeView) -> NodeRecord:
        """Allocate a childless record for a traversed node."""
        return cls(
            name=view.name,
            position=view.transform.position,
            rotation=view.transform.rotation,
            scale=view.transform.scale,
        )

    @property
    def transform(self) -> Transform:
        return Transform(position=self.position, rotation=self.rotation, scale=self.scale)

    def walk(self) -> Iterator[NodeRecord]:
        """Yield this record and all descendants depth first."""
        stack = [self]
        while stack:
            record = stack.pop()
            yield record
            stack.extend(reversed(record.children))


class SceneDocument(BaseModel):
    """Conversion output for one source file.

    Attributes:
        nodes: Root records (several roots are allowed)
        assets: Referenced resource identifiers, sorted and deduplicated
    """

    nodes: list[NodeRecord] = Field(default_factory=list)
    assets: list[str] = Field(default_factory=list)

    @field_validator("assets")
    @classmethod
    def _check_assets_sorted(cls, value: list[str]) -> list[str]:
        for previous, current in zip(value, value[1:]):
            if not previous < current:
                raise ValueError(
                    f"assets must be sorted and unique, found {previous!r} before {current!r}"
                )
        return value

    def walk(self) -> Iterator[NodeRecord]:
        """Yield every record in the document depth first."""
        for root in self.nodes:
            yield from root.walk()

    @property
    def node_count(self) -> int:
        """Total number of records across all tree levels."""
        return sum(1 for _ in self.walk())
