"""Scene conversion stages.

Loader -> traversal -> hierarchy builder -> asset collector -> serializer,
operating on the Transform, NodeRecord and SceneDocument models.
"""

from .assets import collect_assets
from .document import NodeRecord, SceneDocument
from .hierarchy import build_hierarchy
from .loader import SceneLoader
from .serializer import (
    deserialize,
    read_document,
    serialize,
    write_atomic,
    write_document,
)
from .transform import ROTATION_TOLERANCE, Transform
from .traversal import NodeView, iter_node_views, read_node

__all__ = [
    "ROTATION_TOLERANCE",
    "Transform",
    "NodeView",
    "NodeRecord",
    "SceneDocument",
    "SceneLoader",
    "build_hierarchy",
    "collect_assets",
    "deserialize",
    "iter_node_views",
    "read_document",
    "read_node",
    "serialize",
    "write_atomic",
    "write_document",
]
