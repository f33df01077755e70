"""Scene loading boundary between the converter and the engine."""

from __future__ import annotations

import contextlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from ..core.errors import LoadError, SceneConversionError

if TYPE_CHECKING:
    from ..engine.protocol import ResourceManager, SceneGraph

logger = logging.getLogger(__name__)


class SceneLoader(contextlib.AbstractContextManager["SceneLoader"]):
    """Requests a scene graph from the engine and releases it afterwards.

    Usage:
        with SceneLoader(path, manager) as graph:
            ...
    """

    def __init__(self, path: Path | str, resource_manager: ResourceManager) -> None:
        self._path = Path(path)
        self._resource_manager = resource_manager
        self._graph: Optional[SceneGraph] = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def graph(self) -> SceneGraph:
        if self._graph is None:
            raise RuntimeError("Scene not loaded. Call load() before accessing graph.")
        return self._graph

    def load(self) -> SceneGraph:
        """Load the scene graph, blocking until the engine has finished.

        Raises:
            LoadError: If the file is missing or the engine rejects it
        """
        if self._graph is not None:
            return self._graph

        if not self._path.is_file():
            raise LoadError(f"Scene file not found: {self._path}")

        logger.debug(f"Requesting scene {self._path}")
        try:
            self._graph = self._resource_manager.request(self._path)
        except SceneConversionError:
            raise
        except Exception as e:
            raise LoadError(f"Engine failed to load {self._path}: {type(e).__name__}: {e}") from e
        return self._graph

    def close(self) -> None:
        if self._graph is not None:
            close = getattr(self._graph, "close", None)
            if callable(close):
                close()
            self._graph = None

    def __enter__(self) -> SceneGraph:  # type: ignore[override]
        return self.load()

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return None
