"""Directory conversion driver.

For every discovered source file this runs loader -> traversal -> hierarchy
builder -> asset collector -> serializer and writes the result to the
mirrored output path. Failures are contained per file; only invalid roots
abort a run.
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Literal

from .core.config import ConverterConfig
from .core.errors import FileConversionError, RunError, StructureError, WriteError
from .scene.assets import collect_assets
from .scene.document import SceneDocument
from .scene.hierarchy import build_hierarchy
from .scene.loader import SceneLoader
from .scene.serializer import write_document
from .scene.traversal import iter_node_views

if TYPE_CHECKING:
    from .engine.protocol import ResourceManager, SceneGraph

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_FATAL = 2

Status = Literal["converted", "failed", "skipped"]


@dataclass
class ConversionResult:
    """Outcome of converting one source file."""

    source: Path
    destination: Path
    status: Status
    error: str | None = None
    node_count: int = 0
    asset_count: int = 0
    degenerate_nodes: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "converted"


@dataclass
class ConversionReport:
    """Results of a directory conversion, in discovery order."""

    source_root: Path
    dest_root: Path
    results: list[ConversionResult] = field(default_factory=list)

    @property
    def converted(self) -> list[ConversionResult]:
        return [r for r in self.results if r.status == "converted"]

    @property
    def failed(self) -> list[ConversionResult]:
        return [r for r in self.results if r.status == "failed"]

    @property
    def skipped(self) -> list[ConversionResult]:
        return [r for r in self.results if r.status == "skipped"]

    @property
    def exit_code(self) -> int:
        """0 if every file converted, 1 if any failed or was skipped."""
        if self.failed or self.skipped:
            return EXIT_FAILURES
        return EXIT_OK


def discover_sources(
    root: Path | str,
    extension: str,
    follow_symlinks: bool = False,
) -> list[Path]:
    """Find all files under ``root`` with the given extension.

    Matching is case-insensitive. The result is sorted so runs are
    reproducible.
    """
    root = Path(root)
    extension = extension.lower()
    found = []
    for dirpath, _dirnames, filenames in os.walk(root, followlinks=follow_symlinks):
        for filename in filenames:
            path = Path(dirpath) / filename
            if path.suffix.lower() == extension and path.is_file():
                found.append(path)
    return sorted(found)


def mirror_path(
    source: Path,
    source_root: Path,
    dest_root: Path,
    target_extension: str,
) -> Path:
    """Map a source file to its output path under ``dest_root``.

    The relative directory structure is kept and the extension swapped.
    """
    relative = Path(source).relative_to(source_root)
    return Path(dest_root) / relative.with_suffix(target_extension)


def build_document(graph: SceneGraph) -> SceneDocument:
    """Convert a loaded scene graph into a SceneDocument.

    Raises:
        StructureError: If the hierarchy is inconsistent or nodes were lost
    """
    views = list(iter_node_views(graph))
    roots = build_hierarchy(views)
    document = SceneDocument(nodes=roots, assets=collect_assets(views, graph))

    expected = graph.node_count()
    if document.node_count != expected:
        raise StructureError(
            f"Reconstructed tree has {document.node_count} nodes, scene graph reports {expected}"
        )
    return document


def convert_file(
    source: Path | str,
    destination: Path | str,
    resource_manager: ResourceManager,
    config: ConverterConfig | None = None,
) -> ConversionResult:
    """Convert one source file and write the output document.

    Per-file errors are logged and returned as a failed result rather
    than raised.
    """
    source = Path(source)
    destination = Path(destination)
    cfg = config or ConverterConfig.default()

    logger.info(f"Processing file: {source}")
    try:
        with SceneLoader(source, resource_manager) as graph:
            document = build_document(graph)

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteError(f"Cannot create output directory {destination.parent}: {e}") from e

        write_document(document, destination, indent=cfg.indent)

    except FileConversionError as e:
        logger.error(f"Failed to convert {source}: {e}")
        return ConversionResult(
            source=source,
            destination=destination,
            status="failed",
            error=f"{type(e).__name__}: {e}",
        )

    degenerate = [record.name for record in document.walk() if record.transform.is_degenerate]
    logger.info(f"Saved converted scene to: {destination}")
    return ConversionResult(
        source=source,
        destination=destination,
        status="converted",
        node_count=document.node_count,
        asset_count=len(document.assets),
        degenerate_nodes=degenerate,
    )


def _check_roots(source_root: Path, dest_root: Path) -> None:
    if not source_root.exists():
        raise RunError(f"Source directory does not exist: {source_root}")
    if not source_root.is_dir():
        raise RunError(f"Source path is not a directory: {source_root}")
    if dest_root.exists() and not dest_root.is_dir():
        raise RunError(f"Destination path is not a directory: {dest_root}")
    try:
        dest_root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RunError(f"Cannot create destination directory {dest_root}: {e}") from e


def convert_tree(
    source_root: Path | str,
    dest_root: Path | str,
    resource_manager: ResourceManager,
    config: ConverterConfig | None = None,
    progress_callback: Callable[[ConversionResult], None] | None = None,
    cancel_event: threading.Event | None = None,
) -> ConversionReport:
    """Convert every source file under ``source_root`` into ``dest_root``.

    Args:
        source_root: Directory searched recursively for source files
        dest_root: Directory receiving the mirrored output tree
        resource_manager: Engine service used to load each scene
        config: Converter settings (extensions, workers, indent)
        progress_callback: Called with each result as files finish
        cancel_event: When set, files not yet started are skipped

    Returns:
        ConversionReport with one result per discovered file

    Raises:
        RunError: If the source or destination root is unusable
    """
    source_root = Path(source_root)
    dest_root = Path(dest_root)
    cfg = config or ConverterConfig.default()

    _check_roots(source_root, dest_root)

    sources = discover_sources(source_root, cfg.source_extension, cfg.follow_symlinks)
    logger.info(f"Found {len(sources)} {cfg.source_extension} file(s) in {source_root}")

    def run_one(source: Path) -> ConversionResult:
        destination = mirror_path(source, source_root, dest_root, cfg.target_extension)
        if cancel_event is not None and cancel_event.is_set():
            result = ConversionResult(
                source=source,
                destination=destination,
                status="skipped",
                error="cancelled",
            )
        else:
            result = convert_file(source, destination, resource_manager, cfg)
        if progress_callback is not None:
            progress_callback(result)
        return result

    report = ConversionReport(source_root=source_root, dest_root=dest_root)
    if cfg.workers > 1 and len(sources) > 1:
        with ThreadPoolExecutor(max_workers=cfg.workers) as pool:
            report.results = list(pool.map(run_one, sources))
    else:
        report.results = [run_one(source) for source in sources]

    logger.info(
        f"Conversion complete: {len(report.converted)} converted, "
        f"{len(report.failed)} failed, {len(report.skipped)} skipped"
    )
    return report
