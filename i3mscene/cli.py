"""Command-line interface for i3mscene.

Usage:
    i3mscene convert -i scenes/ -o converted/ [options]
    i3mscene info scenes/level.rgs
    i3mscene init-config
"""

from __future__ import annotations

import logging
import signal
import threading
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table
from rich.tree import Tree

from .core.config import ConverterConfig
from .core.errors import ConfigError, FileConversionError, RunError
from .engine.protocol import ResourceManager
from .engine.trimesh_backend import TrimeshResourceManager
from .pipeline import EXIT_FAILURES, EXIT_FATAL, ConversionReport, ConversionResult, build_document, convert_tree
from .scene.document import NodeRecord, SceneDocument
from .scene.loader import SceneLoader
from .scene.serializer import read_document

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich output."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False)],
    )


def create_resource_manager(cfg: ConverterConfig) -> ResourceManager:
    """Create the engine service used to load source scenes."""
    return TrimeshResourceManager(file_type=cfg.file_type)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """i3mscene - Convert engine scene files to portable .i3m documents."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)


def _load_config(config: str | None) -> ConverterConfig:
    if config:
        return ConverterConfig.from_file(config)
    return ConverterConfig.default()


def _print_failures(report: ConversionReport) -> None:
    table = Table(title="Failed Conversions")
    table.add_column("Source", style="cyan")
    table.add_column("Error", style="red")

    for result in report.failed + report.skipped:
        table.add_row(
            escape(str(result.source.relative_to(report.source_root))),
            escape(result.error or "-"),
        )

    console.print(table)


@main.command()
@click.option(
    "--input-dir", "-i",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory containing source scene files",
)
@click.option(
    "--output-dir", "-o",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory where converted documents are written",
)
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to configuration file",
)
@click.option("--source-ext", type=str, default=None, help="Source file extension (default: .rgs)")
@click.option("--target-ext", type=str, default=None, help="Output file extension (default: .i3m)")
@click.option(
    "--file-type",
    type=str,
    default=None,
    help="Format hint for the scene loader (e.g. glb) when the extension is not recognized",
)
@click.option("--workers", "-j", type=click.IntRange(1, 64), default=None, help="Files to convert in parallel")
@click.pass_context
def convert(
    ctx: click.Context,
    input_dir: Path,
    output_dir: Path,
    config: str | None,
    source_ext: str | None,
    target_ext: str | None,
    file_type: str | None,
    workers: int | None,
) -> None:
    """Recursively convert source scene files to .i3m documents.

    The directory structure under INPUT_DIR is mirrored into OUTPUT_DIR.
    Exits 0 when every file converted, 1 when any file failed, and 2 when
    the run could not start.
    """
    try:
        cfg = _load_config(config)
        overrides = {
            "source_extension": source_ext,
            "target_extension": target_ext,
            "file_type": file_type,
            "workers": workers,
        }
        cfg = ConverterConfig.model_validate(
            {**cfg.model_dump(), **{k: v for k, v in overrides.items() if v is not None}}
        )
    except (ConfigError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        ctx.exit(EXIT_FATAL)

    resource_manager = create_resource_manager(cfg)
    cancel_event = threading.Event()

    def request_cancel(signum, frame) -> None:
        console.print("[yellow]Cancelling remaining files...[/yellow]")
        cancel_event.set()

    in_main_thread = threading.current_thread() is threading.main_thread()
    previous_handler = signal.signal(signal.SIGINT, request_cancel) if in_main_thread else None
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Converting scenes...", total=None)

            def on_result(result: ConversionResult) -> None:
                progress.advance(task)

            report = convert_tree(
                input_dir,
                output_dir,
                resource_manager,
                cfg,
                progress_callback=on_result,
                cancel_event=cancel_event,
            )
    except RunError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        ctx.exit(EXIT_FATAL)
    finally:
        if in_main_thread:
            signal.signal(signal.SIGINT, previous_handler)

    for result in report.converted:
        if result.degenerate_nodes:
            console.print(
                f"[yellow]{escape(result.source.name)}: zero scale on "
                f"{escape(', '.join(result.degenerate_nodes))}[/yellow]"
            )

    console.print(
        f"\n[bold]Conversion complete:[/bold] "
        f"[green]{len(report.converted)} converted[/green], "
        f"[red]{len(report.failed)} failed[/red], "
        f"[dim]{len(report.skipped)} skipped[/dim]"
    )

    if report.failed or report.skipped:
        _print_failures(report)

    ctx.exit(report.exit_code)


def _add_tree_nodes(tree: Tree, record: NodeRecord) -> None:
    stack = [(tree, record)]
    while stack:
        parent, current = stack.pop()
        position = ", ".join(f"{v:g}" for v in current.position)
        branch = parent.add(f"[cyan]{escape(current.name)}[/cyan] [dim](T: {position})[/dim]")
        stack.extend((branch, child) for child in reversed(current.children))


@main.command()
@click.argument("scene_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--file-type", type=str, default=None, help="Format hint for the scene loader")
@click.pass_context
def info(ctx: click.Context, scene_path: Path, file_type: str | None) -> None:
    """Show the node tree and assets of a scene file.

    SCENE_PATH: Source scene file, or an already converted .i3m document
    """
    cfg = ConverterConfig(file_type=file_type)

    try:
        if scene_path.suffix.lower() == cfg.target_extension:
            document: SceneDocument = read_document(scene_path)
        else:
            with SceneLoader(scene_path, create_resource_manager(cfg)) as graph:
                document = build_document(graph)
    except FileConversionError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        ctx.exit(EXIT_FAILURES)

    console.print(f"\n[bold]Scene Info: {scene_path.name}[/bold]\n")

    tree = Tree(f"[bold]{document.node_count} node(s)[/bold]")
    for root in document.nodes:
        _add_tree_nodes(tree, root)
    console.print(tree)

    table = Table(title="Assets")
    table.add_column("Identifier", style="cyan")
    for asset in document.assets:
        table.add_row(escape(asset))
    if document.assets:
        console.print(table)
    else:
        console.print("[dim]No assets referenced[/dim]")


@main.command("init-config")
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    default="i3mscene.json",
    help="Output configuration file path",
)
def init_config(output: str) -> None:
    """Create a default configuration file."""
    ConverterConfig.default().to_file(output)
    console.print(f"[green]Created config file: {output}[/green]")


if __name__ == "__main__":  # pragma: no cover
    main()
