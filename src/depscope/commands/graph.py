"""depscope graph commands - build, deps and viz.

Every command rebuilds the graph from the files under ``--path``; nothing is
persisted between invocations.
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from depscope.cli import DepscopeContext
    from depscope.errors import BuildReport
    from depscope.graph.builder import GraphBuilder, ProgressCallback
    from depscope.models import DependencyGraph


def build_project_graph(
    obj: DepscopeContext, path: Path
) -> tuple[DependencyGraph, BuildReport, GraphBuilder]:
    """Scan ``path`` and build its dependency graph.

    Uses the external indexer when it is enabled in configuration and shows
    a progress bar unless output is quiet.
    """
    from depscope.extractor.indexer import create_indexer_client
    from depscope.graph.builder import GraphBuilder
    from depscope.logging import progress_reporter
    from depscope.scanner import scan_files

    config = obj.get_config()
    files = scan_files(path, config)
    indexer = create_indexer_client(config.indexer) if config.indexer.enabled else None
    builder = GraphBuilder(path, config, indexer)

    async def run(callback: ProgressCallback | None = None) -> DependencyGraph:
        try:
            return await builder.build(files, callback)
        finally:
            if indexer is not None:
                await indexer.aclose()

    if obj.verbosity == "quiet" or not files:
        graph = asyncio.run(run())
    else:
        with progress_reporter(len(files)) as report:
            graph = asyncio.run(run(report))

    return graph, builder.result, builder


def _relative(graph: DependencyGraph, file_id: str) -> str:
    from depscope.paths import relative_to_root

    return relative_to_root(graph.root, file_id)


def _resolve_file(file: str) -> str:
    """Canonicalize a FILE argument given relative to the working directory."""
    from depscope.paths import canonicalize

    return canonicalize(Path.cwd(), file)


path_option = click.option(
    "--path",
    "-p",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    help="Project root",
)
format_option = click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)


@click.command("build")
@path_option
@format_option
@click.pass_obj
def build(ctx: DepscopeContext, path: Path, output_format: str) -> None:
    """Build the dependency graph and summarize it.

    \b
    Examples:
        depscope build                 # Summary table for the current directory
        depscope build -p src -f json  # Full graph as JSON
    """
    from rich.table import Table

    from depscope.errors import ExitCode
    from depscope.logging import console, print_warning

    graph, result, builder = build_project_graph(ctx, path)

    if output_format == "json":
        payload = graph.to_dict()
        payload["result"] = result.to_dict()
        click.echo(json.dumps(payload, indent=2))
    else:
        table = Table(title="Dependency Graph", show_header=True)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        table.add_row("Files", str(graph.file_count))
        table.add_row("Dependencies", str(graph.dependency_count))
        for reason, count in result.skip_counts().items():
            table.add_row(f"Skipped ({reason})", str(count))
        table.add_row("Errors", str(len(result.errors)))
        fallbacks = sum(1 for outcome in builder.outcomes if outcome.fell_back)
        if fallbacks:
            table.add_row("Indexer fallbacks", str(fallbacks))
        console.print(table)

        for error in result.errors:
            print_warning(f"{error.context.get('file_path', '')}: {error.message}")

    if result.exit_code != ExitCode.SUCCESS:
        sys.exit(result.exit_code)


@click.command("deps")
@click.argument("file", type=str)
@path_option
@format_option
@click.pass_obj
def deps(ctx: DepscopeContext, file: str, path: Path, output_format: str) -> None:
    """Show what FILE depends on and what depends on it.

    \b
    Examples:
        depscope deps src/app.ts
        depscope deps src/app.ts -f json
    """
    from rich.table import Table

    from depscope.errors import ExitCode
    from depscope.logging import console, print_error

    graph, _result, _builder = build_project_graph(ctx, path)
    file_id = _resolve_file(file)
    node = graph.get_dependencies(file_id)
    dependents = graph.get_dependents(file_id)

    if node is None and not dependents:
        print_error(f"File not found in graph: {file}")
        sys.exit(ExitCode.CONFIG_ERROR)

    if output_format == "json":
        click.echo(
            json.dumps(
                {
                    "file": file_id,
                    "node": node.to_dict() if node else None,
                    "dependents": dependents,
                },
                indent=2,
            )
        )
        return

    table = Table(title=f"Dependencies of {_relative(graph, file_id)}", show_header=True)
    table.add_column("Direction", style="yellow")
    table.add_column("File", style="cyan")
    table.add_column("Analyzed", justify="center")
    for dep in node.file_deps if node else []:
        table.add_row("depends on", _relative(graph, dep), "yes" if graph.has_node(dep) else "no")
    for dependent in dependents:
        table.add_row("used by", _relative(graph, dependent), "yes")
    console.print(table)

    if node and node.exports:
        console.print(f"[bold]Exports:[/bold] {', '.join(node.exports)}")


@click.command("viz")
@click.argument("files", nargs=-1, type=str)
@path_option
@click.option(
    "--direction",
    "-d",
    type=click.Choice(["TD", "TB", "BT", "LR", "RL"]),
    default=None,
    help="Layout direction (default from config)",
)
@click.option("--max-nodes", "-n", type=int, default=None, help="Nodes shown without FILES")
@click.option("--no-fence", is_flag=True, help="Omit the markdown code fence")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the diagram to a file",
)
@click.pass_obj
def viz(
    ctx: DepscopeContext,
    files: tuple[str, ...],
    path: Path,
    direction: str | None,
    max_nodes: int | None,
    no_fence: bool,
    output: Path | None,
) -> None:
    """Render the dependency graph as a Mermaid diagram.

    With FILES, only those files and the edges between them are drawn.

    \b
    Examples:
        depscope viz                         # First files of the project
        depscope viz src/a.ts src/b.ts       # Just these two
        depscope viz -d LR -o deps.md        # Left-to-right, into a file
    """
    from depscope.graph.visualize import MermaidVisualizer
    from depscope.logging import print_success

    config = ctx.get_config().visualizer
    graph, _result, _builder = build_project_graph(ctx, path)

    visualizer = MermaidVisualizer(
        max_nodes=config.max_nodes if max_nodes is None else max_nodes,
        direction=direction or config.direction,
        fenced=not no_fence,
    )
    subset = [_resolve_file(f) for f in files] if files else None
    diagram = visualizer.render(graph, subset)

    if output:
        output.write_text(diagram + "\n")
        print_success(f"Wrote {output}")
    else:
        click.echo(diagram)


__all__ = ["build", "build_project_graph", "deps", "viz"]
