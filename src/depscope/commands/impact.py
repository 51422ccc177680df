"""depscope impact - review surface of a change."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from depscope.commands.graph import build_project_graph, format_option, path_option

if TYPE_CHECKING:
    from depscope.cli import DepscopeContext

_SEVERITY_STYLES = {"high": "bold red", "medium": "yellow", "low": "green"}


@click.command("impact")
@click.argument("files", nargs=-1, required=True, type=str)
@path_option
@format_option
@click.pass_obj
def impact(ctx: DepscopeContext, files: tuple[str, ...], path: Path, output_format: str) -> None:
    """What is affected if FILES change?

    Lists every file that depends on the changed files (transitively), the
    direct dependencies worth reviewing alongside them, and a severity.

    \b
    Examples:
        depscope impact src/auth.ts
        depscope impact $(git diff --name-only) -f json
    """
    from rich.table import Table

    from depscope.errors import ExitCode
    from depscope.graph.impact import analyze_impact
    from depscope.logging import console
    from depscope.models import ChangedFile
    from depscope.paths import canonicalize, relative_to_root

    graph, result, _builder = build_project_graph(ctx, path)
    changes = [ChangedFile(path=canonicalize(Path.cwd(), f)) for f in files]
    analysis = analyze_impact(graph, changes)

    if output_format == "json":
        payload = analysis.to_dict()
        payload["errors"] = [e.to_dict() for e in result.errors]
        click.echo(json.dumps(payload, indent=2))
    else:
        style = _SEVERITY_STYLES[analysis.severity.value]
        console.print(
            f"Severity: [{style}]{analysis.severity.value}[/{style}]"
            f"  Review scope: {analysis.review_scope} files"
        )

        table = Table(title="Impact", show_header=True)
        table.add_column("Role", style="yellow")
        table.add_column("File", style="cyan")
        for role, entries in (
            ("changed", analysis.changed_files),
            ("affected", analysis.affected_files),
            ("dependency", analysis.dependency_files),
        ):
            for file_id in entries:
                table.add_row(role, relative_to_root(graph.root, file_id))
        console.print(table)

    if result.exit_code != ExitCode.SUCCESS:
        sys.exit(result.exit_code)


__all__ = ["impact"]
