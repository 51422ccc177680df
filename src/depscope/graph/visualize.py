"""Mermaid rendering of dependency graphs.

Produces a ``graph <direction>`` flowchart suitable for markdown viewers,
GitHub, or the Mermaid Live Editor.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from depscope.models import DependencyGraph

DEFAULT_MAX_NODES = 20


class MermaidVisualizer:
    """Render a file subset of a graph as a Mermaid flowchart."""

    def __init__(
        self,
        max_nodes: int = DEFAULT_MAX_NODES,
        direction: str = "TD",
        fenced: bool = True,
    ) -> None:
        """Initialize visualizer.

        Args:
            max_nodes: Nodes taken from the graph when no subset is given.
            direction: Mermaid layout direction (TD, LR, ...).
            fenced: Wrap the diagram in a markdown code fence.
        """
        self.max_nodes = max_nodes
        self.direction = direction
        self.fenced = fenced

    def _select(self, graph: DependencyGraph, files: Iterable[Path | str] | None) -> list[str]:
        if files is None:
            return list(graph.nodes)[: self.max_nodes]
        return list(dict.fromkeys(graph.canonical(f) for f in files))

    def render(self, graph: DependencyGraph, files: Iterable[Path | str] | None = None) -> str:
        """Render the graph.

        Edges are drawn only between files in the rendered subset; an empty
        subset gives a diagram with a header and nothing else.
        """
        selected = self._select(graph, files)
        node_ids = {file_id: f"N{index}" for index, file_id in enumerate(selected)}

        lines = ["```mermaid"] if self.fenced else []
        lines.append(f"graph {self.direction}")

        for file_id, node_id in node_ids.items():
            label = self._escape_label(os.path.basename(file_id) or file_id)
            lines.append(f'  {node_id}["{label}"]')

        for file_id in selected:
            node = graph.nodes.get(file_id)
            if node is None:
                continue
            for dep in node.file_deps:
                target = node_ids.get(dep)
                if target:
                    lines.append(f"  {node_ids[file_id]} --> {target}")

        if self.fenced:
            lines.append("```")
        return "\n".join(lines)

    def _escape_label(self, text: str) -> str:
        """Escape text for Mermaid labels."""
        # Quotes and brackets break Mermaid syntax
        text = text.replace('"', "'")
        for old, new in (("[", "("), ("]", ")"), ("{", "("), ("}", ")"), ("<", "("), (">", ")")):
            text = text.replace(old, new)
        return text


def render_mermaid(
    graph: DependencyGraph,
    files: Iterable[Path | str] | None = None,
    max_nodes: int = DEFAULT_MAX_NODES,
    direction: str = "TD",
    fenced: bool = True,
) -> str:
    """Render a graph as Mermaid text with a one-off visualizer."""
    return MermaidVisualizer(max_nodes, direction, fenced).render(graph, files)


__all__ = ["MermaidVisualizer", "render_mermaid"]
