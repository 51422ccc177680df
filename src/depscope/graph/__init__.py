"""Dependency graph construction and queries."""

from depscope.graph.builder import GraphBuilder, build_graph, should_exclude
from depscope.graph.impact import analyze_impact, calculate_severity
from depscope.graph.visualize import MermaidVisualizer, render_mermaid

__all__ = [
    "GraphBuilder",
    "MermaidVisualizer",
    "analyze_impact",
    "build_graph",
    "calculate_severity",
    "render_mermaid",
    "should_exclude",
]
