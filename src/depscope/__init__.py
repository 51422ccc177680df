"""depscope - file-level dependency graphs and change impact analysis."""

__version__ = "0.1.0"

from depscope.graph import (  # noqa: E402
    GraphBuilder,
    MermaidVisualizer,
    analyze_impact,
    build_graph,
    calculate_severity,
    render_mermaid,
)
from depscope.models import (  # noqa: E402
    ChangedFile,
    DependencyGraph,
    DependencyNode,
    ImpactAnalysis,
    ImportKind,
    ImportRef,
    Severity,
)
from depscope.paths import canonicalize  # noqa: E402

__all__ = [
    "ChangedFile",
    "DependencyGraph",
    "DependencyNode",
    "GraphBuilder",
    "ImpactAnalysis",
    "ImportKind",
    "ImportRef",
    "MermaidVisualizer",
    "Severity",
    "__version__",
    "analyze_impact",
    "build_graph",
    "calculate_severity",
    "canonicalize",
    "render_mermaid",
]
