"""Change impact analysis over a dependency graph."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from depscope.models import ChangedFile, DependencyGraph, ImpactAnalysis, Severity

# Severity thresholds
HIGH_TOTAL = 20
HIGH_AFFECTED = 10
MEDIUM_TOTAL = 10
MEDIUM_AFFECTED = 5


def calculate_severity(changed: int, affected: int, dependencies: int) -> Severity:
    """Classify the size of a change's review surface."""
    total = changed + affected + dependencies
    if total > HIGH_TOTAL or affected > HIGH_AFFECTED:
        return Severity.HIGH
    if total > MEDIUM_TOTAL or affected > MEDIUM_AFFECTED:
        return Severity.MEDIUM
    return Severity.LOW


def _unique(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))


def analyze_impact(
    graph: DependencyGraph,
    changes: Iterable[ChangedFile | str],
) -> ImpactAnalysis:
    """Compute which files a change can affect.

    Walks dependents breadth-first from the changed files (fully transitive)
    and collects the direct dependencies of every visited file.

    Args:
        graph: Graph to query. It is not modified.
        changes: Changed files, as records or plain paths.

    Returns:
        ImpactAnalysis with ``affected_files`` excluding the changed files
        themselves.
    """
    changed_files = _unique(
        graph.canonical(c.path if isinstance(c, ChangedFile) else c) for c in changes
    )
    changed = set(changed_files)

    affected: list[str] = []
    dependencies: list[str] = []
    seen_affected: set[str] = set()
    seen_dependencies: set[str] = set()
    visited: set[str] = set()
    queue = deque(changed_files)

    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)

        for dependent in graph.get_dependents(current):
            if dependent in visited or dependent in changed or dependent in seen_affected:
                continue
            seen_affected.add(dependent)
            affected.append(dependent)
            queue.append(dependent)

        node = graph.nodes.get(current)
        if node is None:
            continue
        for dep in node.file_deps:
            if dep not in seen_dependencies:
                seen_dependencies.add(dep)
                dependencies.append(dep)

    impact_chain = _unique([*changed_files, *affected, *dependencies])
    return ImpactAnalysis(
        changed_files=changed_files,
        affected_files=affected,
        dependency_files=dependencies,
        impact_chain=impact_chain,
        severity=calculate_severity(len(changed_files), len(affected), len(dependencies)),
        review_scope=len(impact_chain),
    )


__all__ = ["analyze_impact", "calculate_severity"]
