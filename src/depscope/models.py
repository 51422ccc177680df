"""Data models for the dependency graph and impact analysis."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Literal

from depscope.paths import canonicalize

FileStatus = Literal["added", "modified", "deleted", "renamed"]


class ImportKind(str, Enum):
    """How a symbol is brought into a file."""

    DEFAULT = "default"
    NAMED = "named"
    NAMESPACE = "namespace"
    TYPE = "type"


class Severity(str, Enum):
    """Size class of a change's review surface."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class ImportRef:
    """One imported symbol and the file it resolves to."""

    symbol: str
    target: str  # Canonical resolved target (may be dangling)
    kind: ImportKind = ImportKind.NAMED
    source: str = ""  # Import string as written
    line: int = 0
    alias: str | None = None  # Local binding when renamed

    @property
    def local_name(self) -> str:
        return self.alias or self.symbol

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "symbol": self.symbol,
            "target": self.target,
            "kind": self.kind.value,
            "source": self.source,
            "line": self.line,
        }
        if self.alias:
            result["alias"] = self.alias
        return result


@dataclass
class InternalDep:
    """A same-file call from one local definition to another."""

    caller: str
    callee: str
    line: int

    def to_dict(self) -> dict[str, Any]:
        return {"caller": self.caller, "callee": self.callee, "line": self.line}


@dataclass
class DependencyNode:
    """Structural facts about one analyzed file.

    ``exports`` and ``file_deps`` are kept duplicate-free in discovery order.
    """

    file: str
    language: str | None = None
    exports: list[str] = field(default_factory=list)
    imports: list[ImportRef] = field(default_factory=list)
    file_deps: list[str] = field(default_factory=list)
    internal_deps: list[InternalDep] = field(default_factory=list)

    def add_export(self, name: str) -> None:
        if name and name not in self.exports:
            self.exports.append(name)

    def add_file_dep(self, target: str) -> None:
        if target not in self.file_deps:
            self.file_deps.append(target)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "language": self.language,
            "exports": self.exports,
            "imports": [i.to_dict() for i in self.imports],
            "file_deps": self.file_deps,
            "internal_deps": [d.to_dict() for d in self.internal_deps],
        }


@dataclass
class DependencyGraph:
    """File-level dependency graph with its reverse index.

    The graph is a snapshot owned by whoever built it. ``dependents`` is
    derived from ``nodes`` and is never edited on its own.
    """

    root: str
    nodes: dict[str, DependencyNode] = field(default_factory=dict)
    dependents: dict[str, set[str]] = field(default_factory=dict)
    file_count: int = 0
    dependency_count: int = 0

    @classmethod
    def empty(cls, root: Path | str) -> DependencyGraph:
        """Create a graph with no nodes."""
        return cls(root=canonicalize(root, "."))

    def canonical(self, file: Path | str) -> str:
        """Canonicalize a file reference against this graph's root."""
        return canonicalize(self.root, file)

    def has_node(self, file: Path | str) -> bool:
        return self.canonical(file) in self.nodes

    def get_dependencies(self, file: Path | str) -> DependencyNode | None:
        """Get the analyzed node for a file, if it was analyzed."""
        return self.nodes.get(self.canonical(file))

    def get_dependents(self, file: Path | str) -> list[str]:
        """Get the files that declare ``file`` as a dependency."""
        return sorted(self.dependents.get(self.canonical(file), ()))

    def edges(self) -> Iterator[tuple[str, str]]:
        """Iterate forward (source, target) dependency pairs."""
        for file_id, node in self.nodes.items():
            for dep in node.file_deps:
                yield file_id, dep

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": self.root,
            "file_count": self.file_count,
            "dependency_count": self.dependency_count,
            "nodes": {file_id: node.to_dict() for file_id, node in self.nodes.items()},
            "dependents": {
                target: sorted(sources) for target, sources in self.dependents.items()
            },
        }


@dataclass
class ChangedFile:
    """A file touched by the change under review."""

    path: str
    status: FileStatus = "modified"
    additions: int = 0
    deletions: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "status": self.status,
            "additions": self.additions,
            "deletions": self.deletions,
        }


@dataclass
class ImpactAnalysis:
    """Review surface of a change."""

    changed_files: list[str] = field(default_factory=list)
    affected_files: list[str] = field(default_factory=list)  # Transitive dependents
    dependency_files: list[str] = field(default_factory=list)  # One hop upstream
    impact_chain: list[str] = field(default_factory=list)
    severity: Severity = Severity.LOW
    review_scope: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "changed_files": self.changed_files,
            "affected_files": self.affected_files,
            "dependency_files": self.dependency_files,
            "impact_chain": self.impact_chain,
            "severity": self.severity.value,
            "review_scope": self.review_scope,
        }


__all__ = [
    "ChangedFile",
    "DependencyGraph",
    "DependencyNode",
    "FileStatus",
    "ImpactAnalysis",
    "ImportKind",
    "ImportRef",
    "InternalDep",
    "Severity",
]
