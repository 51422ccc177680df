"""Dependency graph builder.

Drives extraction over a list of files and assembles the forward node map
and its reverse (dependents) index.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from collections.abc import Callable, Iterable, Sequence
from fnmatch import fnmatchcase
from pathlib import Path

from depscope.config import DepscopeConfig
from depscope.errors import BuildReport, ExtractionError
from depscope.extractor.base import (
    ExtractionResult,
    FactExtractor,
    LocalExtractor,
    detect_language,
)
from depscope.extractor.delegated import DelegatedExtractor
from depscope.extractor.indexer import CodeIndexer
from depscope.models import DependencyGraph
from depscope.paths import canonicalize

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def should_exclude(path: str, patterns: Iterable[str]) -> bool:
    """Check a path against exclusion patterns.

    A pattern holding both ``*`` and ``.`` (``*.test.*``) is a file name
    pattern and is matched against the base name only. Other ``*`` patterns
    match anywhere in the path; plain patterns match as substrings.
    """
    name = os.path.basename(path)
    for pattern in patterns:
        if "*" in pattern:
            if "." in pattern:
                if fnmatchcase(name, pattern):
                    return True
            elif re.search(".*".join(re.escape(part) for part in pattern.split("*")), path):
                return True
        elif pattern and pattern in path:
            return True
    return False


class GraphBuilder:
    """Builds a DependencyGraph from source files.

    Each ``build`` call produces a fresh graph; nothing is carried over
    between builds except configuration.
    """

    def __init__(
        self,
        root: Path | str,
        config: DepscopeConfig | None = None,
        indexer: CodeIndexer | None = None,
        local: FactExtractor | None = None,
    ) -> None:
        """Initialize builder.

        Args:
            root: Project root. Relative inputs are resolved against it.
            config: Configuration (defaults when omitted).
            indexer: Optional external indexer tried before local rules.
            local: Extractor used without an indexer and as its fallback.
                Defaults to the regex rule sets.
        """
        self.root = canonicalize(root, ".")
        self.config = config or DepscopeConfig()
        self.local = local or LocalExtractor(
            self.root, analyze_internal=self.config.analyzer.analyze_internal
        )
        self.delegated = DelegatedExtractor(self.root, indexer, self.local) if indexer else None
        self.result = BuildReport()
        self.outcomes: list[ExtractionResult] = []

    def _select(self, files: Iterable[Path | str]) -> list[str]:
        """Canonicalize, deduplicate and filter the input list."""
        patterns = self.config.analyzer.exclude_patterns
        selected: list[str] = []
        seen: set[str] = set()
        for file in files:
            file_id = canonicalize(self.root, file)
            if file_id in seen:
                continue
            seen.add(file_id)
            if should_exclude(file_id, patterns):
                logger.debug(f"Excluded {file_id}")
                self.result.record_skipped(file_id, "excluded")
                continue
            selected.append(file_id)
        return selected

    async def _extract_file(self, file_id: str) -> ExtractionResult | None:
        try:
            content = Path(file_id).read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            self.result.record_skipped(file_id, "not_found")
            return None

        try:
            if self.delegated is not None:
                outcome = await self.delegated.extract(file_id, content)
            else:
                outcome = ExtractionResult(
                    path=file_id,
                    language=detect_language(file_id),
                    node=self.local.extract(file_id, content),
                )
        except Exception as e:
            logger.warning(f"Failed to analyze {file_id}: {e}")
            self.result.record_error(
                ExtractionError(str(e), file_path=file_id, language=detect_language(file_id))
            )
            return None

        self.result.record_processed(file_id)
        return outcome

    async def build(
        self,
        files: Sequence[Path | str],
        progress_callback: ProgressCallback | None = None,
    ) -> DependencyGraph:
        """Build a dependency graph for the given files.

        Args:
            files: Files to analyze, absolute or relative to the root.
            progress_callback: Called with ``(completed, total)`` after each file.

        Returns:
            A new DependencyGraph. Missing and excluded files are left out;
            see ``self.result`` for what happened to each input.

        Raises:
            OSError: If a file exists but cannot be read.
        """
        self.result = BuildReport()
        self.outcomes = []
        graph = DependencyGraph.empty(self.root)

        file_ids = self._select(files)
        if not file_ids:
            return graph

        semaphore = asyncio.Semaphore(self.config.indexer.concurrency)
        slots: list[ExtractionResult | None] = [None] * len(file_ids)
        completed = 0

        async def process_one(index: int, file_id: str) -> None:
            nonlocal completed
            async with semaphore:
                slots[index] = await self._extract_file(file_id)
                completed += 1
                if progress_callback:
                    progress_callback(completed, len(file_ids))

        await asyncio.gather(*(process_one(i, f) for i, f in enumerate(file_ids)))

        # Commit in input order once every extraction has finished
        for outcome in slots:
            if outcome is None or outcome.node is None:
                continue
            self.outcomes.append(outcome)
            graph.nodes[outcome.path] = outcome.node

        _index_dependents(graph)
        logger.debug(
            f"Built graph: {graph.file_count} files, {graph.dependency_count} dependencies"
        )
        return graph

    def build_sync(
        self,
        files: Sequence[Path | str],
        progress_callback: ProgressCallback | None = None,
    ) -> DependencyGraph:
        """Blocking wrapper around :meth:`build`."""
        return asyncio.run(self.build(files, progress_callback))


def _index_dependents(graph: DependencyGraph) -> None:
    """Derive the reverse index and totals from the finalized node map."""
    graph.dependents = {}
    for file_id, node in graph.nodes.items():
        for target in node.file_deps:
            graph.dependents.setdefault(target, set()).add(file_id)
    graph.file_count = len(graph.nodes)
    graph.dependency_count = sum(len(node.file_deps) for node in graph.nodes.values())


def build_graph(
    root: Path | str,
    files: Sequence[Path | str],
    config: DepscopeConfig | None = None,
) -> DependencyGraph:
    """Build a graph with local extraction only."""
    return GraphBuilder(root, config).build_sync(files)


__all__ = ["GraphBuilder", "ProgressCallback", "build_graph", "should_exclude"]
