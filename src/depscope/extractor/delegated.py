"""Indexer-backed extraction with per-file local fallback."""

from __future__ import annotations

import logging
from pathlib import Path

from depscope.extractor.base import (
    ExtractionResult,
    FactExtractor,
    LocalExtractor,
    detect_language,
)
from depscope.extractor.indexer import CodeIndexer
from depscope.models import DependencyNode, ImportKind, ImportRef
from depscope.paths import canonicalize, relative_to_root

logger = logging.getLogger(__name__)


class DelegatedExtractor:
    """Ask the indexer first; use local rules when it cannot answer.

    Fallback is decided per file. A file whose indexer request fails ends up
    with exactly the node local extraction would give it. The indexer reports
    no call edges, so ``internal_deps`` always comes from the local extractor.
    """

    def __init__(
        self,
        root: Path | str,
        indexer: CodeIndexer,
        local: FactExtractor | None = None,
    ) -> None:
        self.root = canonicalize(root, ".")
        self.indexer = indexer
        self.local = local or LocalExtractor(self.root)

    async def _from_indexer(self, file_id: str) -> DependencyNode:
        rel_file = relative_to_root(self.root, file_id)
        symbols = await self.indexer.extract_symbols(self.root, rel_file)
        deps = await self.indexer.extract_deps(self.root, rel_file)

        node = DependencyNode(file=file_id, language=detect_language(file_id))
        for symbol in symbols:
            if symbol.is_exported:
                node.add_export(symbol.name)
        for dep in deps:
            target = canonicalize(self.root, dep.target_file)
            node.imports.append(
                ImportRef(symbol=dep.target_file, target=target, kind=ImportKind.NAMED)
            )
            node.add_file_dep(target)
        return node

    def _fallback(self, file_id: str, content: str, reason: str) -> ExtractionResult:
        logger.debug(f"Local extraction for {file_id}: {reason}")
        return ExtractionResult(
            path=file_id,
            language=detect_language(file_id),
            node=self.local.extract(file_id, content),
            backend="local",
            fallback_reason=reason,
        )

    async def extract(self, file_id: str, content: str) -> ExtractionResult:
        """Extract one file, falling back to local rules on any indexer failure."""
        try:
            if not await self.indexer.is_available():
                return self._fallback(file_id, content, "indexer unavailable")
            node = await self._from_indexer(file_id)
        except Exception as e:
            return self._fallback(file_id, content, f"indexer failed: {e}")

        node.internal_deps = self.local.extract(file_id, content).internal_deps
        return ExtractionResult(
            path=file_id,
            language=node.language,
            node=node,
            backend="indexer",
        )


__all__ = ["DelegatedExtractor"]
