"""Go import/export rules."""

from __future__ import annotations

import re

from depscope.extractor.base import line_at
from depscope.extractor.resolve import resolve_go_import
from depscope.models import DependencyNode, ImportKind, ImportRef, InternalDep

_IMPORT_SINGLE_RE = re.compile(r'^[ \t]*import[ \t]+(?:([\w.]+)[ \t]+)?"([^"\n]+)"', re.MULTILINE)
_IMPORT_GROUP_RE = re.compile(r"^[ \t]*import[ \t]*\(([^)]*)\)", re.MULTILINE)
_GROUP_SPEC_RE = re.compile(r'^[ \t]*(?:([\w.]+)[ \t]+)?"([^"\n]+)"', re.MULTILINE)

# Exported identifiers start with an upper-case letter
_FUNC_RE = re.compile(r"^func[ \t]+(?:\([^)]*\)[ \t]*)?([A-Z]\w*)", re.MULTILINE)
_DECL_RE = re.compile(r"^(?:type|const|var)[ \t]+([A-Z]\w*)", re.MULTILINE)
_DECL_BLOCK_RE = re.compile(r"^(?:type|const|var)[ \t]*\(([^)]*)\)", re.MULTILINE)
_BLOCK_NAME_RE = re.compile(r"^[ \t]*([A-Z]\w*)", re.MULTILINE)


class GoRules:
    """Extract import/export facts from Go source.

    Go imports name packages, so resolved targets are package directories.
    """

    language = "go"

    def _add_import(
        self, node: DependencyNode, root: str, alias: str | None, path: str, line: int
    ) -> None:
        target = resolve_go_import(root, node.file, path)
        symbol = path.rstrip("/").rsplit("/", 1)[-1]
        node.imports.append(
            ImportRef(
                symbol=symbol,
                target=target,
                kind=ImportKind.NAMESPACE,
                source=path,
                line=line,
                alias=alias if alias != symbol else None,
            )
        )
        node.add_file_dep(target)

    def extract(self, content: str, file_id: str, root: str) -> DependencyNode:
        node = DependencyNode(file=file_id, language=self.language)

        for match in _IMPORT_SINGLE_RE.finditer(content):
            self._add_import(
                node, root, match.group(1), match.group(2), line_at(content, match.start())
            )

        for block in _IMPORT_GROUP_RE.finditer(content):
            offset = block.start(1)
            for match in _GROUP_SPEC_RE.finditer(block.group(1)):
                self._add_import(
                    node,
                    root,
                    match.group(1),
                    match.group(2),
                    line_at(content, offset + match.start(2)),
                )

        for match in _FUNC_RE.finditer(content):
            node.add_export(match.group(1))
        for match in _DECL_RE.finditer(content):
            node.add_export(match.group(1))
        for block in _DECL_BLOCK_RE.finditer(content):
            for name in _BLOCK_NAME_RE.findall(block.group(1)):
                node.add_export(name)

        return node

    def internal_deps(self, content: str, node: DependencyNode) -> list[InternalDep]:
        return []
