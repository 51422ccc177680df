"""Java import/export rules."""

from __future__ import annotations

import re

from depscope.extractor.base import line_at
from depscope.extractor.resolve import resolve_java_import
from depscope.models import DependencyNode, ImportKind, ImportRef, InternalDep

_IMPORT_RE = re.compile(r"^[ \t]*import[ \t]+(static[ \t]+)?([\w.]+?)(\.\*)?[ \t]*;", re.MULTILINE)
_PUBLIC_TYPE_RE = re.compile(
    r"^public[ \t]+(?:(?:abstract|final|sealed|non-sealed|static|strictfp)[ \t]+)*"
    r"(?:class|interface|enum|record|@interface)[ \t]+(\w+)",
    re.MULTILINE,
)


class JavaRules:
    """Extract import/export facts from Java source."""

    language = "java"

    def extract(self, content: str, file_id: str, root: str) -> DependencyNode:
        node = DependencyNode(file=file_id, language=self.language)

        for match in _IMPORT_RE.finditer(content):
            is_static = bool(match.group(1))
            qualified = match.group(2)
            wildcard = bool(match.group(3))
            target = resolve_java_import(root, qualified, is_static=is_static, wildcard=wildcard)
            node.imports.append(
                ImportRef(
                    symbol="*" if wildcard else qualified.rsplit(".", 1)[-1],
                    target=target,
                    kind=ImportKind.NAMESPACE if wildcard else ImportKind.NAMED,
                    source=qualified + (".*" if wildcard else ""),
                    line=line_at(content, match.start()),
                )
            )
            node.add_file_dep(target)

        for match in _PUBLIC_TYPE_RE.finditer(content):
            node.add_export(match.group(1))

        return node

    def internal_deps(self, content: str, node: DependencyNode) -> list[InternalDep]:
        return []
