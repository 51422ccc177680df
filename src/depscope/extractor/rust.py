"""Rust use/mod rules."""

from __future__ import annotations

import re

from depscope.extractor.base import line_at
from depscope.extractor.resolve import resolve_rust_mod, resolve_rust_use
from depscope.models import DependencyNode, ImportKind, ImportRef, InternalDep

_VISIBILITY = r"(?:pub(?:\([^)]*\))?[ \t]+)?"
_USE_RE = re.compile(r"^[ \t]*" + _VISIBILITY + r"use[ \t]+([^;]+);", re.MULTILINE)
_MOD_RE = re.compile(r"^[ \t]*" + _VISIBILITY + r"mod[ \t]+(\w+)[ \t]*;", re.MULTILINE)
_PUB_ITEM_RE = re.compile(
    r"^[ \t]*pub[ \t]+(?:(?:async|const|unsafe|extern(?:[ \t]+\"[^\"]*\")?)[ \t]+)*"
    r"(?:fn|struct|enum|trait|type|const|static|mod|union)[ \t]+(\w+)",
    re.MULTILINE,
)


def _split_top_level(text: str) -> list[str]:
    """Split on commas that are not nested inside braces."""
    parts, depth, current = [], 0, []
    for char in text:
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


def expand_use_tree(tree: str, prefix: str = "") -> list[str]:
    """Flatten a use tree: ``a::{b, c::{d as e}}`` -> ``a::b``, ``a::c::d as e``."""
    tree = " ".join(tree.split())
    paths = []
    for item in _split_top_level(tree):
        head, brace, rest = item.partition("{")
        if brace:
            if rest.count("}") < rest.count("{") + 1:
                continue  # Unterminated group
            paths.extend(expand_use_tree(rest[: rest.rfind("}")], prefix + head.strip()))
        else:
            path = prefix + item
            if path.endswith("::self"):
                path = path[: -len("::self")]
            paths.append(path)
    return paths


class RustRules:
    """Extract use/mod facts from Rust source."""

    language = "rust"

    def extract(self, content: str, file_id: str, root: str) -> DependencyNode:
        node = DependencyNode(file=file_id, language=self.language)

        for match in _MOD_RE.finditer(content):
            name = match.group(1)
            target = resolve_rust_mod(file_id, name)
            node.imports.append(
                ImportRef(
                    symbol=name,
                    target=target,
                    kind=ImportKind.NAMESPACE,
                    source=f"mod {name}",
                    line=line_at(content, match.start()),
                )
            )
            node.add_file_dep(target)

        for match in _USE_RE.finditer(content):
            line = line_at(content, match.start())
            for entry in expand_use_tree(match.group(1)):
                path, _, alias = entry.partition(" as ")
                path = path.strip()
                glob = path.endswith("::*")
                if glob:
                    path = path[: -len("::*")]
                target = resolve_rust_use(root, file_id, path)
                node.imports.append(
                    ImportRef(
                        symbol="*" if glob else path.rsplit("::", 1)[-1],
                        target=target,
                        kind=ImportKind.NAMESPACE if glob else ImportKind.NAMED,
                        source=entry,
                        line=line,
                        alias=alias.strip() or None,
                    )
                )
                node.add_file_dep(target)

        for match in _PUB_ITEM_RE.finditer(content):
            node.add_export(match.group(1))

        return node

    def internal_deps(self, content: str, node: DependencyNode) -> list[InternalDep]:
        return []
