"""TypeScript/JavaScript import/export rules."""

from __future__ import annotations

import re

from depscope.extractor.base import is_identifier, line_at, scan_internal_calls, split_names
from depscope.extractor.resolve import resolve_js_import
from depscope.models import DependencyNode, ImportKind, ImportRef, InternalDep

# import X from 'm' | import * as X from 'm' | import {a, b as c} from 'm' | import X, {a} from 'm'
_IMPORT_FROM_RE = re.compile(
    r"""\bimport\s+(type\s+)?([\w$*{}\s,]+?)\s*\bfrom\s*(['"])([^'"\n]+)\3"""
)
# import 'm' (side effects only)
_IMPORT_BARE_RE = re.compile(r"""\bimport\s*(['"])([^'"\n]+)\1""")
# const X = require('m') | const {a, b} = require('m') | require('m')
_REQUIRE_RE = re.compile(
    r"""(?:\b(?:const|let|var)\s+([\w$]+|\{[^}]*\})\s*=\s*)?\brequire\s*\(\s*(['"])([^'"\n]+)\2\s*\)"""
)
# export * from 'm' | export * as ns from 'm' | export {a, b} from 'm'
_REEXPORT_RE = re.compile(
    r"""\bexport\s+(type\s+)?(\*(?:\s+as\s+([\w$]+))?|\{[^}]*\})\s*from\s*(['"])([^'"\n]+)\4"""
)
_EXPORT_DECL_RE = re.compile(
    r"\bexport\s+(?:default\s+)?(?:declare\s+)?(?:abstract\s+)?(?:async\s+)?"
    r"(?:function\s*\*?|class|const|let|var|interface|type|enum|namespace)\s+([\w$]+)"
)
_EXPORT_LIST_RE = re.compile(r"\bexport\s+(?:type\s+)?\{([^}]*)\}")
_EXPORT_DEFAULT_NAME_RE = re.compile(r"\bexport\s+default\s+([\w$]+)\s*(?:;|$)", re.MULTILINE)

_FUNCTION_DEF_RE = re.compile(r"\b(?:async\s+)?function\s*\*?\s*([\w$]+)\s*\(")
_ARROW_DEF_RE = re.compile(
    r"\b(?:const|let|var)\s+([\w$]+)\s*(?::[^=]+)?=\s*(?:async\s+)?"
    r"(?:function\b|\([^)]*\)\s*(?::[^=]+)?=>|[\w$]+\s*=>)"
)

_DEFAULT_EXPORT_KEYWORDS = {"function", "class", "async", "abstract", "interface", "enum"}


def _parse_named(block: str) -> list[tuple[str, str, bool]]:
    """Parse ``a, b as c, type T`` into ``(imported, local, is_type)``."""
    names = []
    for part in split_names(block):
        is_type = False
        if part.startswith("type "):
            is_type = True
            part = part[5:].strip()
        imported, _, local = part.partition(" as ")
        imported, local = imported.strip(), (local.strip() or imported.strip())
        if is_identifier(imported) or imported == "default":
            names.append((imported, local, is_type))
    return names


class JavaScriptRules:
    """Extract import/export facts from TypeScript and JavaScript source."""

    def __init__(self, language: str = "typescript") -> None:
        self.language = language

    def extract(self, content: str, file_id: str, root: str) -> DependencyNode:
        node = DependencyNode(file=file_id, language=self.language)

        def add(
            symbol: str,
            kind: ImportKind,
            source: str,
            target: str,
            offset: int,
            alias: str | None = None,
        ) -> None:
            node.imports.append(
                ImportRef(
                    symbol=symbol,
                    target=target,
                    kind=kind,
                    source=source,
                    line=line_at(content, offset),
                    alias=alias if alias != symbol else None,
                )
            )

        for match in _IMPORT_FROM_RE.finditer(content):
            type_only = bool(match.group(1))
            clause = match.group(2).strip()
            source = match.group(4)
            # Unterminated named block: nothing reliable to record
            if clause.count("{") != clause.count("}"):
                continue

            target = resolve_js_import(root, file_id, source)
            default_part, brace, rest = clause.partition("{")
            named_part = rest.rpartition("}")[0] if brace else ""
            head = default_part.strip().rstrip(",").strip()

            recorded = False
            if head.startswith("*"):
                alias = head.partition(" as ")[2].strip()
                if is_identifier(alias):
                    add(alias, ImportKind.NAMESPACE, source, target, match.start())
                    recorded = True
            elif head:
                default_name, _, ns = head.partition(",")
                default_name = default_name.strip()
                if is_identifier(default_name):
                    kind = ImportKind.TYPE if type_only else ImportKind.DEFAULT
                    add(default_name, kind, source, target, match.start())
                    recorded = True
                alias = ns.strip().partition(" as ")[2].strip()
                if ns.strip().startswith("*") and is_identifier(alias):
                    add(alias, ImportKind.NAMESPACE, source, target, match.start())
                    recorded = True

            for imported, local, is_type in _parse_named(named_part):
                kind = ImportKind.TYPE if (type_only or is_type) else ImportKind.NAMED
                add(imported, kind, source, target, match.start(), local)
                recorded = True

            if recorded or not clause.strip("{} ,"):
                node.add_file_dep(target)

        for match in _IMPORT_BARE_RE.finditer(content):
            node.add_file_dep(resolve_js_import(root, file_id, match.group(2)))

        for match in _REQUIRE_RE.finditer(content):
            binding, source = match.group(1), match.group(3)
            target = resolve_js_import(root, file_id, source)
            if binding and binding.startswith("{"):
                for imported, local, _ in _parse_named(binding.strip("{}").replace(":", " as ")):
                    add(imported, ImportKind.NAMED, source, target, match.start(), local)
            elif binding:
                add(binding, ImportKind.DEFAULT, source, target, match.start())
            node.add_file_dep(target)

        for match in _REEXPORT_RE.finditer(content):
            type_only = bool(match.group(1))
            spec, namespace, source = match.group(2), match.group(3), match.group(5)
            target = resolve_js_import(root, file_id, source)
            if spec.startswith("{"):
                for imported, _local, is_type in _parse_named(spec.strip("{}")):
                    kind = ImportKind.TYPE if (type_only or is_type) else ImportKind.NAMED
                    add(imported, kind, source, target, match.start())
                    node.add_export(imported)
            elif namespace:
                add(namespace, ImportKind.NAMESPACE, source, target, match.start())
                node.add_export(namespace)
            node.add_file_dep(target)

        for match in _EXPORT_DECL_RE.finditer(content):
            node.add_export(match.group(1))

        for match in _EXPORT_LIST_RE.finditer(content):
            for imported, _local, _ in _parse_named(match.group(1)):
                node.add_export(imported)

        for match in _EXPORT_DEFAULT_NAME_RE.finditer(content):
            name = match.group(1)
            if name not in _DEFAULT_EXPORT_KEYWORDS:
                node.add_export(name)
        return node

    def internal_deps(self, content: str, node: DependencyNode) -> list[InternalDep]:
        definitions = sorted(
            [(m.start(1), m.group(1)) for m in _FUNCTION_DEF_RE.finditer(content)]
            + [(m.start(1), m.group(1)) for m in _ARROW_DEF_RE.finditer(content)]
        )
        local_symbols = set(node.exports) | {name for _, name in definitions}
        imported = {imp.local_name for imp in node.imports}
        return scan_internal_calls(content, definitions, local_symbols, imported)
