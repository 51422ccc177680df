"""Base extractor infrastructure and language routing.

Extraction is text based: each language family has a rule set of regular
expressions that finds import and export declarations and resolves import
targets to canonical file ids. Rule sets never raise on malformed input; the
worst case is that a construct is not matched.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Protocol, runtime_checkable

from depscope.errors import UnsupportedLanguageError
from depscope.models import DependencyNode, InternalDep
from depscope.paths import canonicalize

# Language detection by file extension
LANGUAGE_EXTENSIONS: dict[str, str] = {
    ".ts": "typescript",
    ".tsx": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".py": "python",
    ".pyi": "python",
    ".go": "go",
    ".java": "java",
    ".rs": "rust",
}

Backend = Literal["local", "indexer"]


def detect_language(file_path: Path | str) -> str | None:
    """Detect programming language from file extension."""
    ext = os.path.splitext(os.fspath(file_path))[1].lower()
    return LANGUAGE_EXTENSIONS.get(ext)


@runtime_checkable
class FactExtractor(Protocol):
    """Anything that turns file content into a DependencyNode."""

    def extract(self, file_id: str, content: str) -> DependencyNode:
        """Extract structural facts for one canonical file id."""
        ...


class RuleSet(Protocol):
    """Protocol for language-specific text rule sets."""

    language: str

    def extract(self, content: str, file_id: str, root: str) -> DependencyNode:
        """Extract imports, exports and file dependencies."""
        ...

    def internal_deps(self, content: str, node: DependencyNode) -> list[InternalDep]:
        """Find same-file calls between local definitions."""
        ...


@dataclass
class ExtractionResult:
    """Outcome of extracting a single file."""

    path: str
    language: str | None
    node: DependencyNode | None = None
    error: str | None = None
    backend: Backend = "local"
    fallback_reason: str | None = None

    @property
    def success(self) -> bool:
        return self.node is not None and self.error is None

    @property
    def fell_back(self) -> bool:
        return self.fallback_reason is not None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "path": self.path,
            "language": self.language,
            "success": self.success,
            "backend": self.backend,
        }
        if self.node:
            result["node"] = self.node.to_dict()
        if self.error:
            result["error"] = self.error
        if self.fallback_reason:
            result["fallback_reason"] = self.fallback_reason
        return result


# Rule set registry
_rule_sets: dict[str, RuleSet] = {}


def get_rule_set(lang: str) -> RuleSet:
    """Get or create the rule set for a language."""
    if lang not in _rule_sets:
        if lang in ("typescript", "javascript"):
            from depscope.extractor.javascript import JavaScriptRules

            _rule_sets[lang] = JavaScriptRules(lang)
        elif lang == "python":
            from depscope.extractor.python import PythonRules

            _rule_sets[lang] = PythonRules()
        elif lang == "go":
            from depscope.extractor.go import GoRules

            _rule_sets[lang] = GoRules()
        elif lang == "java":
            from depscope.extractor.java import JavaRules

            _rule_sets[lang] = JavaRules()
        elif lang == "rust":
            from depscope.extractor.rust import RustRules

            _rule_sets[lang] = RustRules()
        else:
            raise UnsupportedLanguageError(lang, "")
    return _rule_sets[lang]


class LocalExtractor:
    """Best-effort text pattern extraction, always available.

    Files with an unsupported extension get an empty node rather than an
    error.
    """

    def __init__(self, root: Path | str, analyze_internal: bool = True) -> None:
        self.root = canonicalize(root, ".")
        self.analyze_internal = analyze_internal

    def extract(self, file_id: str, content: str) -> DependencyNode:
        language = detect_language(file_id)
        if language is None:
            return DependencyNode(file=file_id)

        rules = get_rule_set(language)
        node = rules.extract(content, file_id, self.root)
        if self.analyze_internal:
            node.internal_deps = rules.internal_deps(content, node)
        return node


# =============================================================================
# Helpers shared by rule sets
# =============================================================================

_CALL_RE = re.compile(r"(?<![\w$.])([A-Za-z_$][\w$]*)\s*\(")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][\w$]*$")


def line_at(content: str, offset: int) -> int:
    """1-based line number of a character offset."""
    return content.count("\n", 0, offset) + 1


def is_identifier(text: str) -> bool:
    return bool(_IDENTIFIER_RE.match(text))


def split_names(text: str) -> list[str]:
    """Split a comma separated name list, dropping blanks."""
    return [part.strip() for part in text.split(",") if part.strip()]


def scan_internal_calls(
    content: str,
    definitions: list[tuple[int, str]],
    local_symbols: Iterable[str],
    imported: Iterable[str],
) -> list[InternalDep]:
    """Record calls to locally defined symbols.

    Args:
        content: File text.
        definitions: ``(offset, name)`` of each local definition's name, in
            file order. Used to skip the definition sites themselves and to
            pick the enclosing caller.
        local_symbols: Names defined or exported by the file.
        imported: Local bindings of imported symbols; calls to these are
            already represented as file-level edges.
    """
    local = set(local_symbols)
    skip = set(imported)
    definition_offsets = {offset for offset, _ in definitions}
    deps: list[InternalDep] = []

    for match in _CALL_RE.finditer(content):
        callee = match.group(1)
        if callee in skip or callee not in local:
            continue
        if match.start(1) in definition_offsets:
            continue

        caller = "<module>"
        for offset, name in definitions:
            if offset >= match.start():
                break
            caller = name

        deps.append(InternalDep(caller=caller, callee=callee, line=line_at(content, match.start())))

    return deps


__all__ = [
    "Backend",
    "ExtractionResult",
    "FactExtractor",
    "LANGUAGE_EXTENSIONS",
    "LocalExtractor",
    "RuleSet",
    "detect_language",
    "get_rule_set",
    "is_identifier",
    "line_at",
    "scan_internal_calls",
    "split_names",
]
