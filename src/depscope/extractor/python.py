"""Python import/export rules."""

from __future__ import annotations

import re

from depscope.extractor.base import is_identifier, line_at, scan_internal_calls, split_names
from depscope.extractor.resolve import python_submodule, resolve_python_import
from depscope.models import DependencyNode, ImportKind, ImportRef, InternalDep

_FROM_IMPORT_RE = re.compile(
    r"^[ \t]*from[ \t]+(\.+[\w.]*|[\w.]+)[ \t]+import[ \t]+(\([^)]*\)|[^\n#;]+)",
    re.MULTILINE,
)
_IMPORT_RE = re.compile(r"^[ \t]*import[ \t]+([^\n#;]+)", re.MULTILINE)

_TOP_LEVEL_DEF_RE = re.compile(r"^(?:async[ \t]+)?def[ \t]+(\w+)|^class[ \t]+(\w+)", re.MULTILINE)
_DEF_RE = re.compile(r"^[ \t]*(?:async[ \t]+)?(?:def|class)[ \t]+(\w+)", re.MULTILINE)
_ALL_RE = re.compile(r"^__all__\s*(?::[^=\n]*)?\+?=\s*[\[(]([^\])]*)[\])]", re.MULTILINE)
_QUOTED_NAME_RE = re.compile(r"""['"](\w+)['"]""")
_COMMENT_RE = re.compile(r"#[^\n]*")


def _split_alias(part: str) -> tuple[str, str | None]:
    name, _, alias = part.partition(" as ")
    return name.strip(), (alias.strip() or None)


class PythonRules:
    """Extract import/export facts from Python source."""

    language = "python"

    def extract(self, content: str, file_id: str, root: str) -> DependencyNode:
        node = DependencyNode(file=file_id, language=self.language)

        for match in _FROM_IMPORT_RE.finditer(content):
            module = match.group(1)
            names = _COMMENT_RE.sub("", match.group(2)).strip().strip("()")
            line = line_at(content, match.start())
            package_target = resolve_python_import(root, file_id, module)
            needs_package = False

            for part in split_names(" ".join(names.split())):
                name, alias = _split_alias(part)
                if name == "*":
                    node.imports.append(
                        ImportRef(
                            symbol="*",
                            target=package_target,
                            kind=ImportKind.NAMESPACE,
                            source=module,
                            line=line,
                        )
                    )
                    needs_package = True
                    continue
                if not is_identifier(name):
                    continue

                target = python_submodule(root, file_id, module, name)
                if target:
                    node.add_file_dep(target)
                else:
                    target = package_target
                    needs_package = True
                node.imports.append(
                    ImportRef(
                        symbol=name,
                        target=target,
                        kind=ImportKind.NAMED,
                        source=module,
                        line=line,
                        alias=alias,
                    )
                )

            if needs_package:
                node.add_file_dep(package_target)

        for match in _IMPORT_RE.finditer(content):
            line = line_at(content, match.start())
            for part in split_names(match.group(1)):
                module, alias = _split_alias(part)
                if not all(is_identifier(p) for p in module.split(".")):
                    continue
                target = resolve_python_import(root, file_id, module)
                node.imports.append(
                    ImportRef(
                        symbol=module,
                        target=target,
                        kind=ImportKind.NAMESPACE,
                        source=module,
                        line=line,
                        alias=alias,
                    )
                )
                node.add_file_dep(target)

        for match in _TOP_LEVEL_DEF_RE.finditer(content):
            node.add_export(match.group(1) or match.group(2))

        for match in _ALL_RE.finditer(content):
            for name in _QUOTED_NAME_RE.findall(match.group(1)):
                node.add_export(name)

        return node

    def internal_deps(self, content: str, node: DependencyNode) -> list[InternalDep]:
        definitions = [(m.start(1), m.group(1)) for m in _DEF_RE.finditer(content)]
        local_symbols = set(node.exports) | {name for _, name in definitions}
        imported = {imp.local_name.split(".")[0] for imp in node.imports}
        return scan_internal_calls(content, definitions, local_symbols, imported)
