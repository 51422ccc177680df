"""Import target resolution.

Every language funnels its import syntax into a canonical file id. Relative
targets are probed on disk and the first existing candidate wins; when none
exists the joined path is still returned so the edge is kept as dangling
rather than silently dropped. Non-relative targets are external packages and
map beneath a conventional location (``node_modules``/``vendor``).
"""

from __future__ import annotations

import os
import re

from depscope.paths import NODE_MODULES_DIR, VENDOR_DIR, canonicalize, external_path

# Tried in order, each both as a suffix and as index<suffix>
JS_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", "")

JAVA_SOURCE_ROOTS = ("", os.path.join("src", "main", "java"), "src")

RUST_EXTERNAL_CRATES = {"std", "core", "alloc"}

_GO_MODULE_RE = re.compile(r"^\s*module\s+(\S+)", re.MULTILINE)


def _is_file(path: str) -> bool:
    return os.path.isfile(path)


def resolve_js_import(root: str, from_file: str, source: str) -> str:
    """Resolve a JavaScript/TypeScript module specifier."""
    if source.startswith("."):
        base = canonicalize(root, os.path.join(os.path.dirname(from_file), source))
        for ext in JS_EXTENSIONS:
            candidate = base + ext
            if _is_file(candidate):
                return candidate
            index_candidate = os.path.join(base, "index" + ext)
            if _is_file(index_candidate):
                return index_candidate
        return base

    return external_path(root, NODE_MODULES_DIR, source)


def _python_module_candidates(base: str) -> str | None:
    for candidate in (base + ".py", os.path.join(base, "__init__.py")):
        if _is_file(candidate):
            return candidate
    return None


def resolve_python_import(root: str, from_file: str, module: str) -> str:
    """Resolve a dotted Python module to a file.

    ``n`` leading dots climb ``n - 1`` packages from the importing file's
    directory. Absolute modules are looked up under the project root.
    """
    if module.startswith("."):
        level = len(module) - len(module.lstrip("."))
        base = os.path.dirname(from_file)
        for _ in range(level - 1):
            base = os.path.dirname(base)
        rest = module[level:]
        if rest:
            base = os.path.join(base, *rest.split("."))
        base = canonicalize(root, base)
    else:
        base = canonicalize(root, os.path.join(*module.split(".")))

    return _python_module_candidates(base) or base


def python_submodule(root: str, from_file: str, package: str, name: str) -> str | None:
    """Resolve ``from <package> import <name>`` when ``name`` is a module file."""
    joined = package + name if package.endswith(".") else f"{package}.{name}"
    resolved = resolve_python_import(root, from_file, joined)
    return resolved if _is_file(resolved) else None


def go_module_path(root: str) -> str | None:
    """Read the module path declared in ``<root>/go.mod``.

    Read on every call so edits to go.mod show up in the next build.
    """
    go_mod = os.path.join(root, "go.mod")
    try:
        with open(go_mod, encoding="utf-8", errors="replace") as f:
            match = _GO_MODULE_RE.search(f.read())
    except FileNotFoundError:
        return None
    return match.group(1) if match else None


def resolve_go_import(root: str, from_file: str, import_path: str) -> str:
    """Resolve a Go import path to its package directory."""
    root = canonicalize(root, ".")
    if import_path.startswith("."):
        return canonicalize(root, os.path.join(os.path.dirname(from_file), import_path))

    module = go_module_path(root)
    if module and (import_path == module or import_path.startswith(module + "/")):
        rest = import_path[len(module) :].lstrip("/")
        return canonicalize(root, rest or ".")

    return external_path(root, VENDOR_DIR, import_path)


def resolve_java_import(root: str, qualified: str, *, is_static: bool, wildcard: bool) -> str:
    """Resolve a Java import to a source file (or package directory)."""
    parts = qualified.split(".")
    if is_static and not wildcard and len(parts) > 1:
        parts = parts[:-1]  # Drop the member name

    relative = os.path.join(*parts) if wildcard else os.path.join(*parts) + ".java"
    candidates = [canonicalize(root, os.path.join(src, relative)) for src in JAVA_SOURCE_ROOTS]
    for candidate in candidates:
        if (os.path.isdir(candidate) if wildcard else _is_file(candidate)):
            return candidate
    return candidates[0]


def rust_module_dir(file_id: str) -> str:
    """Directory holding the child modules of a Rust source file."""
    directory, name = os.path.split(file_id)
    if name in ("lib.rs", "main.rs", "mod.rs"):
        return directory
    return os.path.join(directory, os.path.splitext(name)[0])


def _rust_crate_src(root: str, from_file: str) -> str:
    """Find the ``src`` directory of the crate containing ``from_file``."""
    directory = os.path.dirname(from_file)
    while directory.startswith(root):
        if _is_file(os.path.join(directory, "Cargo.toml")):
            return os.path.join(directory, "src")
        parent = os.path.dirname(directory)
        if parent == directory:
            break
        directory = parent
    return os.path.join(root, "src")


def _rust_probe(base: str, segments: list[str]) -> str | None:
    # Trailing segments may name items rather than modules; try longest first
    for end in range(len(segments), 0, -1):
        path = os.path.join(base, *segments[:end])
        for candidate in (path + ".rs", os.path.join(path, "mod.rs")):
            if _is_file(candidate):
                return candidate
    return None


def resolve_rust_mod(from_file: str, name: str) -> str:
    """Resolve a ``mod name;`` declaration to its file."""
    base = os.path.join(rust_module_dir(from_file), name)
    for candidate in (base + ".rs", os.path.join(base, "mod.rs")):
        if _is_file(candidate):
            return candidate
    return base + ".rs"


def resolve_rust_use(root: str, from_file: str, path: str) -> str:
    """Resolve a ``use`` path to the module file that defines it."""
    root = canonicalize(root, ".")
    segments = [s for s in path.split("::") if s]
    if not segments:
        return canonicalize(root, from_file)

    head = segments[0]
    if head == "crate":
        base = _rust_crate_src(root, from_file)
        segments = segments[1:]
    elif head in ("self", "super"):
        base = rust_module_dir(from_file)
        segments = segments[1:]
        while head == "super":
            base = os.path.dirname(base)
            head = segments[0] if segments else ""
            if head == "super":
                segments = segments[1:]
    elif head in RUST_EXTERNAL_CRATES:
        return external_path(root, VENDOR_DIR, head)
    else:
        # 2018 edition: a bare path may name a module of the current crate
        found = _rust_probe(rust_module_dir(from_file), segments)
        if found:
            return canonicalize(root, found)
        return external_path(root, VENDOR_DIR, head)

    if not segments:
        return canonicalize(root, base)
    found = _rust_probe(base, segments)
    if found:
        return canonicalize(root, found)
    kept = segments[:-1] if len(segments) > 1 else segments
    return canonicalize(root, os.path.join(base, *kept) + ".rs")


__all__ = [
    "JS_EXTENSIONS",
    "go_module_path",
    "python_submodule",
    "resolve_go_import",
    "resolve_java_import",
    "resolve_js_import",
    "resolve_python_import",
    "resolve_rust_mod",
    "resolve_rust_use",
    "rust_module_dir",
]
