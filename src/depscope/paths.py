"""Path canonicalization and well-known locations.

Every file that enters the dependency graph is keyed by its canonical id:
an absolute, normalized path string. The same procedure is used when the
graph is built and when it is queried, so a file spelled relative to the
project root and the same file spelled absolutely always collapse to one key.

    <root>/
    ├── .depscope.toml     # Project configuration (user-editable)
    ├── node_modules/      # External JS/TS packages (dangling targets)
    └── vendor/            # External Go packages and Rust crates
"""

from __future__ import annotations

import os
from pathlib import Path

# Config file stays at project root (user-editable)
CONFIG_FILE = ".depscope.toml"

# Locations non-relative imports are mapped beneath
NODE_MODULES_DIR = "node_modules"
VENDOR_DIR = "vendor"


def canonicalize(root: Path | str, path: Path | str) -> str:
    """Turn a file reference into its canonical graph id.

    Args:
        root: Project root directory. A relative root is made absolute
            against the current working directory.
        path: File reference, absolute or relative to ``root``.

    Returns:
        Absolute, normalized path string. Idempotent:
        ``canonicalize(root, canonicalize(root, p)) == canonicalize(root, p)``.
    """
    raw = os.fspath(path)
    if not os.path.isabs(raw):
        raw = os.path.join(os.path.abspath(os.fspath(root)), raw)
    normalized = os.path.normpath(raw)

    # Drive letters compare case-insensitively; keep one spelling
    drive, rest = os.path.splitdrive(normalized)
    if drive and len(drive) == 2 and drive[1] == ":":
        normalized = drive.upper() + rest
    return normalized


def relative_to_root(root: Path | str, file_id: str) -> str:
    """Express a canonical id relative to the project root.

    Files outside the root are returned unchanged.
    """
    base = canonicalize(root, ".")
    try:
        rel = os.path.relpath(file_id, base)
    except ValueError:
        # Different drives on Windows
        return file_id
    if rel == os.pardir or rel.startswith(os.pardir + os.sep):
        return file_id
    return rel.replace(os.sep, "/")


def external_path(root: Path | str, location: str, target: str) -> str:
    """Map an external package reference beneath a conventional location."""
    return canonicalize(root, os.path.join(location, *target.split("/")))


def get_config_path(root: Path | str = ".") -> Path:
    """Get the configuration file path.

    Args:
        root: Project root directory (default: current directory)

    Returns:
        Path to the config file (.depscope.toml)
    """
    return Path(root).resolve() / CONFIG_FILE
