"""Directory scanning for source files to analyze."""

from __future__ import annotations

import os
from pathlib import Path

from depscope.config import DepscopeConfig
from depscope.graph.builder import should_exclude
from depscope.logging import get_logger
from depscope.paths import canonicalize


def scan_files(root: Path | str, config: DepscopeConfig | None = None) -> list[str]:
    """Collect analyzable files under a directory.

    Hidden entries and excluded paths are skipped; a file is kept when its
    extension is listed in ``analyzer.include_patterns``.

    Args:
        root: Directory to scan
        config: depscope configuration

    Returns:
        Canonical file ids in sorted walk order
    """
    logger = get_logger()
    config = config or DepscopeConfig()
    root = canonicalize(root, ".")
    extensions = {ext.lower() for ext in config.analyzer.include_patterns}
    patterns = config.analyzer.exclude_patterns

    logger.info(f"Scanning {root}")
    logger.debug(f"Exclude patterns: {patterns}")

    files: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(
            d
            for d in dirnames
            if not d.startswith(".")
            and not should_exclude(canonicalize(root, os.path.join(dirpath, d)), patterns)
        )

        for filename in sorted(filenames):
            if filename.startswith("."):
                continue
            if os.path.splitext(filename)[1].lower() not in extensions:
                continue
            file_id = canonicalize(root, os.path.join(dirpath, filename))
            if should_exclude(file_id, patterns):
                continue
            files.append(file_id)

    logger.debug(f"Found {len(files)} files")
    return files


__all__ = ["scan_files"]
