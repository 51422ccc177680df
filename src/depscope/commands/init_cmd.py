"""depscope init - create a .depscope.toml configuration."""

from __future__ import annotations

import sys
from pathlib import Path

import click


@click.command()
@click.option("--force", "-f", is_flag=True, help="Overwrite existing .depscope.toml")
def init(force: bool) -> None:
    """Initialize a new .depscope.toml configuration file.

    Creates a configuration file with sensible defaults in the current directory.
    """
    from depscope.config import get_default_config_toml
    from depscope.errors import ExitCode
    from depscope.logging import print_error, print_info, print_success, print_warning
    from depscope.paths import get_config_path

    config_path = get_config_path(Path.cwd())

    if config_path.exists() and not force:
        print_warning(f"Configuration file already exists: {config_path}")
        print_info("Use --force to overwrite")
        sys.exit(ExitCode.CONFIG_ERROR)

    try:
        config_path.write_text(get_default_config_toml())
    except PermissionError:
        print_error(f"Permission denied: {config_path}")
        sys.exit(ExitCode.CONFIG_ERROR)

    print_success(f"Created {config_path}")
    print_info("\nNext steps:")
    print_info("  1. Edit .depscope.toml to adjust include/exclude patterns")
    print_info("  2. Run 'depscope build' to analyze your codebase")
    print_info("  3. Run 'depscope impact <file>' before reviewing a change")


__all__ = ["init"]
