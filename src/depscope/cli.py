"""depscope CLI - dependency graphs and change impact from the command line."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv

# DEPSCOPE_* settings may live in a .env file
load_dotenv()

import click  # noqa: E402

from depscope import __version__  # noqa: E402
from depscope.commands.lazy import LazyCommand, LazyGroup  # noqa: E402

if TYPE_CHECKING:
    from depscope.config import DepscopeConfig
    from depscope.logging import Verbosity


class DepscopeContext:
    """State shared by every subcommand of one invocation."""

    def __init__(self) -> None:
        self.config: DepscopeConfig | None = None
        self.verbosity: Verbosity = "normal"
        self.debug: bool = False

    def configure(self, verbose: bool, quiet: bool, debug: bool, config_path: Path | None) -> None:
        """Apply global options: logging first, then configuration.

        A broken config file is reported but not fatal, so ``init`` can
        still replace it; other commands then run on defaults.
        """
        from depscope.config import DepscopeConfig
        from depscope.errors import ConfigError
        from depscope.logging import print_error, setup_logging

        self.debug = debug
        self.verbosity = "quiet" if quiet else "verbose" if verbose else "normal"
        setup_logging(self.verbosity)

        try:
            self.config = DepscopeConfig.load(config_path)
        except ConfigError as e:
            if not quiet:
                print_error(f"Failed to load configuration: {e}")

    def get_config(self) -> DepscopeConfig:
        """Loaded configuration, or defaults when loading failed."""
        from depscope.config import DepscopeConfig

        return self.config or DepscopeConfig()


pass_context = click.make_pass_decorator(DepscopeContext, ensure=True)


LAZY_COMMANDS: dict[str, LazyCommand] = {
    "build": LazyCommand(
        "depscope.commands.graph", "build", "Graph", "Build the dependency graph and summarize it"
    ),
    "deps": LazyCommand(
        "depscope.commands.graph", "deps", "Graph", "Show a file's dependencies and dependents"
    ),
    "viz": LazyCommand(
        "depscope.commands.graph", "viz", "Graph", "Render the graph as a Mermaid diagram"
    ),
    "impact": LazyCommand(
        "depscope.commands.impact", "impact", "Review", "What is affected if these files change?"
    ),
    "init": LazyCommand(
        "depscope.commands.init_cmd", "init", "Setup", "Create a .depscope.toml configuration file"
    ),
}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.option("-v", "--verbose", is_flag=True, help="Log every file decision")
@click.option("-q", "--quiet", is_flag=True, help="Only print results and errors")
@click.option("--debug", is_flag=True, help="Show full tracebacks on errors")
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Use this .depscope.toml instead of searching for one",
)
@click.version_option(version=__version__, prog_name="depscope")
@pass_context
def cli(ctx: DepscopeContext, verbose: bool, quiet: bool, debug: bool, config: Path | None) -> None:
    """depscope - dependency graphs and change impact for codebases.

    Every command scans --path (default: current directory) afresh.
    """
    ctx.configure(verbose, quiet, debug, config)


def _report_crash(error: Exception, debug: bool) -> None:
    from depscope.logging import err_console, print_error, print_info

    if isinstance(error, PermissionError):
        print_error(f"Permission denied: {error.filename}")
    elif isinstance(error, IsADirectoryError):
        print_error(f"Expected a file, got a directory: {error.filename}")
    else:
        print_error(str(error) or type(error).__name__)

    if debug:
        err_console.print_exception()
    else:
        print_info("Run with --debug for full traceback.")


def main() -> None:
    """Entry point for the ``depscope`` script."""
    try:
        cli()
    except click.ClickException:
        raise
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as e:
        from depscope.errors import DepscopeError, ExitCode

        _report_crash(e, debug="--debug" in sys.argv)
        sys.exit(e.exit_code if isinstance(e, DepscopeError) else ExitCode.FATAL_ERROR)


if __name__ == "__main__":
    main()
