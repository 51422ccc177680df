"""Console output and logging setup for depscope."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Literal

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

Verbosity = Literal["quiet", "normal", "verbose"]

LOGGER_NAME = "depscope"

_LEVELS: dict[str, int] = {
    "quiet": logging.ERROR,
    "normal": logging.INFO,
    "verbose": logging.DEBUG,
}

# Reports and diagrams go to stdout, diagnostics to stderr
console = Console()
err_console = Console(stderr=True)


def setup_logging(verbosity: Verbosity = "normal") -> logging.Logger:
    """Route the depscope logger through a Rich handler on stderr.

    Calling it again replaces the previous handler.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(_LEVELS[verbosity])

    verbose = verbosity == "verbose"
    handler = RichHandler(
        console=err_console,
        show_time=verbose,
        show_path=verbose,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def create_progress() -> Progress:
    """Progress bar for per-file extraction, drawn on stderr."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=err_console,
    )


@contextmanager
def progress_reporter(
    total: int, description: str = "Analyzing files..."
) -> Iterator[Callable[[int, int], None]]:
    """Show a progress bar and yield a ``(completed, total)`` callback that advances it."""
    with create_progress() as progress:
        task = progress.add_task(description, total=total)

        def report(completed: int, total: int) -> None:
            progress.update(task, completed=completed, total=total)

        yield report


def print_error(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {message}")


def print_warning(message: str) -> None:
    err_console.print(f"[yellow]Warning:[/yellow] {message}")


def print_success(message: str) -> None:
    console.print(f"[green]{message}[/green]")


def print_info(message: str) -> None:
    console.print(message)
