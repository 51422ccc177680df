"""Lazy-loading Click group for fast CLI startup."""

from __future__ import annotations

import importlib
from typing import Any, NamedTuple

import click


class LazyCommand(NamedTuple):
    """Where a subcommand lives and how ``--help`` lists it."""

    module: str
    attr: str
    section: str = "Commands"
    summary: str = ""


class LazyGroup(click.Group):
    """A Click group that imports subcommand modules on first use.

    ``--help`` lists lazy commands by section from their registration
    alone, so printing help imports no command module.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, LazyCommand] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._lazy_subcommands: dict[str, LazyCommand] = lazy_subcommands or {}
        self._loaded_commands: dict[str, click.Command] = {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted(set(super().list_commands(ctx)) | set(self._lazy_subcommands))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        if cmd_name in self._loaded_commands:
            return self._loaded_commands[cmd_name]

        cmd = super().get_command(ctx, cmd_name)
        if cmd is not None or cmd_name not in self._lazy_subcommands:
            return cmd

        entry = self._lazy_subcommands[cmd_name]
        try:
            loaded: click.Command = getattr(importlib.import_module(entry.module), entry.attr)
        except (ImportError, AttributeError) as e:
            raise click.ClickException(f"Failed to load command '{cmd_name}': {e}") from None
        self._loaded_commands[cmd_name] = loaded
        return loaded

    def format_commands(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        sections: dict[str, list[tuple[str, str]]] = {}
        for name in self.list_commands(ctx):
            entry = self._lazy_subcommands.get(name)
            if entry is not None:
                sections.setdefault(entry.section, []).append((name, entry.summary))
                continue
            cmd = super().get_command(ctx, name)
            if cmd is not None and not cmd.hidden:
                sections.setdefault("Commands", []).append((name, cmd.get_short_help_str()))

        for section, rows in sections.items():
            with formatter.section(section):
                formatter.write_dl(rows)


__all__ = ["LazyCommand", "LazyGroup"]
