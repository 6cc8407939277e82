"""CLI entry point for regschema.

This module defines the main CLI group. Subcommands are loaded lazily so
that --help stays fast.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from regschema_cli import __version__
from regschema_cli.output import set_no_color

# Help output: markdown docstrings, arguments listed with options
rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LazyGroup(rclick.RichGroup):
    """Rich-click group whose subcommands are imported on first lookup.

    ``regschema --help`` imports no command module.

    Attributes:
        lazy_subcommands: Command name to ``"package.module.attribute"``.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = dict(lazy_subcommands or {})

    def list_commands(self, ctx: click.Context) -> list[str]:
        """Names of eagerly added and lazy commands, sorted."""
        return sorted({*super().list_commands(ctx), *self.lazy_subcommands})

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Look up ``cmd_name``, importing its module if it is lazy.

        Args:
            ctx: Click context.
            cmd_name: Command name as typed on the command line.

        Returns:
            The command, or None when no command has that name.
        """
        eager = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if eager is not None or cmd_name not in self.lazy_subcommands:
            return eager
        return self._import_command(self.lazy_subcommands[cmd_name])

    @staticmethod
    def _import_command(import_path: str) -> click.Command:
        module_name, _, attribute = import_path.rpartition(".")
        command = getattr(importlib.import_module(module_name), attribute)
        if not isinstance(command, click.Command):
            raise TypeError(f"{import_path} is not a click command")
        return command


LAZY_COMMANDS = {
    "export": "regschema_cli.commands.export.export",
    "types": "regschema_cli.commands.types.types_cmd",
}


def _disable_color(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if value:
        set_no_color(True)


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="regschema")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=_disable_color,
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    help="Minimum level of log messages written to stderr [default: WARNING]",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Write log messages as JSON lines.",
)
def cli(log_level: str, log_json: bool) -> None:
    """regschema - JSON Schema export for type registries.

    Turns a registry of reflected types into a single JSON Schema document
    with one entry per type.

    **Getting Started:**

    - `regschema types game.schema:registry` - List registered types
    - `regschema export game.schema:registry` - Print the schema document
    - `regschema export registry.yaml -o schema.json` - Export to a file
    """
    from regschema_core.observability import configure_logging

    configure_logging(log_level=log_level, json_format=log_json)


if __name__ == "__main__":
    cli()
