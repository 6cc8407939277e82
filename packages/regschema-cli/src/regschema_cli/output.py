"""Rich console output for regschema-cli.

Status lines go to stderr; stdout carries only command results (the
exported document, the type listing). Color is off when NO_COLOR is set or
--no-color is passed.
"""

from __future__ import annotations

import os
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

_force_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False, *, stderr: bool = True) -> Console:
    """Build a console for status lines (stderr) or results (stdout).

    Args:
        no_color: Disable color and terminal detection. NO_COLOR in the
            environment has the same effect.
        stderr: Write to stderr. Stderr consoles soft-wrap so long type
            paths are never split.

    Returns:
        A new Console.
    """
    plain = no_color or _force_no_color
    return Console(
        stderr=stderr,
        force_terminal=False if plain else None,
        no_color=plain,
        soft_wrap=stderr,
    )


console = create_console()
result_console = create_console(stderr=False)


def _status(marker: str, message: str, **kwargs: Any) -> None:
    text = escape(message)
    console.print(f"{marker} {text}" if marker else text, **kwargs)


def success(message: str, **kwargs: Any) -> None:
    """Status line with a green checkmark.

    Example:
        >>> success("Exported 3 types")
        ✓ Exported 3 types
    """
    _status("[green]✓[/green]", message, **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Status line with a red cross.

    Example:
        >>> error("Cannot import module 'game'")
        ✗ Cannot import module 'game'
    """
    _status("[red]✗[/red]", message, **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    _status("[yellow]⚠[/yellow]", message, **kwargs)


def info(message: str, **kwargs: Any) -> None:
    _status("", message, **kwargs)


def print_table(table: Table) -> None:
    """Print a result table to stdout."""
    result_console.print(table)


def set_no_color(no_color: bool) -> None:
    """Replace both module consoles, with or without color."""
    global console, result_console
    console = create_console(no_color=no_color)
    result_console = create_console(no_color=no_color, stderr=False)
