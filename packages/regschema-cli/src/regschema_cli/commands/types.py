"""regschema types command - List the types of a registry."""

from __future__ import annotations

import json

import click
from rich.table import Table
from rich.text import Text

from regschema_cli.output import info, print_table


@click.command("types")
@click.argument("target")
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print the listing as JSON.",
)
def types_cmd(target: str, as_json: bool) -> None:
    """List the registered types of a registry.

    Shows each type path with its descriptor kind and whether it is
    registered as a component or resource, sorted by type path.

    Examples:

        regschema types game.schema:registry

        regschema types registry.yaml --json
    """
    # Import here to avoid heavy imports at CLI startup
    from regschema_cli.errors import handle_regschema_error
    from regschema_cli.targets import resolve_registry
    from regschema_core.errors import RegSchemaError

    try:
        registry = resolve_registry(target)
    except RegSchemaError as e:
        handle_regschema_error(e)

    with registry.snapshot() as snapshot:
        rows = [
            {
                "type_path": registration.type_path,
                "kind": registration.descriptor.kind,
                "isComponent": registration.is_component,
                "isResource": registration.is_resource,
            }
            for registration in sorted(snapshot, key=lambda r: r.type_path)
        ]

    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return

    if not rows:
        info("No types registered")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Type path", min_width=20)
    table.add_column("Kind")
    table.add_column("Component", justify="center")
    table.add_column("Resource", justify="center")

    for row in rows:
        table.add_row(
            Text(row["type_path"]),
            row["kind"],
            "✓" if row["isComponent"] else "",
            "✓" if row["isResource"] else "",
        )

    print_table(table)
