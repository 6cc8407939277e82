"""regschema export command - Export a registry as JSON Schema."""

from __future__ import annotations

from typing import Any

import click

from regschema_cli.output import success, warning

STDOUT = "-"


@click.command()
@click.argument("target")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, allow_dash=True),
    default=STDOUT,
    help="Output path, '-' for stdout [default: -]",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML file with export settings.",
)
@click.option("--title", default=None, help="Document title.")
@click.option(
    "--no-bounds",
    is_flag=True,
    default=False,
    help="Omit minimum/maximum from field schemas.",
)
@click.option(
    "--legacy-struct-variant-required",
    is_flag=True,
    default=False,
    help="List optional (not required) fields in struct variant 'required'.",
)
def export(
    target: str,
    output_path: str,
    config_path: str | None,
    title: str | None,
    no_bounds: bool,
    legacy_struct_variant_required: bool,
) -> None:
    """Export a type registry as one JSON Schema document.

    TARGET is `module:attribute` naming a TypeRegistry (or a function
    returning one), or a `.yaml`/`.json` registry file.

    Examples:

        regschema export game.schema:registry

        regschema export game.schema:build_registry -o schemas/game.schema.json

        regschema export registry.yaml --title "save file schema"
    """
    # Import here to avoid heavy imports at CLI startup
    from regschema_cli.errors import handle_regschema_error
    from regschema_cli.targets import resolve_registry
    from regschema_core.errors import RegSchemaError
    from regschema_core.export import SchemaExporter

    overrides: dict[str, Any] = {}
    if title is not None:
        overrides["title"] = title
    if no_bounds:
        overrides["include_bounds"] = False
    if legacy_struct_variant_required:
        overrides["struct_variant_required"] = "optional"

    try:
        config = _export_config(config_path, overrides)
        registry = resolve_registry(target)
        exporter = SchemaExporter(config)

        if output_path == STDOUT:
            count = exporter.export(registry, click.get_binary_stream("stdout"))
            destination = "stdout"
        else:
            count = exporter.export_to_path(registry, output_path)
            destination = output_path

    except RegSchemaError as e:
        handle_regschema_error(e)

    if count == 0:
        warning("Registry has no types")
    success(f"Exported {count} types to {destination}")


def _export_config(config_path: str | None, overrides: dict[str, Any]) -> Any:
    from pydantic import ValidationError as PydanticValidationError

    from regschema_cli.errors import handle_validation_error
    from regschema_core.config import ExportConfig, load_config

    try:
        base = load_config(config_path) if config_path else ExportConfig()
        if not overrides:
            return base
        return ExportConfig(**{**base.model_dump(), **overrides})
    except PydanticValidationError as e:
        handle_validation_error(e, "export options")
