"""JSON Schema document export for regschema.

This module assembles the schema nodes of every registered type into one
JSON Schema Draft 2020-12 document:

    {
      "$schema": "https://json-schema.org/draft/2020-12/schema",
      "title": "reflected type registry schema",
      "oneOf": [<one node per type, sorted by name>]
    }

Nested types are never inlined: each type is a sibling entry of ``oneOf``
and other nodes refer to it by type path only.

An export either writes the complete document or raises. The document is
rendered in memory before anything reaches the sink.
"""

from __future__ import annotations

import io
import json
from collections.abc import Iterable
from contextlib import AbstractContextManager
from pathlib import Path
from typing import IO, Any, Protocol

from regschema_core.bounds import BoundsProvider, NullBoundsProvider
from regschema_core.builder import build_schema_node
from regschema_core.capabilities import CapabilityProbe
from regschema_core.config import JSON_SCHEMA_DIALECT, ExportConfig
from regschema_core.errors import ContractViolationError, ExportError
from regschema_core.observability import get_logger
from regschema_core.registry import RegistrySnapshot

logger = get_logger(__name__)


class RegistrySource(Protocol):
    """Anything that can hand out a read-only registry snapshot."""

    def snapshot(self) -> AbstractContextManager[RegistrySnapshot]:
        """Hold the registry's shared lock and yield its snapshot."""
        ...


class SchemaExporter:
    """Export a type registry as one JSON Schema document.

    Capability and bounds lookups default to the registry snapshot itself;
    either can be replaced, e.g. by test doubles.

    Attributes:
        config: Export settings.

    Example:
        >>> exporter = SchemaExporter(ExportConfig(title="game schema"))
        >>> document = exporter.build_document(registry)
        >>> document["title"]
        'game schema'

        >>> # Write to stdout
        >>> exporter.export(registry, sys.stdout.buffer)
    """

    def __init__(
        self,
        config: ExportConfig | None = None,
        *,
        capabilities: CapabilityProbe | None = None,
        bounds: BoundsProvider | None = None,
    ) -> None:
        """Initialize the exporter.

        Args:
            config: Export settings. Defaults to ExportConfig() (environment).
            capabilities: Capability probe overriding the snapshot's.
            bounds: Bounds provider overriding the snapshot's. Ignored when
                ``config.include_bounds`` is False.
        """
        self.config = config if config is not None else ExportConfig()
        self._capabilities = capabilities
        self._bounds = bounds
        self._log = logger.bind(component="schema_exporter")

    def build_nodes(self, registry: RegistrySource) -> list[dict[str, Any]]:
        """Build one schema node per registered type, in registry order."""
        with registry.snapshot() as snapshot:
            probe: CapabilityProbe = self._capabilities or snapshot
            bounds: BoundsProvider
            if not self.config.include_bounds:
                bounds = NullBoundsProvider()
            else:
                bounds = self._bounds or snapshot

            return [
                build_schema_node(
                    registration.descriptor,
                    is_component=probe.is_component(registration.type_path),
                    is_resource=probe.is_resource(registration.type_path),
                    bounds=bounds,
                    struct_variant_required=self.config.struct_variant_required,
                )
                for registration in snapshot
            ]

    def build_document(self, registry: RegistrySource) -> dict[str, Any]:
        """Build the complete schema document.

        Returns:
            Document with ``$schema``, ``title`` and name-sorted ``oneOf``.

        Raises:
            ContractViolationError: If a node lacks a string ``name``.
        """
        return wrap_document(sort_nodes(self.build_nodes(registry)), title=self.config.title)

    def render(self, registry: RegistrySource) -> bytes:
        """Render the document as pretty-printed UTF-8 JSON.

        Raises:
            ContractViolationError: If a node lacks a string ``name``.
            ExportError: If the document cannot be serialized.
        """
        return render_document(self.build_document(registry), indent=self.config.indent)

    def export(self, registry: RegistrySource, sink: IO[bytes] | IO[str]) -> int:
        """Export the registry to a binary or text sink.

        The sink is written once and flushed; it is not closed.

        Args:
            registry: Registry to export.
            sink: Output stream, e.g. ``sys.stdout.buffer`` or an open file.

        Returns:
            Number of exported types.

        Raises:
            ContractViolationError: If a node lacks a string ``name``.
            ExportError: If serializing or writing fails.
        """
        document = self.build_document(registry)
        payload = render_document(document, indent=self.config.indent)

        try:
            if isinstance(sink, io.TextIOBase):
                sink.write(payload.decode("utf-8"))
            else:
                sink.write(payload)  # type: ignore[arg-type]
            sink.flush()
        except (OSError, ValueError) as e:
            raise ExportError(
                "Cannot write schema document",
                internal_details=f"{type(e).__name__}: {e}",
            ) from e

        return self._report(document)

    def export_to_path(self, registry: RegistrySource, path: Path | str) -> int:
        """Export the registry to a file, creating parent directories.

        The file is only touched once the document has been rendered.

        Returns:
            Number of exported types.

        Raises:
            ContractViolationError: If a node lacks a string ``name``.
            ExportError: If serializing or writing fails.
        """
        document = self.build_document(registry)
        payload = render_document(document, indent=self.config.indent)
        output_path = Path(path)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(payload)
        except OSError as e:
            raise ExportError(
                f"Cannot write schema document to {output_path.name}",
                internal_details=f"{type(e).__name__}: {e}",
            ) from e

        return self._report(document, path=str(output_path))

    def _report(self, document: dict[str, Any], **context: Any) -> int:
        count = len(document["oneOf"])
        self._log.info("schema_exported", type_count=count, **context)
        return count


def sort_nodes(nodes: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Sort schema nodes ascending by their ``name``.

    Raises:
        ContractViolationError: If a node lacks a string ``name``.
    """
    return sorted(nodes, key=_node_name)


def wrap_document(nodes: list[dict[str, Any]], *, title: str) -> dict[str, Any]:
    """Wrap sorted nodes into the top-level schema document."""
    return {
        "$schema": JSON_SCHEMA_DIALECT,
        "title": title,
        "oneOf": nodes,
    }


def render_document(document: dict[str, Any], *, indent: int = 2) -> bytes:
    """Serialize a document as pretty-printed UTF-8 JSON with a final newline.

    Raises:
        ExportError: If the document holds values JSON cannot represent.
    """
    try:
        text = json.dumps(document, indent=indent, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise ExportError(
            "Cannot serialize schema document",
            internal_details=str(e),
        ) from e
    return (text + "\n").encode("utf-8")


def export_types(
    registry: RegistrySource,
    sink: IO[bytes] | IO[str],
    config: ExportConfig | None = None,
) -> int:
    """Export a registry to a sink. See SchemaExporter.export."""
    return SchemaExporter(config).export(registry, sink)


def export_types_to_path(
    registry: RegistrySource,
    path: Path | str,
    config: ExportConfig | None = None,
) -> int:
    """Export a registry to a file. See SchemaExporter.export_to_path."""
    return SchemaExporter(config).export_to_path(registry, path)


def _node_name(node: dict[str, Any]) -> str:
    name = node.get("name")
    if not isinstance(name, str):
        raise ContractViolationError(
            "Schema node has no type name",
            internal_details=f"node name is {name!r}, keys: {sorted(node)}",
        )
    return name
