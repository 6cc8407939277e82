"""Unit tests for regschema_core.export."""

from __future__ import annotations

import io
import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import pytest
import structlog
from structlog.testing import capture_logs

from regschema_core.capabilities import StaticCapabilityProbe
from regschema_core.config import JSON_SCHEMA_DIALECT, ExportConfig, StructVariantRequired
from regschema_core.descriptors import ValueDescriptor
from regschema_core.errors import ContractViolationError, ExportError
from regschema_core.export import (
    SchemaExporter,
    export_types,
    export_types_to_path,
    render_document,
    sort_nodes,
)
from regschema_core.registry import RegistrySnapshot, TypeRegistration, TypeRegistry


class FailingSink(io.RawIOBase):
    """Binary sink whose writes always fail."""

    def writable(self) -> bool:
        return True

    def write(self, data: object) -> int:
        raise BrokenPipeError("reader went away")


class ListRegistry:
    """Minimal registry source over a list of registrations."""

    def __init__(self, registrations: list[TypeRegistration]) -> None:
        self.registrations = registrations

    @contextmanager
    def snapshot(self) -> Iterator[RegistrySnapshot]:
        yield RegistrySnapshot(self.registrations)


class TestBuildDocument:
    """Tests for document assembly."""

    def test_document_wrapper(self, game_registry: TypeRegistry) -> None:
        """The document carries dialect, title and oneOf."""
        document = SchemaExporter(ExportConfig()).build_document(game_registry)

        assert list(document) == ["$schema", "title", "oneOf"]
        assert document["$schema"] == JSON_SCHEMA_DIALECT
        assert document["title"] == "reflected type registry schema"
        assert len(document["oneOf"]) == 5

    @pytest.mark.requirement("sorted-nodes")
    def test_nodes_sorted_by_name(self, game_registry: TypeRegistry) -> None:
        """Nodes are sorted by name, not registration order."""
        document = SchemaExporter(ExportConfig()).build_document(game_registry)
        names = [node["name"] for node in document["oneOf"]]

        assert names == ["Direction", "Player", "Shape", "f32", "string"]
        assert names == sorted(names)

    def test_custom_title(self, game_registry: TypeRegistry) -> None:
        """The title comes from config."""
        document = SchemaExporter(ExportConfig(title="game schema")).build_document(game_registry)
        assert document["title"] == "game schema"

    def test_capabilities_from_registry(self, game_registry: TypeRegistry) -> None:
        """Registered capabilities become node flags."""
        nodes = {n["name"]: n for n in SchemaExporter(ExportConfig()).build_document(game_registry)["oneOf"]}

        assert nodes["Player"]["isComponent"] is True
        assert nodes["Shape"]["isResource"] is True
        assert nodes["f32"]["isComponent"] is False

    def test_capability_probe_override(self, game_registry: TypeRegistry) -> None:
        """An explicit probe replaces registry capabilities."""
        exporter = SchemaExporter(ExportConfig(), capabilities=StaticCapabilityProbe(resources=["f32"]))
        nodes = {n["name"]: n for n in exporter.build_document(game_registry)["oneOf"]}

        assert nodes["Player"]["isComponent"] is False
        assert nodes["f32"]["isResource"] is True

    def test_bounds_from_registry(self, game_registry: TypeRegistry) -> None:
        """Registered bounds reach field schemas."""
        nodes = {n["name"]: n for n in SchemaExporter(ExportConfig()).build_document(game_registry)["oneOf"]}

        assert nodes["Player"]["properties"]["health"] == {"type": "f32", "minimum": 0.0, "maximum": 1.0}
        assert nodes["Shape"]["oneOf"][1]["prefixItems"] == [{"type": "f32", "minimum": 0.0}]

    def test_bounds_disabled(self, game_registry: TypeRegistry) -> None:
        """include_bounds=False drops every minimum/maximum."""
        config = ExportConfig(include_bounds=False)
        nodes = {n["name"]: n for n in SchemaExporter(config).build_document(game_registry)["oneOf"]}

        assert nodes["Player"]["properties"]["health"] == {"type": "f32"}

    def test_struct_variant_rule_from_config(self, game_registry: TypeRegistry) -> None:
        """The struct variant rule is passed to the builder."""
        config = ExportConfig(struct_variant_required=StructVariantRequired.OPTIONAL)
        nodes = {n["name"]: n for n in SchemaExporter(config).build_document(game_registry)["oneOf"]}

        assert nodes["Shape"]["oneOf"][2]["required"] == ["label"]

    def test_empty_registry(self) -> None:
        """An empty registry exports an empty oneOf."""
        document = SchemaExporter(ExportConfig()).build_document(TypeRegistry())
        assert document["oneOf"] == []

    def test_accepts_any_registry_source(self) -> None:
        """Anything with snapshot() can be exported."""
        source = ListRegistry([TypeRegistration(descriptor=ValueDescriptor(type_path="u8"))])
        document = SchemaExporter(ExportConfig()).build_document(source)
        assert document["oneOf"][0]["name"] == "u8"


class TestSortNodes:
    """Tests for sort_nodes."""

    def test_plain_string_order(self) -> None:
        """Sorting is ordinary string comparison."""
        nodes = [{"name": "b"}, {"name": "B"}, {"name": "a"}]
        assert [n["name"] for n in sort_nodes(nodes)] == ["B", "a", "b"]

    def test_missing_name(self) -> None:
        """Nodes without a name violate the contract."""
        with pytest.raises(ContractViolationError, match="no type name"):
            sort_nodes([{"name": "a"}, {"type": "object"}])

    def test_non_string_name(self) -> None:
        """Names must be strings."""
        with pytest.raises(ContractViolationError):
            sort_nodes([{"name": 1}, {"name": "a"}])


class TestExport:
    """Tests for writing to sinks."""

    def test_binary_sink(self, game_registry: TypeRegistry) -> None:
        """Binary sinks receive UTF-8 JSON and the count is returned."""
        sink = io.BytesIO()
        count = export_types(game_registry, sink)

        assert count == 5
        document = json.loads(sink.getvalue().decode("utf-8"))
        assert [n["name"] for n in document["oneOf"]][0] == "Direction"

    def test_text_sink(self, game_registry: TypeRegistry) -> None:
        """Text sinks receive the decoded string."""
        sink = io.StringIO()
        export_types(game_registry, sink)

        assert json.loads(sink.getvalue())["title"] == "reflected type registry schema"

    @pytest.mark.requirement("deterministic-export")
    def test_byte_identical_exports(self, game_registry: TypeRegistry) -> None:
        """Exporting twice yields the same bytes."""
        first, second = io.BytesIO(), io.BytesIO()
        export_types(game_registry, first)
        export_types(game_registry, second)

        assert first.getvalue() == second.getvalue()

    def test_pretty_printed(self, game_registry: TypeRegistry) -> None:
        """Output is indented per config and ends with a newline."""
        sink = io.BytesIO()
        export_types(game_registry, sink, ExportConfig(indent=4))

        text = sink.getvalue().decode("utf-8")
        assert text.startswith('{\n    "$schema"')
        assert text.endswith("}\n")

    def test_non_ascii_kept(self) -> None:
        """Type paths are written as UTF-8, not escaped."""
        registry = TypeRegistry()
        registry.register_descriptor(ValueDescriptor(type_path="Größe"))
        sink = io.BytesIO()
        export_types(registry, sink)

        assert "Größe".encode() in sink.getvalue()

    def test_failing_sink(self, game_registry: TypeRegistry) -> None:
        """Write failures raise ExportError with the cause chained."""
        with pytest.raises(ExportError, match="Cannot write schema document") as exc_info:
            export_types(game_registry, FailingSink())
        assert isinstance(exc_info.value.__cause__, BrokenPipeError)

    def test_closed_sink(self, game_registry: TypeRegistry) -> None:
        """Closed sinks raise ExportError."""
        sink = io.BytesIO()
        sink.close()
        with pytest.raises(ExportError):
            export_types(game_registry, sink)

    def test_logs_count(self, game_registry: TypeRegistry) -> None:
        """The exported type count is logged."""
        with capture_logs() as logs:
            export_types(game_registry, io.BytesIO())

        exported = [entry for entry in logs if entry["event"] == "schema_exported"]
        assert exported[0]["type_count"] == 5
        assert exported[0]["log_level"] == "info"

    def test_stdout_holds_only_the_document(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Without logging configured, log events never reach stdout."""
        structlog.reset_defaults()
        registry = TypeRegistry()
        registry.register(list[int], component=True)

        export_types(registry, sys.stdout)

        captured = capsys.readouterr()
        document = json.loads(captured.out)
        assert [node["name"] for node in document["oneOf"]] == ["int", "list[int]"]
        assert "schema_exported" not in captured.out
        assert "type_registered" not in captured.out


class TestExportToPath:
    """Tests for export_types_to_path."""

    def test_creates_parents(self, game_registry: TypeRegistry, tmp_path: Path) -> None:
        """Parent directories are created."""
        path = tmp_path / "schemas" / "game.schema.json"
        count = export_types_to_path(game_registry, path)

        assert count == 5
        assert json.loads(path.read_text(encoding="utf-8"))["oneOf"][0]["name"] == "Direction"

    def test_matches_stream_export(self, game_registry: TypeRegistry, tmp_path: Path) -> None:
        """File and stream exports hold the same bytes."""
        path = tmp_path / "game.schema.json"
        sink = io.BytesIO()
        export_types_to_path(game_registry, path)
        export_types(game_registry, sink)

        assert path.read_bytes() == sink.getvalue()

    def test_unwritable_path(self, game_registry: TypeRegistry, tmp_path: Path) -> None:
        """A directory in place of the file raises ExportError."""
        path = tmp_path / "schema.json"
        path.mkdir()

        with pytest.raises(ExportError):
            export_types_to_path(game_registry, path)


class TestRenderDocument:
    """Tests for render_document."""

    def test_unserializable_value(self) -> None:
        """Values JSON cannot hold raise ExportError."""
        with pytest.raises(ExportError, match="Cannot serialize"):
            render_document({"oneOf": [{"name": "x", "minimum": float("nan")}]})
