"""Shared test fixtures for regschema-core tests.

Provides structlog configuration for capture and sample descriptors and
registries modelled on a small game.
"""

from __future__ import annotations

import pytest
import structlog

from regschema_core.bounds import FieldBounds
from regschema_core.descriptors import (
    EnumDescriptor,
    FieldDescriptor,
    StructDescriptor,
    StructVariant,
    TupleVariant,
    UnitVariant,
    ValueDescriptor,
    named_fields,
    positional_fields,
)
from regschema_core.registry import TypeRegistry


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Use plain console rendering with no logger caching in tests."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture
def player_descriptor() -> StructDescriptor:
    """Player { name: string, health: f32 }."""
    return StructDescriptor(
        type_path="Player",
        fields=named_fields([("name", "string"), ("health", "f32")]),
    )


@pytest.fixture
def direction_descriptor() -> EnumDescriptor:
    """Direction { North, South, East, West }, unit variants only."""
    return EnumDescriptor(
        type_path="Direction",
        variants=[UnitVariant(name=name) for name in ("North", "South", "East", "West")],
    )


@pytest.fixture
def shape_descriptor() -> EnumDescriptor:
    """Shape { Empty, Circle(f32), Rect { width: f32, height: f32, label: Option } }."""
    return EnumDescriptor(
        type_path="Shape",
        variants=[
            UnitVariant(name="Empty"),
            TupleVariant(name="Circle", fields=positional_fields(["f32"])),
            StructVariant(
                name="Rect",
                fields=(
                    FieldDescriptor(name="width", type_path="f32", position=0),
                    FieldDescriptor(name="height", type_path="f32", position=1),
                    FieldDescriptor(
                        name="label",
                        type_path="typing.Optional[string]",
                        position=2,
                        is_optional=True,
                    ),
                ),
            ),
        ],
    )


@pytest.fixture
def game_registry(
    player_descriptor: StructDescriptor,
    direction_descriptor: EnumDescriptor,
    shape_descriptor: EnumDescriptor,
) -> TypeRegistry:
    """Registry with Player (component), Direction, Shape and two leaf values."""
    registry = TypeRegistry()
    registry.register_descriptor(
        player_descriptor,
        component=True,
        bounds=[FieldBounds(field_index=1, minimum=0.0, maximum=1.0)],
    )
    registry.register_descriptor(direction_descriptor)
    registry.register_descriptor(
        shape_descriptor,
        resource=True,
        bounds=[FieldBounds(field_index=0, variant_index=1, minimum=0.0)],
    )
    registry.register_descriptor(ValueDescriptor(type_path="string"))
    registry.register_descriptor(ValueDescriptor(type_path="f32"))
    return registry
