"""Schema node builder.

Maps one type descriptor onto one JSON Schema node. The mapping is pure and
deterministic: keys are inserted in a fixed order and nested types are only
referenced by their type path string, so equal input always serializes to
equal bytes.

Node shapes by descriptor kind:

- struct: object with ``properties``, ``additionalProperties: false`` and
  ``required`` listing the non-optional fields
- enum with unit variants only: string ``enum`` of the variant names
- enum with payload variants: object with one ``oneOf`` entry per variant
- tuple struct / tuple: array with ``prefixItems`` and ``items: false``
- list / array: array with ``items``
- map: object with ``additionalProperties`` holding the value type
- value: ``{"type": <type path>}``

The ``type`` keyword carries raw type paths (``"f32"``, ``"game::Player"``)
rather than JSON Schema primitive names. Consumers resolve them against the
``name`` of sibling nodes.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from regschema_core.bounds import BoundsProvider, NullBoundsProvider, apply_bounds
from regschema_core.config import StructVariantRequired
from regschema_core.descriptors import (
    ArrayDescriptor,
    EnumDescriptor,
    FieldDescriptor,
    ListDescriptor,
    MapDescriptor,
    StructDescriptor,
    StructVariant,
    TupleDescriptor,
    TupleStructDescriptor,
    TupleVariant,
    TypeDescriptor,
    UnitVariant,
    ValueDescriptor,
)
from regschema_core.observability import get_logger

logger = get_logger(__name__)

_NO_BOUNDS = NullBoundsProvider()


def build_schema_node(
    descriptor: TypeDescriptor,
    *,
    is_component: bool = False,
    is_resource: bool = False,
    bounds: BoundsProvider | None = None,
    struct_variant_required: StructVariantRequired = StructVariantRequired.NON_OPTIONAL,
) -> dict[str, Any]:
    """Build the JSON Schema node of one registered type.

    Args:
        descriptor: Shape of the type.
        is_component: Value of the node's ``isComponent`` key.
        is_resource: Value of the node's ``isResource`` key.
        bounds: Bounds lookup for field schemas. None disables bounds.
        struct_variant_required: Rule for ``required`` in struct variants.

    Returns:
        Schema node with ``name`` set to the descriptor's type path.

    Example:
        >>> node = build_schema_node(
        ...     ValueDescriptor(type_path="f32"), is_component=False, is_resource=False
        ... )
        >>> node
        {'type': 'f32', 'name': 'f32', 'isComponent': False, 'isResource': False}
    """
    builder = _NodeBuilder(
        descriptor.type_path,
        bounds if bounds is not None else _NO_BOUNDS,
        struct_variant_required,
    )
    node = builder.build(descriptor)
    node["isComponent"] = is_component
    node["isResource"] = is_resource

    logger.debug("schema_node_built", type_path=descriptor.type_path, kind=descriptor.kind)
    return node


class _NodeBuilder:
    """Per-type state shared by the shape handlers."""

    def __init__(
        self,
        type_path: str,
        bounds: BoundsProvider,
        struct_variant_required: StructVariantRequired,
    ) -> None:
        self.type_path = type_path
        self.bounds = bounds
        self.struct_variant_required = struct_variant_required

    def build(self, descriptor: TypeDescriptor) -> dict[str, Any]:
        if isinstance(descriptor, StructDescriptor):
            return self._struct(descriptor)
        if isinstance(descriptor, EnumDescriptor):
            return self._enum(descriptor)
        if isinstance(descriptor, (TupleStructDescriptor, TupleDescriptor)):
            return {
                "type": "array",
                "name": self.type_path,
                "prefixItems": self._prefix_items(descriptor.fields, None),
                "items": False,
            }
        if isinstance(descriptor, (ListDescriptor, ArrayDescriptor)):
            return {
                "type": "array",
                "name": self.type_path,
                "items": {"type": descriptor.element_type_path},
            }
        if isinstance(descriptor, MapDescriptor):
            return {
                "type": "object",
                "name": self.type_path,
                "additionalProperties": {"type": descriptor.value_type_path},
            }
        if isinstance(descriptor, ValueDescriptor):
            return {"type": descriptor.type_path, "name": self.type_path}

        msg = f"unsupported descriptor kind: {type(descriptor).__name__}"
        raise TypeError(msg)

    def _struct(self, descriptor: StructDescriptor) -> dict[str, Any]:
        return {
            "type": "object",
            "name": self.type_path,
            "properties": self._properties(descriptor.fields, None),
            "additionalProperties": False,
            "required": [f.name for f in descriptor.fields if not f.is_optional],
        }

    def _enum(self, descriptor: EnumDescriptor) -> dict[str, Any]:
        if descriptor.is_unit_only:
            return {
                "type": "string",
                "name": self.type_path,
                "enum": [variant.name for variant in descriptor.variants],
            }

        return {
            "type": "object",
            "name": self.type_path,
            "oneOf": [
                self._variant(variant, variant_index)
                for variant_index, variant in enumerate(descriptor.variants)
            ],
        }

    def _variant(
        self,
        variant: UnitVariant | TupleVariant | StructVariant,
        variant_index: int,
    ) -> dict[str, Any]:
        if isinstance(variant, UnitVariant):
            return {"const": variant.name}
        if isinstance(variant, TupleVariant):
            return {
                "type": "array",
                "prefixItems": self._prefix_items(variant.fields, variant_index),
                "items": False,
            }

        if self.struct_variant_required is StructVariantRequired.OPTIONAL:
            required = [f.name for f in variant.fields if f.is_optional]
        else:
            required = [f.name for f in variant.fields if not f.is_optional]
        return {
            "type": "object",
            "properties": self._properties(variant.fields, variant_index),
            "additionalProperties": False,
            "required": required,
        }

    def _field_schema(self, field: FieldDescriptor, variant_index: int | None) -> dict[str, Any]:
        found = self.bounds.bounds_for(self.type_path, field.position, variant_index)
        return apply_bounds({"type": field.type_path}, found)

    def _properties(
        self,
        fields: Sequence[FieldDescriptor],
        variant_index: int | None,
    ) -> dict[str, Any]:
        # Named containers validate that every field has a name.
        return {str(f.name): self._field_schema(f, variant_index) for f in fields}

    def _prefix_items(
        self,
        fields: Sequence[FieldDescriptor],
        variant_index: int | None,
    ) -> list[dict[str, Any]]:
        ordered = sorted(fields, key=lambda f: f.position)
        return [self._field_schema(f, variant_index) for f in ordered]
