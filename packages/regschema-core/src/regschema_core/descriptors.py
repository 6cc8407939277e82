"""Type descriptor models for regschema.

This module defines the closed set of type shapes the exporter understands.
Every reflected type is mapped onto exactly one descriptor kind:

- StructDescriptor: named fields (record)
- EnumDescriptor: ordered variants (unit, tuple or struct payloads)
- TupleStructDescriptor: unnamed, position-addressed fields of a nominal type
- ListDescriptor: variable-length homogeneous sequence
- ArrayDescriptor: fixed-length homogeneous sequence
- MapDescriptor: keyed map with homogeneous values
- TupleDescriptor: unnamed fields of fixed arity
- ValueDescriptor: opaque leaf value

Descriptors are frozen and validated on construction, so a descriptor that
exists is well-formed.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    TypeAdapter,
    model_validator,
)

TYPE_PATH_DESCRIPTION = "Fully-qualified type path"
"""Description for type path fields across all descriptor models."""


class FieldDescriptor(BaseModel):
    """One field of a struct, tuple, tuple struct or enum variant.

    Attributes:
        name: Field name. Set for named fields, None for tuple positions.
        type_path: Type path of the field's type.
        position: Zero-based index of the field in its container. Bounds
            metadata is looked up by this index.
        is_optional: True when the field's type is an optional wrapper.
            Optional fields are left out of ``required``.

    Example:
        >>> field = FieldDescriptor(name="health", type_path="f32", position=1)
        >>> field.is_optional
        False
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str | None = Field(default=None, min_length=1, description="Field name")
    type_path: str = Field(..., min_length=1, description=TYPE_PATH_DESCRIPTION)
    position: int = Field(..., ge=0, description="Zero-based field index")
    is_optional: bool = Field(default=False, description="Field holds an optional value")


def named_fields(
    fields: Iterable[tuple[str, str]],
    *,
    optional: Iterable[str] = (),
) -> tuple[FieldDescriptor, ...]:
    """Build named field descriptors from ``(name, type_path)`` pairs.

    Args:
        fields: Field names and type paths, in declaration order.
        optional: Names of the fields that hold optional values.

    Returns:
        Field descriptors with positions assigned in order.

    Example:
        >>> fields = named_fields([("name", "string"), ("nick", "Option<string>")],
        ...                       optional=["nick"])
        >>> [f.is_optional for f in fields]
        [False, True]
    """
    optional_names = frozenset(optional)
    return tuple(
        FieldDescriptor(
            name=name,
            type_path=type_path,
            position=position,
            is_optional=name in optional_names,
        )
        for position, (name, type_path) in enumerate(fields)
    )


def positional_fields(type_paths: Iterable[str]) -> tuple[FieldDescriptor, ...]:
    """Build unnamed field descriptors for tuple positions."""
    return tuple(
        FieldDescriptor(type_path=type_path, position=position)
        for position, type_path in enumerate(type_paths)
    )


def _check_fields(fields: Sequence[FieldDescriptor], *, named: bool) -> None:
    """Validate positions and naming of a field sequence.

    Raises:
        ValueError: If positions are not 0..n-1 in order, if named fields
            lack names or repeat one, or if positional fields carry names.
    """
    seen: set[str] = set()
    for index, field in enumerate(fields):
        if field.position != index:
            msg = f"field at index {index} has position {field.position}"
            raise ValueError(msg)
        if named:
            if field.name is None:
                msg = f"field at index {index} must be named"
                raise ValueError(msg)
            if field.name in seen:
                msg = f"duplicate field name '{field.name}'"
                raise ValueError(msg)
            seen.add(field.name)
        elif field.name is not None:
            msg = f"positional field at index {index} must not be named"
            raise ValueError(msg)


# Enum variants


class UnitVariant(BaseModel):
    """Enum variant without payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["unit"] = "unit"
    name: str = Field(..., min_length=1, description="Variant name")


class TupleVariant(BaseModel):
    """Enum variant with positional payload fields."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["tuple"] = "tuple"
    name: str = Field(..., min_length=1, description="Variant name")
    fields: tuple[FieldDescriptor, ...] = Field(default=(), description="Payload fields")

    @model_validator(mode="after")
    def validate_fields(self) -> TupleVariant:
        """Validate payload field positions."""
        _check_fields(self.fields, named=False)
        return self


class StructVariant(BaseModel):
    """Enum variant with named payload fields."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["struct"] = "struct"
    name: str = Field(..., min_length=1, description="Variant name")
    fields: tuple[FieldDescriptor, ...] = Field(default=(), description="Payload fields")

    @model_validator(mode="after")
    def validate_fields(self) -> StructVariant:
        """Validate payload field names and positions."""
        _check_fields(self.fields, named=True)
        return self


Variant = Annotated[
    UnitVariant | TupleVariant | StructVariant,
    Discriminator("kind"),
]
"""Enum variant with discriminated union on ``kind``."""


# Type descriptors


class StructDescriptor(BaseModel):
    """Record type with named fields.

    Example:
        >>> player = StructDescriptor(
        ...     type_path="game::Player",
        ...     fields=named_fields([("name", "string"), ("health", "f32")]),
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["struct"] = "struct"
    type_path: str = Field(..., min_length=1, description=TYPE_PATH_DESCRIPTION)
    fields: tuple[FieldDescriptor, ...] = Field(default=(), description="Named fields")

    @model_validator(mode="after")
    def validate_fields(self) -> StructDescriptor:
        """Validate field names and positions."""
        _check_fields(self.fields, named=True)
        return self


class EnumDescriptor(BaseModel):
    """Discriminated union type with ordered variants.

    Example:
        >>> direction = EnumDescriptor(
        ...     type_path="game::Direction",
        ...     variants=[UnitVariant(name="North"), UnitVariant(name="South")],
        ... )
        >>> direction.is_unit_only
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["enum"] = "enum"
    type_path: str = Field(..., min_length=1, description=TYPE_PATH_DESCRIPTION)
    variants: tuple[Variant, ...] = Field(default=(), description="Ordered variants")

    @model_validator(mode="after")
    def validate_variants(self) -> EnumDescriptor:
        """Reject duplicate variant names."""
        names = [variant.name for variant in self.variants]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            msg = f"duplicate variant names: {', '.join(duplicates)}"
            raise ValueError(msg)
        return self

    @property
    def is_unit_only(self) -> bool:
        """Whether every variant is a unit variant."""
        return all(isinstance(variant, UnitVariant) for variant in self.variants)


class TupleStructDescriptor(BaseModel):
    """Nominal type with unnamed, position-addressed fields."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["tuple_struct"] = "tuple_struct"
    type_path: str = Field(..., min_length=1, description=TYPE_PATH_DESCRIPTION)
    fields: tuple[FieldDescriptor, ...] = Field(default=(), description="Positional fields")

    @model_validator(mode="after")
    def validate_fields(self) -> TupleStructDescriptor:
        """Validate field positions."""
        _check_fields(self.fields, named=False)
        return self


class TupleDescriptor(BaseModel):
    """Anonymous tuple of fixed arity."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["tuple"] = "tuple"
    type_path: str = Field(..., min_length=1, description=TYPE_PATH_DESCRIPTION)
    fields: tuple[FieldDescriptor, ...] = Field(default=(), description="Positional fields")

    @model_validator(mode="after")
    def validate_fields(self) -> TupleDescriptor:
        """Validate field positions."""
        _check_fields(self.fields, named=False)
        return self


class ListDescriptor(BaseModel):
    """Variable-length homogeneous sequence."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["list"] = "list"
    type_path: str = Field(..., min_length=1, description=TYPE_PATH_DESCRIPTION)
    element_type_path: str = Field(..., min_length=1, description="Element type path")


class ArrayDescriptor(BaseModel):
    """Fixed-length homogeneous sequence.

    The length is kept for callers that inspect descriptors; it is not part
    of the exported schema.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["array"] = "array"
    type_path: str = Field(..., min_length=1, description=TYPE_PATH_DESCRIPTION)
    element_type_path: str = Field(..., min_length=1, description="Element type path")
    length: int | None = Field(default=None, ge=0, description="Fixed element count")


class MapDescriptor(BaseModel):
    """Keyed map with homogeneous values. Keys are not constrained."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["map"] = "map"
    type_path: str = Field(..., min_length=1, description=TYPE_PATH_DESCRIPTION)
    value_type_path: str = Field(..., min_length=1, description="Value type path")
    key_type_path: str | None = Field(default=None, min_length=1, description="Key type path")


class ValueDescriptor(BaseModel):
    """Opaque leaf value with no further structure."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["value"] = "value"
    type_path: str = Field(..., min_length=1, description=TYPE_PATH_DESCRIPTION)


TypeDescriptor = Annotated[
    StructDescriptor
    | EnumDescriptor
    | TupleStructDescriptor
    | ListDescriptor
    | ArrayDescriptor
    | MapDescriptor
    | TupleDescriptor
    | ValueDescriptor,
    Discriminator("kind"),
]
"""Type descriptor with discriminated union on ``kind``."""

_DESCRIPTOR_ADAPTER: TypeAdapter[Any] = TypeAdapter(TypeDescriptor)


def parse_descriptor(data: Any) -> TypeDescriptor:
    """Validate a mapping (e.g. loaded from YAML) into a type descriptor.

    Args:
        data: Mapping with a ``kind`` key selecting the descriptor model.

    Returns:
        The matching descriptor instance.

    Raises:
        pydantic.ValidationError: If the mapping describes no valid descriptor.

    Example:
        >>> parse_descriptor({"kind": "list", "type_path": "Vec<u8>",
        ...                   "element_type_path": "u8"}).kind
        'list'
    """
    return _DESCRIPTOR_ADAPTER.validate_python(data)  # type: ignore[no-any-return]
