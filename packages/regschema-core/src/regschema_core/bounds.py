"""Numeric bounds metadata for field schemas.

This module provides:
- Bounds: Declared minimum/maximum of one field, usable as ``Annotated`` metadata
- FieldBounds: Bounds addressed by field position and optional variant index
- BoundsProvider: Protocol for looking bounds up during schema building
- NullBoundsProvider: Provider used when bounds support is disabled
- StaticBoundsProvider: Provider backed by a side table
- apply_bounds: Inject bounds into a field schema

Bounds are annotations only. A missing entry is never an error.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import annotated_types
from pydantic import BaseModel, ConfigDict, Field, model_validator

BoundsTableKey = tuple[str, int, int | None]
"""Side table key: (type path, field index, variant index)."""


def _check_order(minimum: float | None, maximum: float | None) -> None:
    if minimum is not None and maximum is not None and minimum > maximum:
        msg = f"minimum ({minimum}) must be <= maximum ({maximum})"
        raise ValueError(msg)


@dataclass(frozen=True)
class Bounds(annotated_types.BaseMetadata):
    """Declared numeric range of a field.

    Either end may be omitted independently. Instances can annotate fields
    of dataclasses and pydantic models; pydantic leaves unknown
    ``BaseMetadata`` alone, so validation of the field is unchanged.

    Attributes:
        minimum: Inclusive lower bound, or None.
        maximum: Inclusive upper bound, or None.

    Raises:
        ValueError: If an end is not a finite number, or minimum > maximum.

    Example:
        >>> Bounds(minimum=0.0, maximum=1.0).maximum
        1.0
    """

    minimum: float | None = None
    maximum: float | None = None

    def __post_init__(self) -> None:
        for name in ("minimum", "maximum"):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                msg = f"{name} must be a number, got {type(value).__name__}"
                raise ValueError(msg)
            if not math.isfinite(value):
                msg = f"{name} must be finite, got {value}"
                raise ValueError(msg)
            object.__setattr__(self, name, float(value))
        _check_order(self.minimum, self.maximum)

    @property
    def is_empty(self) -> bool:
        """Whether neither end is set."""
        return self.minimum is None and self.maximum is None


class FieldBounds(BaseModel):
    """Bounds for one field position, optionally inside an enum variant.

    Attributes:
        field_index: Position of the field in its container.
        variant_index: Index of the enclosing enum variant, or None for
            fields of structs, tuples and tuple structs.
        minimum: Inclusive lower bound, or None.
        maximum: Inclusive upper bound, or None.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    field_index: int = Field(..., ge=0, description="Field position")
    variant_index: int | None = Field(default=None, ge=0, description="Enum variant index")
    minimum: float | None = Field(
        default=None,
        allow_inf_nan=False,
        description="Inclusive lower bound",
    )
    maximum: float | None = Field(
        default=None,
        allow_inf_nan=False,
        description="Inclusive upper bound",
    )

    @model_validator(mode="after")
    def minimum_not_above_maximum(self) -> FieldBounds:
        """Validate that minimum <= maximum when both are set."""
        _check_order(self.minimum, self.maximum)
        return self

    def bounds(self) -> Bounds:
        """Return the range without its address."""
        return Bounds(minimum=self.minimum, maximum=self.maximum)


@runtime_checkable
class BoundsProvider(Protocol):
    """Protocol for bounds lookup during schema building.

    Example:
        >>> provider: BoundsProvider = StaticBoundsProvider({
        ...     ("game::Player", 1, None): Bounds(minimum=0.0, maximum=1.0),
        ... })
        >>> provider.bounds_for("game::Player", 1, None).minimum
        0.0
    """

    def bounds_for(
        self,
        type_path: str,
        field_index: int,
        variant_index: int | None = None,
    ) -> Bounds | None:
        """Look up the bounds of one field.

        Args:
            type_path: Type path of the type owning the field.
            field_index: Position of the field.
            variant_index: Enum variant index, or None outside enums.

        Returns:
            Declared bounds, or None when nothing is declared.
        """
        ...


class NullBoundsProvider:
    """Provider that never reports bounds."""

    def bounds_for(
        self,
        type_path: str,
        field_index: int,
        variant_index: int | None = None,
    ) -> Bounds | None:
        return None


class StaticBoundsProvider:
    """Provider backed by a side table keyed by (type path, field, variant).

    Attributes:
        table: Read-only mapping of keys to bounds.
    """

    def __init__(self, table: Mapping[BoundsTableKey, Bounds] | None = None) -> None:
        self.table: dict[BoundsTableKey, Bounds] = dict(table or {})

    @classmethod
    def from_field_bounds(
        cls,
        entries: Mapping[str, Iterable[FieldBounds]],
    ) -> StaticBoundsProvider:
        """Build a provider from per-type field bounds.

        Args:
            entries: Mapping of type path to the bounds declared on it.

        Returns:
            Provider serving every declared entry.
        """
        table: dict[BoundsTableKey, Bounds] = {}
        for type_path, field_bounds in entries.items():
            for entry in field_bounds:
                table[(type_path, entry.field_index, entry.variant_index)] = entry.bounds()
        return cls(table)

    def bounds_for(
        self,
        type_path: str,
        field_index: int,
        variant_index: int | None = None,
    ) -> Bounds | None:
        return self.table.get((type_path, field_index, variant_index))


def apply_bounds(schema: Mapping[str, Any], bounds: Bounds | None) -> dict[str, Any]:
    """Return a copy of ``schema`` with ``minimum``/``maximum`` injected.

    Each key is added only when the corresponding end is set.

    Args:
        schema: Field schema, e.g. ``{"type": "f32"}``.
        bounds: Declared bounds, or None.

    Returns:
        New schema dictionary.

    Example:
        >>> apply_bounds({"type": "f32"}, Bounds(maximum=1.0))
        {'type': 'f32', 'maximum': 1.0}
    """
    result = dict(schema)
    if bounds is None:
        return result
    if bounds.minimum is not None:
        result["minimum"] = bounds.minimum
    if bounds.maximum is not None:
        result["maximum"] = bounds.maximum
    return result
