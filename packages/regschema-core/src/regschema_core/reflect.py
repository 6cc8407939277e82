"""Python type reflection into type descriptors.

This module is the boundary between Python's open-ended type system and the
closed descriptor set the exporter works with:

- dataclasses and pydantic models -> StructDescriptor
- NamedTuple classes -> TupleStructDescriptor
- Enum classes -> EnumDescriptor with unit variants
- Union/Literal aliases registered under an explicit type path -> EnumDescriptor
  (string literals become unit variants, record members become struct
  variants, NamedTuple members become tuple variants)
- list/set/frozenset/Sequence and ``tuple[X, ...]`` -> ListDescriptor
- ``tuple[A, B]`` -> TupleDescriptor
- dict/Mapping -> MapDescriptor
- any other class (str, float, datetime, ...) -> ValueDescriptor

Optional fields (``X | None`` / ``Optional[X]``) are flagged from the type
itself, and their type path is rendered with the ``typing.Optional[`` prefix.
Numeric bounds are read from ``Bounds`` or ``annotated_types.Ge``/``Le``/
``Interval`` metadata, which is also where pydantic's ``Field(ge=..., le=...)``
ends up.
"""

from __future__ import annotations

import collections
import collections.abc
import dataclasses
import enum
import types
import typing
from collections.abc import Iterable, Sequence
from typing import Annotated, Any, Literal, Union, get_args, get_origin

import annotated_types
from pydantic import BaseModel

from regschema_core.bounds import Bounds, FieldBounds
from regschema_core.descriptors import (
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
from regschema_core.errors import RegistrationError

OPTIONAL_TYPE_PATH_PREFIX = "typing.Optional["
"""Prefix of the rendered type path of every optional type."""

NONE_VARIANT_NAME = "None"
"""Unit variant name used for ``None`` members of tagged unions."""

_NONE_TYPE = type(None)

_SEQUENCE_ORIGINS = frozenset(
    {
        list,
        set,
        frozenset,
        collections.deque,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Set,
        collections.abc.MutableSet,
        collections.abc.Iterable,
        collections.abc.Collection,
    }
)

_MAPPING_ORIGINS = frozenset(
    {
        dict,
        collections.OrderedDict,
        collections.defaultdict,
        collections.abc.Mapping,
        collections.abc.MutableMapping,
    }
)


@dataclasses.dataclass(frozen=True)
class ReflectedType:
    """Result of reflecting one Python type.

    Attributes:
        descriptor: Shape of the type.
        bounds: Bounds declared on the type's fields.
        dependencies: Python types referenced by the type's fields or
            elements, to be registered alongside it.
    """

    descriptor: TypeDescriptor
    bounds: tuple[FieldBounds, ...] = ()
    dependencies: tuple[Any, ...] = ()


def type_path_of(tp: Any) -> str:
    """Render the type path of a Python type.

    Builtins render bare (``int``, ``list[str]``), other classes as
    ``module.QualName``, optionals as ``typing.Optional[...]``.

    Args:
        tp: Class, generic alias, or typing construct.

    Returns:
        Type path string.

    Raises:
        RegistrationError: If ``tp`` has no stable path (e.g. a TypeVar).

    Example:
        >>> type_path_of(dict[str, list[int]])
        'dict[str, list[int]]'
        >>> type_path_of(int | None)
        'typing.Optional[int]'
    """
    if tp is Any:
        return "typing.Any"
    if tp is None or tp is _NONE_TYPE:
        return "None"
    if tp is Ellipsis:
        return "..."

    origin = get_origin(tp)
    args = get_args(tp)

    if origin is Annotated:
        return type_path_of(args[0])
    if _is_union(origin):
        if _NONE_TYPE in args and len(args) > 1:
            return f"{OPTIONAL_TYPE_PATH_PREFIX}{type_path_of(_strip_none(args))}]"
        return f"typing.Union[{', '.join(type_path_of(a) for a in args)}]"
    if origin is Literal:
        return f"typing.Literal[{', '.join(repr(a) for a in args)}]"
    if origin is not None:
        base = _class_path(origin)
        if _is_empty_tuple(tp):
            return f"{base}[()]"
        if not args:
            return base
        return f"{base}[{', '.join(type_path_of(a) for a in args)}]"
    if isinstance(tp, type):
        return _class_path(tp)

    raise RegistrationError(
        "Type has no stable type path",
        internal_details=f"cannot render type path of {tp!r}",
    )


def is_optional_type(tp: Any) -> bool:
    """Whether ``tp`` is ``Optional[X]`` (or ``X | None``), Annotated or not."""
    if get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    args = get_args(tp)
    return _is_union(get_origin(tp)) and _NONE_TYPE in args and len(args) > 1


def reflect_type(tp: Any, *, type_path: str | None = None) -> ReflectedType:
    """Reflect a Python type into a descriptor.

    Args:
        tp: Python type to reflect.
        type_path: Type path to register the type under. Required for
            Union/Literal aliases, which have no name of their own.
            Defaults to ``type_path_of(tp)``.

    Returns:
        Descriptor, declared bounds and dependencies of the type.

    Raises:
        RegistrationError: If the type maps onto no descriptor kind.

    Example:
        >>> @dataclasses.dataclass
        ... class Player:
        ...     name: str
        ...     health: Annotated[float, Bounds(minimum=0.0, maximum=1.0)]
        >>> reflect_type(Player).descriptor.kind
        'struct'
    """
    if get_origin(tp) is Annotated:
        tp = get_args(tp)[0]

    origin = get_origin(tp)
    path = type_path or type_path_of(tp)

    if _is_union(origin) or origin is Literal:
        if type_path is None and is_optional_type(tp):
            raise RegistrationError(
                "Optional types are registered through their inner type",
                type_path=path,
            )
        if type_path is None:
            raise RegistrationError(
                "Union and Literal types need an explicit type path",
                type_path=path,
            )
        return _reflect_union(tp, path)
    if origin is not None:
        return _reflect_generic(tp, origin, path)
    if not isinstance(tp, type):
        raise RegistrationError(
            "Unsupported type",
            type_path=path,
            internal_details=f"{tp!r} is neither a class nor a generic alias",
        )
    if issubclass(tp, enum.Enum):
        return ReflectedType(
            descriptor=EnumDescriptor(
                type_path=path,
                variants=tuple(UnitVariant(name=member.name) for member in tp),
            )
        )
    if _is_record(tp):
        fields, bounds, dependencies = _record_fields(tp, variant_index=None)
        return ReflectedType(
            descriptor=StructDescriptor(type_path=path, fields=fields),
            bounds=bounds,
            dependencies=dependencies,
        )
    if _is_named_tuple(tp):
        fields, bounds, dependencies = _named_tuple_fields(tp, variant_index=None)
        return ReflectedType(
            descriptor=TupleStructDescriptor(type_path=path, fields=fields),
            bounds=bounds,
            dependencies=dependencies,
        )
    if tp is tuple:
        return ReflectedType(descriptor=ListDescriptor(type_path=path, element_type_path="typing.Any"))
    if tp in _SEQUENCE_ORIGINS or tp in _MAPPING_ORIGINS:
        return _reflect_generic(tp, tp, path)

    return ReflectedType(descriptor=ValueDescriptor(type_path=path))


def referenced_types(tp: Any) -> tuple[Any, ...]:
    """Types to register for a field or element annotated with ``tp``.

    Unwraps Annotated and Optional, and splits plain unions into their
    members. Literals, ``None`` and ``Any`` reference nothing.
    """
    if get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    if tp is Any or tp is None or tp is _NONE_TYPE:
        return ()

    origin = get_origin(tp)
    if origin is Literal:
        return ()
    if _is_union(origin):
        found: list[Any] = []
        for member in get_args(tp):
            found.extend(referenced_types(member))
        return tuple(found)
    return (tp,)


# Shape handlers


def _reflect_generic(tp: Any, origin: Any, path: str) -> ReflectedType:
    args = get_args(tp)

    if origin is tuple:
        if not args and not _is_empty_tuple(tp):
            return _list_of(path, Any)
        if len(args) == 2 and args[1] is Ellipsis:
            return _list_of(path, args[0])
        if args == ((),):
            args = ()
        fields = tuple(
            FieldDescriptor(
                type_path=type_path_of(arg),
                position=position,
                is_optional=is_optional_type(arg),
            )
            for position, arg in enumerate(args)
        )
        return ReflectedType(
            descriptor=TupleDescriptor(type_path=path, fields=fields),
            bounds=_positional_bounds(args, variant_index=None),
            dependencies=_collect(referenced_types(arg) for arg in args),
        )
    if origin in _SEQUENCE_ORIGINS:
        return _list_of(path, args[0] if args else Any)
    if origin in _MAPPING_ORIGINS:
        key, value = args if len(args) == 2 else (Any, Any)
        return ReflectedType(
            descriptor=MapDescriptor(
                type_path=path,
                value_type_path=type_path_of(value),
                key_type_path=type_path_of(key),
            ),
            dependencies=_collect([referenced_types(key), referenced_types(value)]),
        )

    raise RegistrationError(
        "Unsupported generic type",
        type_path=path,
        internal_details=f"no descriptor kind for origin {origin!r}",
    )


def _list_of(path: str, element: Any) -> ReflectedType:
    return ReflectedType(
        descriptor=ListDescriptor(type_path=path, element_type_path=type_path_of(element)),
        dependencies=referenced_types(element),
    )


def _reflect_union(tp: Any, path: str) -> ReflectedType:
    members = get_args(tp) if _is_union(get_origin(tp)) else (tp,)
    variants: list[UnitVariant | TupleVariant | StructVariant] = []
    bounds: list[FieldBounds] = []
    dependencies: list[Any] = []

    for member in members:
        if get_origin(member) is Annotated:
            member = get_args(member)[0]

        if member is _NONE_TYPE:
            variants.append(UnitVariant(name=NONE_VARIANT_NAME))
        elif get_origin(member) is Literal:
            for value in get_args(member):
                if not isinstance(value, str):
                    raise RegistrationError(
                        "Only string literals can become enum variants",
                        type_path=path,
                        internal_details=f"literal value {value!r}",
                    )
                variants.append(UnitVariant(name=value))
        elif isinstance(member, type) and _is_record(member):
            fields, member_bounds, member_deps = _record_fields(member, variant_index=len(variants))
            variants.append(StructVariant(name=member.__name__, fields=fields))
            bounds.extend(member_bounds)
            dependencies.extend(member_deps)
        elif isinstance(member, type) and _is_named_tuple(member):
            fields, member_bounds, member_deps = _named_tuple_fields(member, variant_index=len(variants))
            variants.append(TupleVariant(name=member.__name__, fields=fields))
            bounds.extend(member_bounds)
            dependencies.extend(member_deps)
        else:
            raise RegistrationError(
                "Union members must be None, string literals, records or named tuples",
                type_path=path,
                internal_details=f"unsupported union member {member!r}",
            )

    try:
        descriptor = EnumDescriptor(type_path=path, variants=tuple(variants))
    except ValueError as e:
        raise RegistrationError(
            "Union members produce conflicting variants",
            type_path=path,
            internal_details=str(e),
        ) from e

    return ReflectedType(
        descriptor=descriptor,
        bounds=tuple(bounds),
        dependencies=tuple(dependencies),
    )


def _record_fields(
    cls: type,
    *,
    variant_index: int | None,
) -> tuple[tuple[FieldDescriptor, ...], tuple[FieldBounds, ...], tuple[Any, ...]]:
    """Reflect the named fields of a dataclass or pydantic model."""
    annotations: list[tuple[str, Any, Sequence[Any]]] = []
    if issubclass(cls, BaseModel):
        for name, info in cls.model_fields.items():
            annotations.append((name, info.annotation, info.metadata))
    else:
        hints = _type_hints(cls)
        for field in dataclasses.fields(cls):
            hint = hints.get(field.name, Any)
            annotations.append((field.name, hint, _annotated_metadata(hint)))

    fields: list[FieldDescriptor] = []
    bounds: list[FieldBounds] = []
    dependencies: list[Any] = []
    for position, (name, hint, metadata) in enumerate(annotations):
        fields.append(
            FieldDescriptor(
                name=name,
                type_path=type_path_of(hint),
                position=position,
                is_optional=is_optional_type(hint),
            )
        )
        found = _bounds_from_metadata(metadata)
        if found is not None:
            bounds.append(_address(found, position, variant_index))
        dependencies.extend(referenced_types(hint))

    return tuple(fields), tuple(bounds), tuple(dependencies)


def _named_tuple_fields(
    cls: type,
    *,
    variant_index: int | None,
) -> tuple[tuple[FieldDescriptor, ...], tuple[FieldBounds, ...], tuple[Any, ...]]:
    """Reflect the positions of a NamedTuple class."""
    hints = _type_hints(cls)
    element_hints = [hints.get(name, Any) for name in cls._fields]  # type: ignore[attr-defined]

    fields = tuple(
        FieldDescriptor(
            type_path=type_path_of(hint),
            position=position,
            is_optional=is_optional_type(hint),
        )
        for position, hint in enumerate(element_hints)
    )
    bounds = _positional_bounds(element_hints, variant_index=variant_index)
    return fields, bounds, _collect(referenced_types(hint) for hint in element_hints)


# Bounds metadata


def _annotated_metadata(hint: Any) -> tuple[Any, ...]:
    if get_origin(hint) is Annotated:
        return get_args(hint)[1:]
    return ()


def _bounds_from_metadata(metadata: Iterable[Any]) -> Bounds | None:
    minimum: float | None = None
    maximum: float | None = None
    for item in metadata:
        if isinstance(item, Bounds):
            minimum = item.minimum if item.minimum is not None else minimum
            maximum = item.maximum if item.maximum is not None else maximum
        elif isinstance(item, annotated_types.Ge):
            minimum = _as_float(item.ge, minimum)
        elif isinstance(item, annotated_types.Le):
            maximum = _as_float(item.le, maximum)
        elif isinstance(item, annotated_types.Interval):
            minimum = _as_float(item.ge, minimum)
            maximum = _as_float(item.le, maximum)

    if minimum is None and maximum is None:
        return None
    return Bounds(minimum=minimum, maximum=maximum)


def _as_float(value: Any, current: float | None) -> float | None:
    # Non-numeric limits (dates, strings) are not schema bounds.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return current
    return float(value)


def _positional_bounds(
    hints: Iterable[Any],
    *,
    variant_index: int | None,
) -> tuple[FieldBounds, ...]:
    addressed: list[FieldBounds] = []
    for position, hint in enumerate(hints):
        found = _bounds_from_metadata(_annotated_metadata(hint))
        if found is not None:
            addressed.append(_address(found, position, variant_index))
    return tuple(addressed)


def _address(bounds: Bounds, position: int, variant_index: int | None) -> FieldBounds:
    return FieldBounds(
        field_index=position,
        variant_index=variant_index,
        minimum=bounds.minimum,
        maximum=bounds.maximum,
    )


# Helpers


def _is_union(origin: Any) -> bool:
    return origin is Union or origin is types.UnionType


def _is_empty_tuple(tp: Any) -> bool:
    # tuple[()] has args ((),) before Python 3.11 and () after; bare typing.Tuple has ()
    if get_origin(tp) is not tuple:
        return False
    args = get_args(tp)
    return args == ((),) or (not args and tp is not typing.Tuple)


def _strip_none(args: tuple[Any, ...]) -> Any:
    remaining = tuple(a for a in args if a is not _NONE_TYPE)
    if len(remaining) == 1:
        return remaining[0]
    return Union[remaining]  # noqa: UP007


def _is_record(cls: type) -> bool:
    return dataclasses.is_dataclass(cls) or issubclass(cls, BaseModel)


def _is_named_tuple(cls: type) -> bool:
    return issubclass(cls, tuple) and hasattr(cls, "_fields")


def _class_path(cls: Any) -> str:
    module = getattr(cls, "__module__", None)
    name = getattr(cls, "__qualname__", None) or getattr(cls, "__name__", repr(cls))
    if module in (None, "builtins"):
        return str(name)
    return f"{module}.{name}"


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as e:
        raise RegistrationError(
            "Cannot resolve field annotations",
            type_path=_class_path(cls),
            internal_details=str(e),
        ) from e


def _collect(groups: Iterable[Iterable[Any]]) -> tuple[Any, ...]:
    return tuple(item for group in groups for item in group)
