"""Type registry for regschema.

This module provides:
- TypeRegistration: One registered type (descriptor, capabilities, bounds)
- TypeRegistry: Thread-safe registry keyed by type path
- RegistrySnapshot: Read-only view of a registry, usable as CapabilityProbe
  and BoundsProvider
- load_registry: Build a registry from a YAML or JSON registry file

The registry is guarded by a readers/writer lock. ``snapshot()`` holds the
shared lock for the duration of its ``with`` block, so registrations made by
other threads wait until the export reading the snapshot is done.
"""

from __future__ import annotations

import threading
from collections import Counter
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from regschema_core.bounds import Bounds, FieldBounds, StaticBoundsProvider
from regschema_core.capabilities import Capability
from regschema_core.descriptors import TypeDescriptor
from regschema_core.errors import ConfigurationError, RegistrationError
from regschema_core.observability import get_logger
from regschema_core.reflect import ReflectedType, reflect_type, type_path_of

logger = get_logger(__name__)


class TypeRegistration(BaseModel):
    """One entry of a type registry.

    Attributes:
        descriptor: Shape of the registered type.
        capabilities: Host capabilities the type is registered under.
        bounds: Numeric bounds declared on the type's fields.

    Example:
        >>> registration = TypeRegistration(
        ...     descriptor=ValueDescriptor(type_path="f32"),
        ...     capabilities={Capability.RESOURCE},
        ... )
        >>> registration.is_resource
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    descriptor: TypeDescriptor
    capabilities: frozenset[Capability] = Field(
        default_factory=frozenset,
        description="Host capabilities of the type",
    )
    bounds: tuple[FieldBounds, ...] = Field(
        default=(),
        description="Field bounds declared on the type",
    )

    @property
    def type_path(self) -> str:
        """Type path of the registered type."""
        return self.descriptor.type_path

    @property
    def is_component(self) -> bool:
        """Whether the type is registered as a component."""
        return Capability.COMPONENT in self.capabilities

    @property
    def is_resource(self) -> bool:
        """Whether the type is registered as a resource."""
        return Capability.RESOURCE in self.capabilities

    def merged_with(self, other: TypeRegistration) -> TypeRegistration:
        """Combine two registrations of the same descriptor.

        Capabilities are united; bounds from ``other`` replace bounds of
        this registration at the same field address.

        Raises:
            RegistrationError: If the descriptors differ.
        """
        if other.descriptor != self.descriptor:
            raise RegistrationError(
                "Type path is already registered with a different shape",
                type_path=self.type_path,
                internal_details=(
                    f"registered {self.descriptor.kind}, new {other.descriptor.kind}"
                ),
            )

        by_address = {(b.field_index, b.variant_index): b for b in self.bounds}
        by_address.update({(b.field_index, b.variant_index): b for b in other.bounds})
        return TypeRegistration(
            descriptor=self.descriptor,
            capabilities=self.capabilities | other.capabilities,
            bounds=tuple(by_address.values()),
        )


class _ReadWriteLock:
    """Readers/writer lock: many readers or one writer."""

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.Lock())
        self._readers: Counter[int] = Counter()
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._condition:
            while self._writing:
                self._condition.wait()
            self._readers[threading.get_ident()] += 1
        try:
            yield
        finally:
            with self._condition:
                ident = threading.get_ident()
                self._readers[ident] -= 1
                if self._readers[ident] <= 0:
                    del self._readers[ident]
                if not self._readers:
                    self._condition.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._condition:
            if threading.get_ident() in self._readers:
                msg = "cannot modify a registry while this thread holds a snapshot of it"
                raise RuntimeError(msg)
            while self._writing or self._readers:
                self._condition.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._condition:
                self._writing = False
                self._condition.notify_all()


class RegistrySnapshot:
    """Read-only view of a registry's entries.

    Iterates registrations in registration order and answers capability and
    bounds lookups from the registrations themselves.

    Example:
        >>> with registry.snapshot() as snapshot:
        ...     paths = [registration.type_path for registration in snapshot]
    """

    def __init__(self, registrations: Iterable[TypeRegistration]) -> None:
        self._registrations = tuple(registrations)
        self._by_path = {r.type_path: r for r in self._registrations}
        self._bounds = StaticBoundsProvider.from_field_bounds(
            {r.type_path: r.bounds for r in self._registrations}
        )

    def __iter__(self) -> Iterator[TypeRegistration]:
        return iter(self._registrations)

    def __len__(self) -> int:
        return len(self._registrations)

    def __contains__(self, type_path: object) -> bool:
        return type_path in self._by_path

    def get(self, type_path: str) -> TypeRegistration | None:
        """Return the registration of ``type_path``, or None."""
        return self._by_path.get(type_path)

    def is_component(self, type_path: str) -> bool:
        registration = self._by_path.get(type_path)
        return registration is not None and registration.is_component

    def is_resource(self, type_path: str) -> bool:
        registration = self._by_path.get(type_path)
        return registration is not None and registration.is_resource

    def bounds_for(
        self,
        type_path: str,
        field_index: int,
        variant_index: int | None = None,
    ) -> Bounds | None:
        return self._bounds.bounds_for(type_path, field_index, variant_index)


class TypeRegistry:
    """Registry of reflected types, keyed by type path.

    No two registrations share a type path. Registering the same shape again
    merges capabilities and bounds; registering a different shape under a
    taken path raises RegistrationError.

    Example:
        >>> registry = TypeRegistry()
        >>> _ = registry.register(Player, component=True)
        >>> with registry.snapshot() as snapshot:
        ...     len(snapshot)
        3
    """

    def __init__(self, registrations: Iterable[TypeRegistration] = ()) -> None:
        self._registrations: dict[str, TypeRegistration] = {}
        self._lock = _ReadWriteLock()
        for registration in registrations:
            self.add(registration)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._registrations)

    def __contains__(self, type_path: object) -> bool:
        with self._lock.read():
            return type_path in self._registrations

    def get(self, type_path: str) -> TypeRegistration | None:
        """Return the registration of ``type_path``, or None."""
        with self._lock.read():
            return self._registrations.get(type_path)

    @contextmanager
    def snapshot(self) -> Iterator[RegistrySnapshot]:
        """Hold the shared lock and yield a read-only view of the registry."""
        with self._lock.read():
            yield RegistrySnapshot(self._registrations.values())

    def add(self, registration: TypeRegistration) -> TypeRegistration:
        """Add a registration, merging it with an existing one of the same shape.

        Args:
            registration: Registration to add.

        Returns:
            The registration now stored under its type path.

        Raises:
            RegistrationError: If a different shape is registered under the
                same type path.
        """
        with self._lock.write():
            existing = self._registrations.get(registration.type_path)
            stored = registration if existing is None else existing.merged_with(registration)
            self._registrations[stored.type_path] = stored

        logger.debug(
            "type_registered",
            type_path=stored.type_path,
            kind=stored.descriptor.kind,
            merged=existing is not None,
        )
        return stored

    def register_descriptor(
        self,
        descriptor: TypeDescriptor,
        *,
        component: bool = False,
        resource: bool = False,
        bounds: Iterable[FieldBounds] = (),
    ) -> TypeRegistration:
        """Register a type from an explicit descriptor.

        Args:
            descriptor: Shape of the type.
            component: Register the type as a component.
            resource: Register the type as a resource.
            bounds: Numeric bounds of the type's fields.

        Returns:
            The stored registration.
        """
        return self.add(
            TypeRegistration(
                descriptor=descriptor,
                capabilities=_capabilities(component=component, resource=resource),
                bounds=tuple(bounds),
            )
        )

    def register(
        self,
        py_type: Any,
        *,
        component: bool = False,
        resource: bool = False,
        bounds: Iterable[FieldBounds] = (),
        type_path: str | None = None,
    ) -> TypeRegistration:
        """Reflect a Python type and register it with the types it references.

        Field, element and variant types are registered too (without
        capabilities) unless their type path is already taken.

        Args:
            py_type: Class or typing construct to register.
            component: Register the type as a component.
            resource: Register the type as a resource.
            bounds: Extra field bounds, added to those declared on the type.
            type_path: Explicit type path. Required for Union/Literal aliases.

        Returns:
            The stored registration of ``py_type``.

        Raises:
            RegistrationError: If the type or a referenced type cannot be
                reflected, or clashes with an existing registration.
        """
        root = reflect_type(py_type, type_path=type_path)
        dependencies = self._reflect_dependencies(root.descriptor.type_path, root.dependencies)

        stored = self.add(
            TypeRegistration(
                descriptor=root.descriptor,
                capabilities=_capabilities(component=component, resource=resource),
                bounds=(*root.bounds, *bounds),
            )
        )
        for reflected in dependencies:
            self.add(TypeRegistration(descriptor=reflected.descriptor, bounds=reflected.bounds))

        logger.info(
            "type_reflected",
            type_path=stored.type_path,
            kind=stored.descriptor.kind,
            dependencies=len(dependencies),
        )
        return stored

    def _reflect_dependencies(
        self,
        root_path: str,
        pending: Iterable[Any],
    ) -> list[ReflectedType]:
        queue = list(pending)
        seen = {root_path}
        reflected: list[ReflectedType] = []
        while queue:
            dependency = queue.pop(0)
            path = type_path_of(dependency)
            if path in seen or path in self:
                continue
            seen.add(path)
            result = reflect_type(dependency)
            reflected.append(result)
            queue.extend(result.dependencies)
        return reflected


class RegistryDocument(BaseModel):
    """On-disk form of a registry: a list of registrations.

    Example (YAML):
        types:
          - descriptor: {kind: value, type_path: f32}
          - descriptor:
              kind: struct
              type_path: game::Player
              fields:
                - {name: name, type_path: string, position: 0}
                - {name: health, type_path: f32, position: 1}
            capabilities: [component]
            bounds:
              - {field_index: 1, minimum: 0.0, maximum: 1.0}
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    types: tuple[TypeRegistration, ...] = Field(default=(), description="Registered types")


def load_registry(path: Path | str) -> TypeRegistry:
    """Build a registry from a YAML or JSON registry file.

    Args:
        path: Path to a file holding a RegistryDocument.

    Returns:
        Registry with every entry of the file, in file order.

    Raises:
        ConfigurationError: If the file is unreadable or malformed.
        RegistrationError: If two entries clash on a type path.
    """
    registry_path = Path(path)

    try:
        data = yaml.safe_load(registry_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(
            "Cannot read registry file",
            file_path=str(registry_path),
            internal_details=str(e),
        ) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            "Registry file is not valid YAML or JSON",
            file_path=str(registry_path),
            internal_details=str(e),
        ) from e

    try:
        document = RegistryDocument.model_validate(data if data is not None else {})
    except PydanticValidationError as e:
        first = e.errors()[0]
        raise ConfigurationError(
            f"Invalid registry file: {first['msg']}",
            file_path=str(registry_path),
            field_path=".".join(str(part) for part in first["loc"]) or None,
            internal_details=str(e),
        ) from e

    registry = TypeRegistry(document.types)
    logger.info("registry_loaded", path=str(registry_path), types=len(registry))
    return registry


def _capabilities(*, component: bool, resource: bool) -> frozenset[Capability]:
    found = set()
    if component:
        found.add(Capability.COMPONENT)
    if resource:
        found.add(Capability.RESOURCE)
    return frozenset(found)
