"""Capability lookup for registered types.

A type may be registered under the host's "component" and/or "resource"
capability. The flags are copied onto the exported node as ``isComponent``
and ``isResource``; they never change the node's shape.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Protocol, runtime_checkable


class Capability(str, Enum):
    """Host capabilities a registered type may carry.

    Attributes:
        COMPONENT: Type can be attached to entities.
        RESOURCE: Type can be stored as a singleton.
    """

    COMPONENT = "component"
    RESOURCE = "resource"


@runtime_checkable
class CapabilityProbe(Protocol):
    """Protocol for capability lookup by type path.

    Absence of a capability is a normal outcome, not an error.
    """

    def is_component(self, type_path: str) -> bool:
        """Whether the type is registered as a component."""
        ...

    def is_resource(self, type_path: str) -> bool:
        """Whether the type is registered as a resource."""
        ...


class StaticCapabilityProbe:
    """Probe answering from fixed sets of type paths.

    Example:
        >>> probe = StaticCapabilityProbe(components=["game::Player"])
        >>> probe.is_component("game::Player"), probe.is_resource("game::Player")
        (True, False)
    """

    def __init__(
        self,
        components: Iterable[str] = (),
        resources: Iterable[str] = (),
    ) -> None:
        self.components = frozenset(components)
        self.resources = frozenset(resources)

    def is_component(self, type_path: str) -> bool:
        return type_path in self.components

    def is_resource(self, type_path: str) -> bool:
        return type_path in self.resources
