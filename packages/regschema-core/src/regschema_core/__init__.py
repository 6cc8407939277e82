"""regschema-core: JSON Schema export for reflected type registries.

This package provides:
- Type descriptors: Shape model of reflected types
- TypeRegistry: Thread-safe registry of types, capabilities and bounds
- build_schema_node: Map one descriptor onto one JSON Schema node
- SchemaExporter: Assemble and write the whole-registry schema document
"""

from __future__ import annotations

__version__ = "0.1.0"

# Field bounds
from regschema_core.bounds import (
    Bounds,
    BoundsProvider,
    FieldBounds,
    NullBoundsProvider,
    StaticBoundsProvider,
)

# Schema node builder
from regschema_core.builder import build_schema_node

# Capabilities
from regschema_core.capabilities import (
    Capability,
    CapabilityProbe,
    StaticCapabilityProbe,
)

# Configuration
from regschema_core.config import (
    DEFAULT_TITLE,
    JSON_SCHEMA_DIALECT,
    ExportConfig,
    StructVariantRequired,
    load_config,
)

# Type descriptors
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
    Variant,
    named_fields,
    parse_descriptor,
    positional_fields,
)

# Error types
from regschema_core.errors import (
    ConfigurationError,
    ContractViolationError,
    ExportError,
    RegistrationError,
    RegSchemaError,
)

# Document export
from regschema_core.export import (
    SchemaExporter,
    export_types,
    export_types_to_path,
)

# Logging
from regschema_core.observability import configure_logging

# Reflection
from regschema_core.reflect import (
    OPTIONAL_TYPE_PATH_PREFIX,
    reflect_type,
    type_path_of,
)

# Registry
from regschema_core.registry import (
    RegistrySnapshot,
    TypeRegistration,
    TypeRegistry,
    load_registry,
)

__all__ = [
    "__version__",
    # Registry
    "TypeRegistry",
    "TypeRegistration",
    "RegistrySnapshot",
    "load_registry",
    # Reflection
    "reflect_type",
    "type_path_of",
    "OPTIONAL_TYPE_PATH_PREFIX",
    # Descriptors
    "TypeDescriptor",
    "StructDescriptor",
    "EnumDescriptor",
    "TupleStructDescriptor",
    "TupleDescriptor",
    "ListDescriptor",
    "ArrayDescriptor",
    "MapDescriptor",
    "ValueDescriptor",
    "FieldDescriptor",
    "Variant",
    "UnitVariant",
    "TupleVariant",
    "StructVariant",
    "named_fields",
    "positional_fields",
    "parse_descriptor",
    # Bounds
    "Bounds",
    "FieldBounds",
    "BoundsProvider",
    "NullBoundsProvider",
    "StaticBoundsProvider",
    # Capabilities
    "Capability",
    "CapabilityProbe",
    "StaticCapabilityProbe",
    # Builder and export
    "build_schema_node",
    "SchemaExporter",
    "export_types",
    "export_types_to_path",
    # Configuration
    "ExportConfig",
    "StructVariantRequired",
    "JSON_SCHEMA_DIALECT",
    "DEFAULT_TITLE",
    "load_config",
    # Errors
    "RegSchemaError",
    "ContractViolationError",
    "ExportError",
    "RegistrationError",
    "ConfigurationError",
    # Logging
    "configure_logging",
]
