"""Export configuration for regschema.

This module provides:
- StructVariantRequired: How ``required`` is computed for struct variants
- ExportConfig: Export settings, loadable from REGSCHEMA_* environment variables
- load_config: Load ExportConfig from a YAML file
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from regschema_core.errors import ConfigurationError
from regschema_core.observability import get_logger

logger = get_logger(__name__)

JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"
"""Value of the document's ``$schema`` keyword."""

DEFAULT_TITLE = "reflected type registry schema"
"""Default value of the document's ``title`` keyword."""


class StructVariantRequired(str, Enum):
    """Rule for the ``required`` list of struct enum variants.

    Attributes:
        NON_OPTIONAL: Required fields are the non-optional ones, the same
            rule plain structs use.
        OPTIONAL: Required fields are the optional ones. Reproduces the
            inverted output of earlier exporters for consumers that rely on it.
    """

    NON_OPTIONAL = "non_optional"
    OPTIONAL = "optional"


class ExportConfig(BaseSettings):
    """Settings for one schema export.

    Can be loaded from environment variables with the REGSCHEMA_ prefix.

    Attributes:
        title: Value of the document's ``title`` keyword.
        include_bounds: Emit ``minimum``/``maximum`` from declared bounds.
        struct_variant_required: Rule for ``required`` in struct variants.
        indent: Indentation width of the pretty-printed JSON.

    Example:
        >>> # From environment
        >>> config = ExportConfig()
        >>>
        >>> # Explicit
        >>> config = ExportConfig(title="game save schema", include_bounds=False)
    """

    model_config = SettingsConfigDict(
        env_prefix="REGSCHEMA_",
        frozen=True,
        extra="forbid",
    )

    title: str = Field(
        default=DEFAULT_TITLE,
        min_length=1,
        description="Document title",
    )
    include_bounds: bool = Field(
        default=True,
        description="Emit minimum/maximum from declared field bounds",
    )
    struct_variant_required: StructVariantRequired = Field(
        default=StructVariantRequired.NON_OPTIONAL,
        description="Rule for the required list of struct enum variants",
    )
    indent: int = Field(
        default=2,
        ge=1,
        le=8,
        description="JSON indentation width",
    )


def load_config(path: Path | str) -> ExportConfig:
    """Load export configuration from a YAML file.

    Values in the file take precedence over REGSCHEMA_* environment variables.

    Args:
        path: Path to a YAML file holding a mapping of ExportConfig fields.

    Returns:
        Validated ExportConfig.

    Raises:
        ConfigurationError: If the file is missing, unreadable, not a
            mapping, or fails validation.

    Example:
        >>> config = load_config("regschema.yaml")
        >>> config.title
        'game save schema'
    """
    config_path = Path(path)

    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            "Cannot read export configuration",
            file_path=str(config_path),
            internal_details=str(e),
        ) from e

    try:
        data: Any = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            "Export configuration is not valid YAML",
            file_path=str(config_path),
            internal_details=str(e),
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Export configuration must be a mapping",
            file_path=str(config_path),
        )

    try:
        config = ExportConfig(**data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        raise ConfigurationError(
            f"Invalid export configuration: {first['msg']}",
            file_path=str(config_path),
            field_path=".".join(str(part) for part in first["loc"]) or None,
            internal_details=str(e),
        ) from e

    logger.debug("config_loaded", path=str(config_path))
    return config
