"""Exception hierarchy for regschema-core.

- RegSchemaError: base of every regschema error
- ContractViolationError: a built schema node has no string ``name``
- ExportError: the document cannot be serialized or written
- RegistrationError: a type cannot be added to a registry
- ConfigurationError: export configuration or a registry file cannot be loaded

All of them abort the export in progress. ``str(exc)`` is safe to show to a
user; ``internal_details`` only ever reaches the structlog log.
"""

from __future__ import annotations

from regschema_core.observability import get_logger

logger = get_logger(__name__)


def _with_context(message: str, *context: str | None) -> str:
    parts = [part for part in context if part]
    return f"{message} ({', '.join(parts)})" if parts else message


class RegSchemaError(Exception):
    """Base exception for regschema.

    Args:
        user_message: Message shown to the user, also ``str(exc)``.
        internal_details: Diagnostic text that is logged at error level
            when given and kept out of the message.

    Example:
        >>> raise RegSchemaError(
        ...     "Schema export failed",
        ...     internal_details="BrokenPipeError while writing 4096 bytes",
        ... )
    """

    def __init__(self, user_message: str, *, internal_details: str | None = None) -> None:
        super().__init__(user_message)
        self.user_message = user_message
        if internal_details:
            logger.error(
                "regschema_error",
                error_type=type(self).__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ContractViolationError(RegSchemaError):
    """A schema node reached document assembly without a string ``name``.

    Nodes from SchemaNodeBuilder always carry one, so this points at a node
    produced or altered elsewhere.
    """


class ExportError(RegSchemaError):
    """The schema document could not be serialized or written.

    Raised for sink I/O errors, closed sinks, and values JSON cannot
    represent, such as non-finite floats from a custom bounds provider. The original exception is chained as
    ``__cause__``.
    """


class RegistrationError(RegSchemaError):
    """A type could not be added to a registry.

    Either its type path is taken by a different shape, or reflection found
    no descriptor kind for it.

    Attributes:
        type_path: Type path of the offending type, when known.
    """

    def __init__(
        self,
        user_message: str,
        *,
        type_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(
            _with_context(user_message, f"type '{type_path}'" if type_path else None),
            internal_details=internal_details,
        )
        self.type_path = type_path


class ConfigurationError(RegSchemaError):
    """An export configuration or registry file could not be loaded.

    Attributes:
        file_path: File being loaded, when known.
        field_path: Dotted location of the invalid value, e.g. ``"indent"``.

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid export configuration",
        ...     file_path="regschema.yaml",
        ...     field_path="indent",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(
            _with_context(
                user_message,
                f"in {file_path}" if file_path else None,
                f"field '{field_path}'" if field_path else None,
            ),
            internal_details=internal_details,
        )
        self.file_path = file_path
        self.field_path = field_path
