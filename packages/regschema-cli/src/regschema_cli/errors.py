"""Exit codes and error conversion for the regschema CLI.

regschema-core raises RegSchemaError subclasses; commands turn them into
CLIError so click prints one rich error line and exits with the right code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click
from pydantic import ValidationError as PydanticValidationError

from regschema_cli.output import error
from regschema_core.errors import ExportError, RegSchemaError

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails


EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # bad target, invalid config or options
EXIT_SYSTEM_ERROR = 2  # document could not be serialized or written


class CLIError(click.ClickException):
    """Error that ends a command with a message and an exit code.

    Attributes:
        message: Text shown to the user.
        exit_code: Process exit code, EXIT_USER_ERROR unless given.
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Print the message through the rich error console.

        ``file`` is accepted for click compatibility and ignored.
        """
        error(self.format_message())


class TargetResolutionError(CLIError):
    """TARGET cannot be imported or does not name a type registry.

    Example:
        >>> raise TargetResolutionError("Cannot import module 'game'", target="game:registry")
    """

    def __init__(self, message: str, *, target: str) -> None:
        super().__init__(f"{message} (target '{target}')")
        self.target = target


def _describe(details: ErrorDetails) -> str:
    location = ".".join(str(part) for part in details["loc"])
    return f"  - {location}: {details['msg']}" if location else f"  - {details['msg']}"


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Render a pydantic ValidationError as one line per failing field.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - indent: Input should be less than or equal to 8"
    """
    return "\n".join(["Validation failed:", *(_describe(d) for d in err.errors())])


def handle_regschema_error(err: RegSchemaError) -> NoReturn:
    """Re-raise a regschema-core error as a CLIError.

    Export failures (serialization, writing) exit with EXIT_SYSTEM_ERROR,
    everything else with EXIT_USER_ERROR.

    Raises:
        CLIError: Always, chained to ``err``.
    """
    exit_code = EXIT_SYSTEM_ERROR if isinstance(err, ExportError) else EXIT_USER_ERROR
    raise CLIError(str(err), exit_code=exit_code) from err


def handle_validation_error(err: PydanticValidationError, source: str) -> NoReturn:
    """Re-raise invalid user-supplied values as a CLIError.

    Args:
        err: The pydantic error.
        source: What was being validated, e.g. ``"export options"``.

    Raises:
        CLIError: Always, with one line per failing field.
    """
    raise CLIError(f"Invalid {source}:\n{format_pydantic_error(err)}") from err
