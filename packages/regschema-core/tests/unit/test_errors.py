"""Unit tests for the regschema-core exception hierarchy."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from regschema_core.errors import (
    ConfigurationError,
    ContractViolationError,
    ExportError,
    RegistrationError,
    RegSchemaError,
)


class TestRegSchemaError:
    """Tests for the base RegSchemaError exception."""

    def test_str_is_user_message(self) -> None:
        """str(error) is the user message."""
        error = RegSchemaError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.user_message == "Something went wrong"

    def test_internal_details_not_in_message(self) -> None:
        """Internal details stay out of the message."""
        error = RegSchemaError("Export failed", internal_details="fd 3 closed")
        assert "fd 3" not in str(error)

    def test_logs_internal_details(self) -> None:
        """Internal details are logged."""
        with capture_logs() as logs:
            RegSchemaError("User sees this", internal_details="Secret debug info")

        assert logs[0]["event"] == "regschema_error"
        assert logs[0]["internal_details"] == "Secret debug info"
        assert logs[0]["error_type"] == "RegSchemaError"

    def test_no_log_without_details(self) -> None:
        """Nothing is logged without internal details."""
        with capture_logs() as logs:
            RegSchemaError("Quiet")
        assert logs == []

    @pytest.mark.parametrize(
        "error_class",
        [ContractViolationError, ExportError, RegistrationError, ConfigurationError],
    )
    def test_subclasses(self, error_class: type[RegSchemaError]) -> None:
        """Every error can be caught as RegSchemaError."""
        with pytest.raises(RegSchemaError):
            raise error_class("failed")


class TestRegistrationError:
    """Tests for RegistrationError."""

    def test_type_path_in_message(self) -> None:
        """The offending type path is named."""
        error = RegistrationError("Already registered", type_path="game::Player")
        assert str(error) == "Already registered (type 'game::Player')"
        assert error.type_path == "game::Player"

    def test_without_type_path(self) -> None:
        """The type path is optional."""
        assert str(RegistrationError("Unsupported type")) == "Unsupported type"


class TestConfigurationError:
    """Tests for ConfigurationError."""

    def test_context_in_message(self) -> None:
        """File and field are appended to the message."""
        error = ConfigurationError("Invalid value", file_path="regschema.yaml", field_path="indent")
        assert str(error) == "Invalid value (in regschema.yaml, field 'indent')"

    def test_file_only(self) -> None:
        """Either context part may be missing."""
        error = ConfigurationError("Cannot read", file_path="regschema.yaml")
        assert str(error) == "Cannot read (in regschema.yaml)"
        assert error.field_path is None
