"""Unit tests for regschema_core.observability."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from regschema_core.observability import configure_logging, get_logger


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Restore root logging handlers changed by configure_logging."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.usefixtures("restore_logging")
class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_logs_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Log output goes to stderr, never stdout."""
        configure_logging(log_level="INFO", add_timestamp=False)
        structlog.get_logger("regschema_core.test").info("schema_exported", type_count=3)

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "schema_exported" in captured.err
        assert "type_count=3" in captured.err

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Messages below the level are dropped."""
        configure_logging(log_level="WARNING")
        structlog.get_logger("regschema_core.test").info("type_registered")

        assert "type_registered" not in capsys.readouterr().err

    def test_json_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        """JSON format writes one object per line."""
        configure_logging(log_level="debug", json_format=True)
        structlog.get_logger("regschema_core.test").debug("schema_node_built", type_path="Player")

        line = capsys.readouterr().err.strip().splitlines()[-1]
        entry = json.loads(line)
        assert entry["event"] == "schema_node_built"
        assert entry["type_path"] == "Player"
        assert entry["level"] == "debug"
        assert "timestamp" in entry

    def test_unknown_level(self) -> None:
        """Unknown level names are rejected."""
        with pytest.raises(ValueError, match="unknown log level"):
            configure_logging(log_level="LOUD")


class TestGetLogger:
    """Tests for get_logger."""

    @pytest.mark.usefixtures("restore_logging")
    def test_follows_configuration(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Loggers created before configure_logging use its settings."""
        logger = get_logger("regschema_core.test")
        configure_logging(log_level="INFO", add_timestamp=False)

        logger.info("schema_exported", type_count=2)

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "schema_exported" in captured.err
        assert "regschema_core.test" in captured.err

    def test_unconfigured_info_is_silent(self, capsys: pytest.CaptureFixture[str]) -> None:
        """With default settings, info events print nothing at all."""
        structlog.reset_defaults()

        get_logger("regschema_core.test").info("schema_exported", type_count=2)

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "schema_exported" not in captured.err

    def test_unconfigured_warning_not_on_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        """With default settings, warnings are handed to stdlib logging, not printed."""
        structlog.reset_defaults()

        get_logger("regschema_core.test").warning("registry_empty")

        assert capsys.readouterr().out == ""
