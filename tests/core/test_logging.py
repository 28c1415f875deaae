"""Tests for structured logging."""

import json
import logging
from pathlib import Path

import pytest
import structlog

from importplane.config.models import LoggingConfig, LogOutputConfig
from importplane.core.logging import (
    configure_logging,
    get_logger,
    get_operation_id,
    operation_context,
)


class TestOperationIdCorrelation:
    """Operation ID context variable tests."""

    def test_given_operation_id_when_in_context_then_can_retrieve(self) -> None:
        """Operation ID is visible inside the block and gone after it."""
        # When
        with operation_context("test-123") as oid:
            inside = get_operation_id()

        # Then
        assert oid == "test-123"
        assert inside == "test-123"
        assert get_operation_id() is None

    def test_given_no_id_when_enter_then_generates_uuid(self) -> None:
        """A fresh 12-character ID is generated when none is given."""
        # When
        with operation_context() as oid:
            pass

        # Then
        assert len(oid) == 12  # uuid4().hex[:12]

    def test_given_outer_context_when_nested_then_keeps_outer_id(self) -> None:
        """Nested blocks log under the outer request's ID."""
        # Given
        with operation_context("outer"):
            # When
            with operation_context() as inner:
                pass

            # Then
            assert inner == "outer"
            assert get_operation_id() == "outer"

    def test_given_error_in_block_when_exit_then_id_restored(self) -> None:
        """The ID is reset even when the block raises."""
        # When
        with pytest.raises(RuntimeError), operation_context("failing"):
            raise RuntimeError("boom")

        # Then
        assert get_operation_id() is None


class TestLoggingConfiguration:
    """Logging configuration tests."""

    def setup_method(self) -> None:
        """Reset structlog and stdlib logging before each test."""
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()

    def teardown_method(self) -> None:
        logging.getLogger().handlers.clear()

    def test_given_config_object_when_configure_then_takes_precedence(self, tmp_path: Path) -> None:
        """LoggingConfig object takes precedence over simple params."""
        # Given
        log_file = tmp_path / "test.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )

        # When - config's DEBUG should override the level="ERROR" param
        configure_logging(config=config, json_format=False, level="ERROR")
        get_logger().debug("debug msg")

        # Then
        assert "debug msg" in log_file.read_text()

    def test_given_json_output_when_log_then_valid_json_with_operation_id(self, tmp_path: Path) -> None:
        """JSON lines carry event, fields, level, timestamp and operation id."""
        # Given
        log_file = tmp_path / "ops.log"
        configure_logging(
            config=LoggingConfig(level="INFO", outputs=[LogOutputConfig(format="json", destination=str(log_file))])
        )
        # When
        with operation_context("op-1"):
            get_logger("resolver").info("import_resolved", module="os")

        # Then
        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["event"] == "import_resolved"
        assert data["module"] == "os"
        assert data["level"] == "info"
        assert data["operation_id"] == "op-1"
        assert data["logger"] == "resolver"
        assert "timestamp" in data

    def test_given_multi_output_config_when_configure_then_logs_to_all(self, tmp_path: Path) -> None:
        """Multiple outputs receive logs according to their levels."""
        # Given
        debug_file = tmp_path / "debug.log"
        info_file = tmp_path / "info.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[
                LogOutputConfig(format="json", destination=str(info_file), level="INFO"),
                LogOutputConfig(format="json", destination=str(debug_file)),
            ],
        )

        # When
        configure_logging(config=config)
        logger = get_logger()
        logger.debug("debug only")
        logger.info("info msg")

        # Then
        info_content = info_file.read_text()
        assert "info msg" in info_content
        assert "debug only" not in info_content
        debug_content = debug_file.read_text()
        assert "debug only" in debug_content
        assert "info msg" in debug_content

    def test_given_relative_file_destination_then_rejected(self) -> None:
        with pytest.raises(ValueError):
            LogOutputConfig(destination="relative/path.log")
