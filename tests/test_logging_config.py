"""
Tests for the structured JSON logging configuration.

These tests validate that:
1. Log messages include expected fields (timestamp, level, name, message, service)
2. Run context passed via ``extra`` is included in the JSON output
3. setup_logging switches between JSON and standard formats
4. Level names are accepted and unknown names are rejected
"""

import io
import json
import logging

import pytest

from ledgerrecon.core.logging_config import SERVICE_NAME, CustomJsonFormatter, get_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level
    yield root_logger
    root_logger.handlers = original_handlers
    root_logger.level = original_level


def _capture(logger_name, fmt='%(message)s', level=logging.INFO):
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    log_capture = io.StringIO()
    handler = logging.StreamHandler(log_capture)
    handler.setFormatter(CustomJsonFormatter(fmt))
    logger.addHandler(handler)
    return logger, handler, log_capture


def test_json_formatter_fields():
    """Test that CustomJsonFormatter adds the expected standard fields."""
    logger, handler, log_capture = _capture("test_json")
    try:
        logger.info("Test message")
        log_data = json.loads(log_capture.getvalue().strip())
    finally:
        logger.removeHandler(handler)

    assert "timestamp" in log_data
    assert log_data["level"] == "INFO"
    assert log_data["name"] == "test_json"
    assert log_data["message"] == "Test message"
    assert log_data["service"] == SERVICE_NAME


def test_json_formatter_with_extra_fields():
    """Test that extra fields are included in JSON output."""
    logger, handler, log_capture = _capture("test_json_extra")
    try:
        logger.info("Reconciliation complete", extra={
            "left_rows": 8,
            "right_rows": 7,
            "duplicate_keys": ["inv-001"],
        })
        log_data = json.loads(log_capture.getvalue().strip())
    finally:
        logger.removeHandler(handler)

    assert log_data["left_rows"] == 8
    assert log_data["right_rows"] == 7
    assert log_data["duplicate_keys"] == ["inv-001"]


def test_setup_logging_json_format(restore_root_logger):
    """Test that setup_logging configures JSON formatting on stderr."""
    setup_logging(level=logging.INFO, format_as_json=True)

    assert len(restore_root_logger.handlers) == 1
    assert isinstance(restore_root_logger.handlers[0].formatter, CustomJsonFormatter)

    log_capture = io.StringIO()
    capture_handler = logging.StreamHandler(log_capture)
    capture_handler.setFormatter(restore_root_logger.handlers[0].formatter)
    restore_root_logger.addHandler(capture_handler)

    get_logger("test_setup").info("Test setup message", extra={"dataset": "ledger.csv"})

    lines = [json.loads(line) for line in log_capture.getvalue().splitlines() if line]
    test_line = next(line for line in lines if line.get("message") == "Test setup message")
    assert test_line["level"] == "INFO"
    assert test_line["service"] == SERVICE_NAME
    assert test_line["dataset"] == "ledger.csv"


def test_setup_logging_standard_format(restore_root_logger):
    """Test that setup_logging can use standard formatting."""
    setup_logging(level=logging.INFO, format_as_json=False)

    log_capture = io.StringIO()
    capture_handler = logging.StreamHandler(log_capture)
    capture_handler.setFormatter(restore_root_logger.handlers[0].formatter)
    restore_root_logger.addHandler(capture_handler)

    get_logger("test_standard").info("Test standard message")

    test_line = next(line for line in log_capture.getvalue().splitlines() if "Test standard message" in line)
    assert " - " in test_line
    assert "test_standard" in test_line
    assert "INFO" in test_line


def test_setup_logging_accepts_level_name(restore_root_logger):
    setup_logging(level="warning")
    assert restore_root_logger.level == logging.WARNING


def test_setup_logging_rejects_unknown_level(restore_root_logger):
    with pytest.raises(ValueError, match="Unknown log level"):
        setup_logging(level="CHATTY")


def test_get_logger():
    """Test that get_logger returns a named logger."""
    logger = get_logger("test_get_logger")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "test_get_logger"


def test_logging_levels():
    """Test that different logging levels work correctly with JSON format."""
    logger, handler, log_capture = _capture("test_levels", level=logging.DEBUG)
    try:
        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        levels = [json.loads(line)["level"] for line in log_capture.getvalue().strip().split('\n')]
    finally:
        logger.removeHandler(handler)

    assert levels == ["DEBUG", "INFO", "WARNING", "ERROR"]
