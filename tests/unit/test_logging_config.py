"""
Unit tests for the log gate and logging configuration.
"""

import logging

import pytest
import structlog

from daily_commit.logging_config import LogGate, LogLevel, configure_logging, should_emit


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.mark.parametrize(
    "level,configured,expected",
    [
        (LogLevel.INFO, LogLevel.INFO, True),
        (LogLevel.WARN, LogLevel.INFO, True),
        (LogLevel.ERROR, LogLevel.INFO, True),
        (LogLevel.INFO, LogLevel.WARN, False),
        (LogLevel.WARN, LogLevel.WARN, True),
        (LogLevel.ERROR, LogLevel.WARN, True),
        (LogLevel.INFO, LogLevel.ERROR, False),
        (LogLevel.WARN, LogLevel.ERROR, False),
        (LogLevel.ERROR, LogLevel.ERROR, True),
    ],
)
def test_should_emit_table(level, configured, expected):
    """Test an entry passes iff its level is at least the configured level."""
    assert should_emit(level, configured) is expected


@pytest.mark.parametrize(
    "name,expected",
    [
        ("INFO", LogLevel.INFO),
        ("info", LogLevel.INFO),
        ("WARN", LogLevel.WARN),
        ("warning", LogLevel.WARN),
        (" ERROR ", LogLevel.ERROR),
    ],
)
def test_parse_level_names(name, expected):
    """Test configured level names are parsed case-insensitively."""
    assert LogLevel.parse(name) is expected


def test_parse_unknown_level():
    """Test unknown level names are rejected."""
    with pytest.raises(ValueError):
        LogLevel.parse("VERBOSE")


def test_gate_passes_entries_at_or_above_level():
    """Test the processor returns the event dict unchanged when emitted."""
    gate = LogGate(LogLevel.WARN)
    event = {"event": "disk almost full"}

    assert gate(None, "warning", event) is event
    assert gate(None, "error", event) is event


@pytest.mark.parametrize("method_name", ["debug", "info"])
def test_gate_drops_entries_below_level(method_name):
    """Test the processor drops entries below the configured level."""
    gate = LogGate(LogLevel.WARN)

    with pytest.raises(structlog.DropEvent):
        gate(None, method_name, {"event": "noise"})


@pytest.mark.parametrize("environment", ["development", "production"])
def test_configure_logging_installs_gate(environment, reset_structlog):
    """Test the gate is the first processor for both renderers."""
    configure_logging("ERROR", environment)

    processors = structlog.get_config()["processors"]
    assert isinstance(processors[0], LogGate)
    assert processors[0].configured_level is LogLevel.ERROR


def test_configure_logging_development_renders_exceptions(reset_structlog, capsys):
    """Test the development console renderer logs an exception without failing."""
    configure_logging("INFO", "development")

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        structlog.get_logger("test").exception("Operation failed")

    logging.getLogger().handlers.clear()
    output = capsys.readouterr().out
    assert "Operation failed" in output
    assert "RuntimeError" in output
