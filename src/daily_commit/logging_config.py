"""Structured logging configuration using structlog.

Provides JSON output for production (parseable by ELK, Loki, CloudWatch)
and pretty console output for development.

Verbosity is enforced by the log gate: a structlog processor that drops
entries below the configured level (INFO < WARN < ERROR) before rendering.
"""

import logging
import sys
from enum import IntEnum

import structlog
from structlog.types import EventDict, WrappedLogger


class LogLevel(IntEnum):
    """Verbosity levels understood by the log gate, in ascending severity."""

    INFO = 1
    WARN = 2
    ERROR = 3

    @classmethod
    def parse(cls, value: str) -> "LogLevel":
        """Parse a configured level name ("WARNING" is accepted for WARN)."""
        name = value.strip().upper()
        if name == "WARNING":
            name = "WARN"
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Unknown log level: {value}") from None


# structlog method name -> gate level
_METHOD_LEVELS = {
    "debug": LogLevel.INFO,
    "info": LogLevel.INFO,
    "msg": LogLevel.INFO,
    "warning": LogLevel.WARN,
    "warn": LogLevel.WARN,
    "error": LogLevel.ERROR,
    "exception": LogLevel.ERROR,
    "critical": LogLevel.ERROR,
    "fatal": LogLevel.ERROR,
}


def should_emit(level: LogLevel, configured_level: LogLevel) -> bool:
    """Return True iff an entry at ``level`` passes ``configured_level``."""
    return level >= configured_level


class LogGate:
    """structlog processor that drops entries below the configured verbosity."""

    def __init__(self, configured_level: LogLevel):
        self.configured_level = configured_level

    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        level = _METHOD_LEVELS.get(method_name, LogLevel.INFO)
        if not should_emit(level, self.configured_level):
            raise structlog.DropEvent
        return event_dict


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add application context to all log events."""
    event_dict["app"] = "daily-commit"
    return event_dict


def configure_logging(log_level: str = "INFO", environment: str = "development") -> None:
    """Configure structlog for structured logging.

    Args:
        log_level: Gate level (INFO, WARN, ERROR)
        environment: Environment name (development, production)

    In production mode:
        - JSON output for machine parsing
        - ISO timestamps
        - Exception info included

    In development mode:
        - Pretty colored console output
        - Human-readable formatting
    """
    gate_level = LogLevel.parse(log_level)
    log_level_int = logging.INFO if gate_level is LogLevel.INFO else (
        logging.WARNING if gate_level is LogLevel.WARN else logging.ERROR
    )

    # Shared processors for all loggers
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]

    is_production = environment.lower() == "production"

    if is_production:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        # ConsoleRenderer formats exc_info itself
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[LogGate(gate_level)]
        + shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure standard library logging to work with structlog
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.setLevel(log_level_int)

    root_logger = logging.getLogger()
    # Clear existing handlers to avoid duplicates
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level_int)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("celery").setLevel(logging.INFO)

    logger = structlog.get_logger(__name__)
    logger.info(
        "Logging configured",
        log_level=gate_level.name,
        environment=environment,
        renderer="json" if is_production else "console",
    )
