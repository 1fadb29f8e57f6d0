"""
Centralized Logging Configuration.

Every module logs through structlog loggers obtained from get_logger().
Handler settings come from config/settings/logging.yaml, validated as
LoggingSchema, and can be overridden by the command line.

The interactive console belongs to the shell. Log records therefore go to
a rotating JSONL file, and to stderr only when --verbose or --debug asks.

Record fields:
    timestamp   - ISO 8601 UTC timestamp
    level       - debug, info, warning, error, critical
    logger      - Module path (e.g., pcui.client.transport)
    event       - Log message
    func_name   - Function that emitted the record
    lineno      - Line number in source file
    source      - Origin context, set explicitly (cli, shell, session, transport, internal)

Access tokens and passwords are never passed as fields.

Usage:
    from pcui.core.logging import get_logger, log_with_source, setup_logging

    setup_logging()                                  # logging.yaml as-is
    setup_logging(level="DEBUG", enable_console=True)

    logger = get_logger(__name__)
    log_with_source(logger, "transport", "debug", "HTTP request", method="GET")
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Any

import structlog
from structlog.typing import Processor

from pcui.core.config import get_app_config, resolve_project_path
from pcui.core.config_schema import FileHandlerSchema, LoggingSchema

VALID_SOURCES = frozenset({
    "cli",
    "shell",
    "session",
    "transport",
    "internal",
})
"""Recognized `source` values. Callers always pass one explicitly."""

QUIET_LIBRARIES = ("httpx", "httpcore")


def _load_logging_settings() -> LoggingSchema:
    return get_app_config().logging


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def _formatter(renderer: Processor, pre_chain: list[Processor]) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)


def _file_handler(settings: FileHandlerSchema, formatter: logging.Formatter) -> RotatingFileHandler:
    """Rotating JSONL handler; the log directory is created if missing."""
    path = resolve_project_path(settings.path)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=settings.max_bytes,
        backupCount=settings.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Arguments left as None take their value from logging.yaml.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        format_type: 'json' or 'console' rendering for the stderr handler
        enable_console: Attach a stderr handler
        enable_file_logging: Attach the rotating JSONL file handler
    """
    settings = _load_logging_settings()

    level = level if level is not None else settings.level
    format_type = format_type if format_type is not None else settings.format
    if enable_console is None:
        enable_console = settings.handlers.console.enabled
    if enable_file_logging is None:
        enable_file_logging = settings.handlers.file.enabled

    processors = _shared_processors()
    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = _formatter(structlog.processors.JSONRenderer(), processors)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if enable_console:
        if format_type == "console":
            console_formatter = _formatter(structlog.dev.ConsoleRenderer(colors=True), processors)
        else:
            console_formatter = json_formatter
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

    if enable_file_logging:
        root_logger.addHandler(_file_handler(settings.handlers.file, json_formatter))

    # httpx logs every request at INFO; the transport logs its own records
    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """
    Get a logger instance for the given name.

    Args:
        name: Logger name, typically __name__

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log a message with an explicit source.

    Args:
        logger: The logger instance
        source: Log source (cli, shell, session, transport, internal)
        level: Log level (debug, info, warning, error, critical)
        message: Log message
        **kwargs: Additional context fields

    Raises:
        AttributeError: If level is not a valid log level

    Example:
        log_with_source(logger, "session", "info", "Login succeeded", url=cell_url)
    """
    log_method = getattr(logger, level.lower())
    log_method(message, source=source, **kwargs)
