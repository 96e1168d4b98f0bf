"""Structured logging configuration."""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, MutableMapping

import structlog
from structlog.stdlib import LoggerFactory

# Event keys whose values must never reach a log sink
PHI_FIELD_NAMES = frozenset(
    {
        "first_name",
        "last_name",
        "patient_name",
        "subscriber_name",
        "date_of_birth",
        "dob",
        "member_id",
        "subscriber_id",
        "ssn",
        "group_number",
        "password",
        "username",
        "authorization",
        "payload",
        "raw_x12",
    }
)

REDACTION_MARKER = "[REDACTED]"


def redact_phi(logger: Any, method_name: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Replace PHI-bearing values with a redaction marker before rendering."""
    for key in list(event_dict.keys()):
        if key.lower() in PHI_FIELD_NAMES and event_dict[key] is not None:
            event_dict[key] = REDACTION_MARKER
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: str = None,
    log_dir: str = "logs",
) -> None:
    """
    Configure structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ("json" or "console")
        log_file: Optional log file name (if None, logs to stdout)
        log_dir: Directory for log files (default: "logs")
    """
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        redact_phi,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, log_level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # Repeated configuration must not stack handlers
    root_logger.handlers = []

    handlers = []
    if log_file:
        log_path = Path(log_dir)
        log_path.mkdir(exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_path / log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=10,
            )
        )
        if os.getenv("ENVIRONMENT", "development") == "development":
            handlers.append(logging.StreamHandler(sys.stdout))
    else:
        handlers.append(logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(handler)


def get_logger(name: str) -> Any:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
