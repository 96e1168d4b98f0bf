"""
Gateway setup.

Logging has to be configured from settings before any transaction runs, so
that PHI redaction is installed ahead of the first log line. Long-running
callers should call `setup_gateway()` at process start; the orchestrator
calls `ensure_logging_configured()` so that direct library use gets the
same redacting pipeline.
"""
from typing import Optional

from x12gateway.config.settings import ClearinghouseSettings, get_settings
from x12gateway.utils.logger import configure_logging, get_logger

_logging_configured = False


def setup_gateway(settings: Optional[ClearinghouseSettings] = None) -> ClearinghouseSettings:
    """
    Configure logging from settings.

    Reads LOG_LEVEL, LOG_FORMAT, LOG_FILE and LOG_DIR through the settings
    object and installs the structlog pipeline, including PHI redaction.

    Returns:
        The settings that were applied.
    """
    global _logging_configured
    settings = settings or get_settings()
    configure_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        log_dir=settings.log_dir,
    )
    _logging_configured = True
    get_logger(__name__).info(
        "Gateway logging configured",
        log_level=settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
    )
    return settings


def ensure_logging_configured(settings: Optional[ClearinghouseSettings] = None) -> None:
    """Run setup_gateway() once per process; later calls leave logging alone."""
    if not _logging_configured:
        setup_gateway(settings)


def reset_setup() -> None:
    """Forget that setup ran so the next ensure_logging_configured() runs it again."""
    global _logging_configured
    _logging_configured = False
