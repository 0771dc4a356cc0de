"""Logging configuration for the purchasing domain.

structlog sits on top of stdlib logging so Protean's own loggers and ours
share handlers. Production and staging render JSON; everything else gets the
colored console renderer. Test runs log to the console only.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

import structlog

_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


def current_environment() -> str:
    return (os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """Log level for the current environment, overridable with LOG_LEVEL."""
    return os.getenv("LOG_LEVEL", _LEVELS.get(current_environment(), "INFO"))


def _rotating_handler(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(log_dir: str = "logs") -> None:
    """Configure standard library logging."""
    log_level = get_log_level()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    if current_environment() != "test":
        log_path = Path(log_dir)
        log_path.mkdir(exist_ok=True)
        root_logger.addHandler(_rotating_handler(log_path / "purchasing.log", log_level))
        root_logger.addHandler(_rotating_handler(log_path / "purchasing_error.log", logging.ERROR))

    logging.getLogger("protean").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def setup_structlog() -> None:
    """Configure structlog for structured logging."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
    ]

    if current_environment() in ("production", "staging"):
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.RichTracebackFormatter(
                    show_locals=True,
                    max_frames=2,
                ),
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_dir: str = "logs") -> None:
    """Configure all logging for the application."""
    setup_stdlib_logging(log_dir=log_dir)
    setup_structlog()


def bind_request_context(method: str, path: str, buyer_id: str | None) -> None:
    """Attach the caller and route to every log line emitted while serving a request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(method=method, path=path, buyer_id=buyer_id)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
