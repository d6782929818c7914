"""Structured logging configuration using structlog.

Human-readable console output in development (or LOG_FORMAT=text),
JSON lines otherwise. Modules keep using ``logging.getLogger(__name__)``
or ``structlog.get_logger(__name__)``; both end up in the same handler.
"""

import logging
import sys
from typing import Optional

import structlog

# Third-party loggers that are noisy at INFO
_QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "aiosqlite", "passlib")


def setup_logging(
    level: Optional[str] = None,
    fmt: Optional[str] = None,
    stream=None,
) -> None:
    """Configure structured logging for the whole process.

    Args:
        level: Log level name; defaults to LOG_LEVEL
        fmt: "json" or "text"; defaults to LOG_FORMAT ("text" forced in development)
        stream: Output stream (stdout by default)
    """
    echo_sql = False
    if level is None or fmt is None:
        from app.config import get_settings

        settings = get_settings()
        level = level or settings.LOG_LEVEL
        if fmt is None:
            fmt = "text" if settings.is_development else settings.LOG_FORMAT
        echo_sql = settings.SQLALCHEMY_ECHO

    # Shared processors, applied to every log entry
    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if fmt == "text":
        renderer = structlog.dev.ConsoleRenderer(colors=(stream or sys.stdout).isatty())
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # stdlib records go through the same renderer
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if echo_sql else logging.WARNING
    )
