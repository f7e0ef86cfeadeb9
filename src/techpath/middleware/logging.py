"""Structured logging configuration with structlog."""

import logging

import structlog

from techpath.config import Settings


def setup_logging(settings: Settings) -> None:
    """Configure structlog for JSON (deployed) or console (local) output.

    Stdlib loggers used by the services share the root level, so both
    styles end up in the same stream.
    """
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if settings.log_format == "json" else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )
    # SQL echo is controlled by the engine; keep the driver quiet.
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
