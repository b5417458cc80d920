"""Logging configuration with structlog."""

import logging
import sys

import structlog

LIBRARY_LOGGER = "context_budget"

_handler: logging.Handler | None = None


def configure_logging(log_level: str = "info") -> None:
    """Configure structured logging for this library's loggers.

    Only the "context_budget" logger tree is touched; the host
    application's root logger is left as it is. Safe to call again
    with a different level.

    Args:
        log_level: Logging level (debug, info, warning, error)
    """
    global _handler

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    library_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter("%(message)s"))
        library_logger.addHandler(_handler)
        library_logger.propagate = False

    renderer = structlog.dev.ConsoleRenderer() if sys.stderr.isatty() else structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        # module-level loggers must pick up a later reconfiguration
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None):
    """Get a structured logger, named after the calling module."""
    return structlog.get_logger(name)
