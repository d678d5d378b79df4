"""Structured logging setup.

Everything goes to stderr: stdout carries the MCP stdio protocol and must
stay clean.
"""

import logging
import sys

import structlog
from structlog.stdlib import LoggerFactory


def configure_logging(level: str = "WARNING", format_type: str = "json") -> None:
    """Configure structlog over stdlib logging.

    Args:
        level: stdlib level name (DEBUG, INFO, WARNING, ERROR).
        format_type: ``json`` for machine-readable lines, ``pretty`` for a
            console renderer (used by the installer CLI).
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if format_type == "pretty":
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))
    logging.getLogger("httpcore").setLevel(max(log_level, logging.WARNING))
