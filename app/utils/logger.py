# app/utils/logger.py

"""
Structured logging for the application.

Every module obtains its logger through get_logger(__name__). The returned
logger accepts both key/value context and printf-style arguments:

    logger.info("Export job completed", job_id=job_id, records=12)
    logger.error("Error loading job %s: %s", job_id, exc, exc_info=True)
"""

import logging
import sys

import structlog

_CONFIGURED = False


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Install the structlog processor chain on top of stdlib logging.

    Safe to call more than once; the last call wins.
    """
    global _CONFIGURED

    log_level = getattr(logging, str(level).upper(), logging.INFO)

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.setLevel(log_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a logger bound to the given module name."""
    if not _CONFIGURED:
        configure_logging()
    return structlog.get_logger(name)
