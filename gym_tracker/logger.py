"""
Structured Logging

Every storage-layer failure that is degraded to an empty/zero/false
result still has to leave a trace, so all modules log through structlog
with snake_case event names and key-value context:

    logger.error("customer_add_failed", error=str(e))

configure_logging() is idempotent and runs on import with the
environment's settings; the service calls it again with its own
settings object.
"""

import logging
from typing import Optional

import structlog

from gym_tracker.config import LoggingSettings


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Configure structlog on top of the standard library logger.

    Loggers are not cached on first use, so module-level loggers pick up
    a later reconfiguration (create_service applies its own settings
    after the import-time defaults).
    """
    settings = settings or LoggingSettings()

    logging.basicConfig(format="%(message)s", level=settings.level)
    logging.getLogger("gym_tracker").setLevel(settings.level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.json_output
        else structlog.dev.ConsoleRenderer()
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
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a named structured logger."""
    return structlog.get_logger(name)


configure_logging()
