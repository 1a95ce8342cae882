"""
Structured logging setup (structlog)

Every module gets its logger with ``structlog.get_logger()`` and logs
event-style names with keyword context, e.g.::

    logger.info("kitchen_cache_hit", house_id=house_id, kitchen_id=kitchen_id)

Call ``configure_logging()`` once at process start (scripts, app shell).
"""
import logging

import structlog


def configure_logging(level: str = "INFO", json: bool = True) -> None:
    """Configure structlog processors and level filtering."""
    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
