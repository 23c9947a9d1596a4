"""structlog setup — console output in development, JSON elsewhere.

Learn: Modules only ever call structlog.get_logger() and emit
event-style keys ("board.created", "auth.login.failed") with keyword
context. This module decides how those events are rendered, once, at
startup. merge_contextvars pulls in the request_id bound by
RequestIdMiddleware.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from gamegauge.config import Settings


def configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.environment == "development" or settings.debug:
        processors: list[Processor] = [*shared, structlog.dev.ConsoleRenderer()]
    else:
        processors = [
            *shared,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    # Uvicorn's access log duplicates our http.request line.
    for name in ("uvicorn.access", "httpx", "httpcore", "aiosmtplib"):
        logging.getLogger(name).setLevel(logging.WARNING)
