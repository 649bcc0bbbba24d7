import sys
import logging
from typing import List

import structlog
from structlog.typing import Processor

from emgdx.core.config import settings


def _shared_processors() -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,  # request_id, method, path from the HTTP middleware
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.LINENO,
            }
        ),
    ]


def _renderers() -> List[Processor]:
    if settings.ENVIRONMENT == "production":
        return [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    # Test output is captured by pytest; colour codes only get in the way there
    return [
        structlog.processors.StackInfoRenderer(),
        structlog.dev.ConsoleRenderer(colors=settings.ENVIRONMENT == "development"),
    ]


def _log_uncaught(exc_type, exc_value, exc_traceback):
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    structlog.get_logger().critical(
        "uncaught_exception",
        exc_info=(exc_type, exc_value, exc_traceback),
    )


def setup_logging():
    """
    Configures structlog: JSON lines in production, console output elsewhere.
    The level comes from LOG_LEVEL and applies to stdlib loggers too.
    """
    level = logging.getLevelName(settings.LOG_LEVEL)

    structlog.configure(
        processors=_shared_processors() + _renderers(),
        logger_factory=structlog.PrintLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    # uvicorn logs through stdlib
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    sys.excepthook = _log_uncaught
