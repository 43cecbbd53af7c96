from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(log_level: str) -> None:
    # Logs go to stderr so CLI stdout stays machine readable.
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level.upper())
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(log_level.upper())),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Events end up in the stdlib "sqlite_testkit" logger, so an application that never
# configures logging sees nothing below WARNING; structlog's processors still apply.
logger = structlog.wrap_logger(logging.getLogger("sqlite_testkit"))
