"""Structured logging for ranking requests.

Events are snake_case names with keyword fields. Each record carries its
level and an ISO timestamp; records emitted while a request is being
served also carry that request's ID.
"""

import logging
import sys
from typing import TextIO

import structlog


REQUEST_ID_KEY = "request_id"


def _build_processors(json_format: bool) -> list[structlog.types.Processor]:
    renderer: structlog.types.Processor
    if json_format:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
        renderer,
    ]


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Send structlog and stdlib records to one stream.

    Ranked IDs go to stdout, so logs default to stderr.

    Args:
        level: Minimum level emitted.
        output: Destination stream.
        json_format: One JSON object per line when True, console lines otherwise.
    """
    structlog.configure(
        processors=_build_processors(json_format),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=output, level=level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, optionally named."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger


def bind_request_context(request_id: str) -> None:
    """Tag every following record in this context with request_id."""
    structlog.contextvars.bind_contextvars(**{REQUEST_ID_KEY: request_id})


def clear_request_context() -> None:
    """Stop tagging records with the current request_id."""
    structlog.contextvars.unbind_contextvars(REQUEST_ID_KEY)
