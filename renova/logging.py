"""structlog configuration for the API process."""

from __future__ import annotations

import logging
from typing import TextIO

import structlog

from renova.config import settings


def configure_logging(stream: TextIO | None = None) -> None:
    """Console renderer in development, JSON lines everywhere else.

    Output goes to `stream`, stdout by default.

    Request ids and the caller's user id arrive through contextvars; see the
    middleware in `renova.main` and `renova.api.auth`.
    """
    development = settings.environment == "development"
    level = logging.getLevelNamesMapping().get(settings.log_level.upper(), logging.INFO)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if development:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        # JSON consumers need the traceback as a field, not pretty-printed
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )
