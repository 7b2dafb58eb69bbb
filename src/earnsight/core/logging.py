"""Structured logging configuration with structlog."""

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from earnsight.config import Settings

# Libraries that log every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def resolve_log_level(settings: "Settings") -> int:
    """``EARNSIGHT_DEBUG`` forces DEBUG regardless of ``EARNSIGHT_LOG_LEVEL``."""
    if settings.debug:
        return logging.DEBUG
    return int(getattr(logging, settings.log_level))


def _app_context(settings: "Settings") -> structlog.types.Processor:
    """Stamp every event with the data source so mock output is never mistaken for live."""
    source = "mock" if settings.mock_mode else settings.data_provider

    def add_source(
        logger: object, method_name: str, event_dict: structlog.types.EventDict
    ) -> structlog.types.EventDict:
        event_dict.setdefault("source", source)
        return event_dict

    return add_source


def setup_logging(settings: "Settings") -> None:
    """Configure structlog for the gateway and the CLI.

    Development gets the colored console renderer; staging and production get
    one JSON object per line on stderr.
    """
    level = resolve_log_level(settings)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _app_context(settings),
    ]

    if settings.env == "development":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer(colors=True)
        processors = [*shared_processors, renderer]
    else:
        processors = [
            *shared_processors,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(levelname)s %(name)s %(message)s",
        level=level,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if settings.debug else logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
