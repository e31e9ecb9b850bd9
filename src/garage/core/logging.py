"""Structured logging for the garage API.

structlog renders every record, including those from stdlib loggers such as
uvicorn and SQLAlchemy, so all output shares one format: JSON lines in
production and colored console lines in development.

Request-scoped fields live in structlog's context variables. The request
middleware binds ``request_id`` and authenticated requests add ``username``,
so every event logged while serving a request carries them.

Usage:
    from garage.core.logging import configure_logging, get_logger

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info("car_fetch_from_db", car_id=42)
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from garage.config import Settings

SERVICE_NAME = "garage"


def bind_request_context(request_id: str) -> None:
    """Start a fresh log context for one request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)


def bind_user(username: str) -> None:
    """Tag the rest of the request's events with the authenticated user."""
    structlog.contextvars.bind_contextvars(username=username)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def add_service(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _renderer(settings: Settings) -> Processor:
    if settings.use_json_logs:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(settings: Settings) -> None:
    """Route structlog and stdlib logging through one stdout handler.

    Safe to call more than once; the root handler is replaced each time.
    """
    level = logging.getLevelName(settings.log_level.value)

    # Applied to structlog events and to foreign stdlib records alike
    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        add_service,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    processors: list[Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
    ]
    if settings.use_json_logs:
        processors.append(structlog.processors.format_exc_info)
    processors.append(_renderer(settings))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=processors,
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.debug else logging.WARNING
    )
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
