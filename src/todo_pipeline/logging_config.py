"""Structured logging configuration using structlog.

Pipeline records (traffic, retries, diagnostics) are emitted under the
`todo_pipeline` logger namespace. configure_logging() applies the requested
level to that namespace only; everything else (the host application,
third-party libraries) stays at WARNING unless the host configures it.

Output is JSON in PRODUCTION (parseable by ELK, Loki, CloudWatch) and a
colored console rendering for MOCK/DEVELOPMENT/STAGING runs. Every record
carries the app name and the active Environment.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from todo_pipeline.models.enums import Environment

APP_NAME = "todo-api-pipeline"
PACKAGE_LOGGER = "todo_pipeline"

# HTTP traffic is already recorded by TrafficLoggingTransport
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


def app_context(environment: Environment) -> Processor:
    """Processor stamping app name and environment onto every event."""

    def add_app_context(
        logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict["app"] = APP_NAME
        event_dict.setdefault("environment", environment.value)
        return event_dict

    return add_app_context


def configure_logging(
    log_level: str = "INFO", environment: Environment | str = Environment.DEVELOPMENT
) -> None:
    """Configure structlog for structured logging.

    Args:
        log_level: Level for the todo_pipeline namespace (DEBUG shows
            request/response traffic records)
        environment: Active Environment (or its name); selects the renderer
    """
    if not isinstance(environment, Environment):
        environment = Environment.parse(environment)
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)
    is_production = environment is Environment.PRODUCTION

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        app_context(environment),
    ]

    if is_production:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[structlog.stdlib.filter_by_level]
        + shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared_processors)
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger(PACKAGE_LOGGER).setLevel(log_level_int)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.get_logger(f"{PACKAGE_LOGGER}.logging").info(
        "Logging configured",
        log_level=logging.getLevelName(log_level_int),
        renderer="json" if is_production else "console",
    )
