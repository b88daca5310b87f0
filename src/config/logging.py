"""Structured logging configuration using structlog."""
import logging
import sys
from typing import Any, Optional

import structlog
from pythonjsonlogger import jsonlogger

from src.config.settings import settings

# Third-party loggers kept at WARNING regardless of LOG_LEVEL
QUIET_LOGGERS = ("httpcore", "httpx", "uvicorn.access", "redis")

JSON_FIELDS = "%(asctime)s %(levelname)s %(name)s %(message)s"
CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def add_property_id(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Tag every event with the property the service is scoped to.

    An explicit property_id bound by the caller wins.
    """
    event_dict.setdefault("property_id", settings.property.property_id)
    return event_dict


def build_handler(log_format: str, level: int) -> logging.Handler:
    """Stdout handler rendering JSON lines or plain console text."""
    handler = logging.StreamHandler(sys.stdout)
    if log_format == "json":
        handler.setFormatter(jsonlogger.JsonFormatter(JSON_FIELDS))
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handler.setLevel(level)
    return handler


def configure_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Route structlog through the stdlib root logger.

    Args:
        level: Log level name, defaults to LOG_LEVEL
        log_format: 'json' or 'console', defaults to LOG_FORMAT
    """
    log_format = log_format or settings.logging.format
    log_level = getattr(logging, level or settings.logging.level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(build_handler(log_format, log_level))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            add_property_id,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Logger bound to the given module name."""
    return structlog.get_logger(name)
