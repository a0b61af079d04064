"""
Structured logging for the swap service.

JSON lines by default, a console renderer for the CLI and local runs. Prices
and quote amounts are ``Decimal`` values; they are rendered as exact strings
so a logged quote reads the same as the API response it came from.
"""

import logging
import sys
from decimal import Decimal
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from .config import settings

# Chatty third-party loggers
QUIET_LOGGERS = ("uvicorn.access", "httpcore", "httpx")


def _render_decimal(value: Any) -> Any:
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, (list, tuple)):
        return type(value)(_render_decimal(item) for item in value)
    if isinstance(value, dict):
        return {key: _render_decimal(item) for key, item in value.items()}
    return value


def decimals_to_str(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Render Decimal values as plain strings, including inside lists and dicts."""
    return {key: _render_decimal(value) for key, value in event_dict.items()}


def build_renderer(log_format: str) -> Processor:
    if log_format == "console":
        return structlog.dev.ConsoleRenderer()
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    raise ValueError(f"Unknown log format: {log_format!r}")


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure structlog and route stdlib loggers through it.

    Args:
        log_level: Override log level (default: settings.log_level)
        log_format: "json" or "console" (default: settings.log_format)
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    renderer = build_renderer(log_format or settings.log_format)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        decimals_to_str,
    ]
    if isinstance(renderer, structlog.processors.JSONRenderer):
        shared_processors.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Session and price feed modules log through stdlib
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
