"""Logging setup for hosts embedding structured-chat.

structlog renders both its own events and stdlib records (litellm, httpx):
JSON documents shaped by ``log_schema_processor`` in deployed environments,
a console renderer locally.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

from structured_chat.infrastructure.observability.logging.log_schema_processor import (
    log_schema_processor,
)

JSON_ENVIRONMENTS = ("qa", "staging", "prod", "production")
NOISY_LOGGERS = ("LiteLLM", "httpx", "httpcore")

_CONFIGURED = False


def configure_logging() -> None:
    """Configure structlog and the root stdlib logger once per process.

    LOG_FORMAT (json|console) wins over APP_ENV; LOG_LEVEL defaults to INFO.
    """
    global _CONFIGURED  # noqa: PLW0603
    if _CONFIGURED:
        return
    _CONFIGURED = True

    json_output = wants_json()
    level = log_level()
    processors = _shared_processors(json_output)
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )

    structlog.configure(
        processors=[*processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _route_stdlib(processors, renderer, level)


def get_logger(component: str) -> Any:
    """Return a structlog logger pre-bound with context_component."""
    return structlog.get_logger().bind(context_component=component)


def wants_json() -> bool:
    log_format = os.environ.get("LOG_FORMAT", "").lower()
    if log_format in ("json", "console"):
        return log_format == "json"
    return os.environ.get("APP_ENV", "local").lower() in JSON_ENVIRONMENTS


def log_level() -> int:
    return logging.getLevelNamesMapping().get(os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)


def _shared_processors(json_output: bool) -> list[Any]:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_output:
        processors.append(log_schema_processor)
    return processors


def _route_stdlib(processors: list[Any], renderer: Any, level: int) -> None:
    """Send stdlib records through the same processors; third-party chatter capped at WARNING."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *processors, renderer],
        )
    )
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
