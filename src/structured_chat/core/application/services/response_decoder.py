"""Strict decoding of the aggregated model output into an answer schema.

This is the error boundary for malformed model output: every failure is
logged and reported as ``None``.
"""

from __future__ import annotations

from typing import TypeVar

import structlog
from pydantic import ValidationError

from structured_chat.core.application.contracts.answer_schemas import AnswerSchema

T = TypeVar("T", bound=AnswerSchema)

EXCERPT_LIMIT = 200

logger = structlog.get_logger()


def decode(raw: str | None, schema: type[T]) -> T | None:
    """Validate *raw* JSON against *schema*, returning ``None`` on any mismatch."""
    if raw is None or not raw.strip():
        logger.warning(
            "Model returned empty content",
            answer_schema=schema.__name__,
            error_type="EmptyResponse",
        )
        return None
    try:
        return schema.model_validate_json(raw)
    except ValidationError as exc:
        logger.warning(
            "Model output failed schema validation",
            answer_schema=schema.__name__,
            error_type=type(exc).__name__,
            error_details=_summarize(exc),
            raw_excerpt=_excerpt(raw),
        )
        return None


def _summarize(exc: ValidationError) -> str:
    """One line per error: ``location: message``."""
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
        for err in exc.errors()
    )


def _excerpt(raw: str) -> str:
    if len(raw) <= EXCERPT_LIMIT:
        return raw
    return raw[:EXCERPT_LIMIT] + "..."
