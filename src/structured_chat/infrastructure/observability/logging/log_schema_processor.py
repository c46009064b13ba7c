"""JSON log document for structured-chat events.

Flat structlog keys emitted by the facade, the decoder and the transport are
grouped into named blocks; keys no block claims land in ``extra``.
"""

from __future__ import annotations

import os
from typing import Any

from opentelemetry import trace

# block name -> {event key: field name inside the block}
_BLOCKS: dict[str, dict[str, str]] = {
    "request": {
        "context_component": "component",
        "answer_variant": "variant",
        "llm_model": "model",
        "answer_schema": "schema",
        "json_schema": "json_schema",
        "stream": "stream",
        "api_base": "api_base",
        "prompt_text": "prompt",
    },
    "answer": {
        "question": "question",
        "options": "options",
        "pattern": "pattern",
        "answer": "value",
        "selected": "value",
        "raw_response": "raw",
        "raw_excerpt": "excerpt",
    },
    "llm": {
        "status": "status",
        "duration_ms": "duration_ms",
        "tokens_in": "tokens_in",
        "tokens_out": "tokens_out",
    },
    "error": {
        "error_type": "type",
        "error_details": "details",
    },
}


def _pop_block(event_dict: dict[str, Any], fields: dict[str, str]) -> dict[str, Any]:
    return {name: event_dict.pop(key) for key, name in fields.items() if key in event_dict}


def _trace_block() -> dict[str, str] | None:
    """Plain hex OTel ids of the current span, or None outside a recording span."""
    span = trace.get_current_span()
    if not span.is_recording():
        return None
    ctx = span.get_span_context()
    return {"trace_id": format(ctx.trace_id, "032x"), "span_id": format(ctx.span_id, "016x")}


def log_schema_processor(
    logger: Any,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that nests a flat event_dict into the structured-chat log document."""
    document: dict[str, Any] = {
        "timestamp": event_dict.pop("timestamp", None),
        "level": event_dict.pop("level", "info"),
        "service": os.environ.get("SERVICE_NAME", "structured-chat"),
        "environment": os.environ.get("APP_ENV", "local"),
        "message": event_dict.pop("event", ""),
    }

    trace_ids = _trace_block()
    if trace_ids is not None:
        document["trace"] = trace_ids

    for name, fields in _BLOCKS.items():
        block = _pop_block(event_dict, fields)
        if block:
            document[name] = block

    tags = event_dict.pop("tags", None)
    if tags is not None:
        document["tags"] = tags

    if event_dict:
        document["extra"] = dict(event_dict)

    return document
