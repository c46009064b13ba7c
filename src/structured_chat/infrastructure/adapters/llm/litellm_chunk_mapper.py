"""Pure functions mapping litellm responses onto ``ResponseFragment``."""

from __future__ import annotations

from typing import Any

from structured_chat.core.value_objects.response_fragment import ResponseFragment


def chunk_to_fragment(chunk: Any) -> ResponseFragment | None:
    """Map one streaming chunk; ``None`` when the chunk carries no choice."""
    choices = getattr(chunk, "choices", None)
    if not choices:
        return None
    choice = choices[0]
    delta = getattr(choice, "delta", None)
    text = getattr(delta, "content", None) if delta is not None else None
    return ResponseFragment(text=text, done=getattr(choice, "finish_reason", None) is not None)


def completion_to_fragment(response: Any) -> ResponseFragment:
    """Map a non-streaming completion to a single terminal fragment."""
    choices = getattr(response, "choices", None)
    if not choices:
        return ResponseFragment(text=None, done=True)
    message = getattr(choices[0], "message", None)
    return ResponseFragment(text=getattr(message, "content", None), done=True)


def token_usage(response: Any) -> tuple[int, int]:
    """``(prompt_tokens, completion_tokens)`` reported by *response*, zeros when absent."""
    usage = getattr(response, "usage", None)
    if usage is None:
        return 0, 0
    return getattr(usage, "prompt_tokens", 0) or 0, getattr(usage, "completion_tokens", 0) or 0
