from __future__ import annotations

from collections.abc import AsyncIterable

from structured_chat.core.value_objects.response_fragment import ResponseFragment


async def aggregate(fragments: AsyncIterable[ResponseFragment | None]) -> str:
    """Concatenate fragment text in arrival order up to the first terminal fragment.

    Nothing after the terminal fragment is pulled from *fragments*; some
    transports keep the connection open after signalling completion.
    """
    parts: list[str] = []
    async for fragment in fragments:
        if fragment is None:
            continue
        if fragment.text:
            parts.append(fragment.text)
        if fragment.done:
            break
    return "".join(parts)
