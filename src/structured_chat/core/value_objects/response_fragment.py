from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ResponseFragment:
    """One incremental piece of a chat response as produced by a transport."""

    text: str | None = None
    done: bool = False
