"""Typed answer contracts: the four shapes a structured answer can take.

Each contract validates itself on construction and raises
``InvalidArgumentError`` for caller mistakes, so an invalid contract never
reaches the schema builder.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

from structured_chat.core.exceptions import InvalidArgumentError


def _is_blank(value: object) -> bool:
    return not isinstance(value, str) or not value.strip()


def _normalize_options(options: Sequence[str] | None) -> tuple[str, ...]:
    if options is None:
        raise InvalidArgumentError("options", "Options cannot be None.")
    if isinstance(options, (str, bytes)):
        raise InvalidArgumentError("options", "Options must be a sequence of strings, not a single string.")
    normalized = tuple(options)
    if not normalized:
        raise InvalidArgumentError("options", "Options cannot be empty.")
    if any(_is_blank(option) for option in normalized):
        raise InvalidArgumentError("options", "Options cannot contain empty or non-string values.")
    return normalized


@dataclass(frozen=True, slots=True)
class BooleanContract:
    pass


@dataclass(frozen=True, slots=True)
class SingleChoiceContract:
    options: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", _normalize_options(self.options))


@dataclass(frozen=True, slots=True)
class MultiChoiceContract:
    options: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", _normalize_options(self.options))


@dataclass(frozen=True, slots=True)
class PatternContract:
    pattern: str
    description: str | None = None

    def __post_init__(self) -> None:
        if _is_blank(self.pattern):
            raise InvalidArgumentError("pattern", "Pattern cannot be null or empty.")
        try:
            re.compile(self.pattern)
        except re.error as exc:
            raise InvalidArgumentError("pattern", f"Pattern is not a valid regular expression: {exc}") from exc

    def matches(self, value: str) -> bool:
        return re.search(self.pattern, value) is not None


AnswerContract = Union[BooleanContract, SingleChoiceContract, MultiChoiceContract, PatternContract]
