"""Pure functions that turn an answer contract into the constraint sent to the model."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from structured_chat.core.application.contracts.answer_schemas import (
    AnswerSchema,
    BooleanAnswer,
    MultiChoiceAnswer,
    PatternAnswer,
    SingleChoiceAnswer,
)
from structured_chat.core.value_objects.answer_contract import (
    AnswerContract,
    BooleanContract,
    MultiChoiceContract,
    PatternContract,
    SingleChoiceContract,
)
from structured_chat.core.value_objects.schema_constraint import SchemaConstraint

PATTERN_DESCRIPTION_PREFIX = "Must match the regex pattern: "


def build_schema(contract: AnswerContract) -> tuple[SchemaConstraint, type[AnswerSchema]]:
    """Return the schema constraint for *contract* and the model its answer decodes into."""
    try:
        name, builder, shape = _BUILDERS[type(contract)]
    except KeyError:
        raise TypeError(f"Unsupported answer contract: {type(contract).__name__}") from None
    return SchemaConstraint(name=name, json_schema=builder(contract)), shape


def _object_schema(field: str, fragment: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {field: fragment},
        "required": [field],
    }


def _boolean_schema(_contract: BooleanContract) -> dict[str, Any]:
    return _object_schema("answer", {"type": "boolean"})


def _single_choice_schema(contract: SingleChoiceContract) -> dict[str, Any]:
    return _object_schema("selected", {"type": "string", "enum": list(contract.options)})


def _multi_choice_schema(contract: MultiChoiceContract) -> dict[str, Any]:
    items = {"type": "string", "enum": list(contract.options)}
    return _object_schema("selected", {"type": "array", "items": items})


def _pattern_schema(contract: PatternContract) -> dict[str, Any]:
    description = contract.description or f"{PATTERN_DESCRIPTION_PREFIX}{contract.pattern}"
    return _object_schema("answer", {"type": "string", "description": description})


_BUILDERS: dict[type, tuple[str, Callable[[Any], dict[str, Any]], type[AnswerSchema]]] = {
    BooleanContract: ("boolean_answer", _boolean_schema, BooleanAnswer),
    SingleChoiceContract: ("single_choice_answer", _single_choice_schema, SingleChoiceAnswer),
    MultiChoiceContract: ("multi_choice_answer", _multi_choice_schema, MultiChoiceAnswer),
    PatternContract: ("pattern_answer", _pattern_schema, PatternAnswer),
}
