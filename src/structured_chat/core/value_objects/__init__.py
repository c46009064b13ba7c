from structured_chat.core.value_objects.answer_contract import (
    AnswerContract,
    BooleanContract,
    MultiChoiceContract,
    PatternContract,
    SingleChoiceContract,
)
from structured_chat.core.value_objects.message import Message
from structured_chat.core.value_objects.message_role import MessageRole
from structured_chat.core.value_objects.response_fragment import ResponseFragment
from structured_chat.core.value_objects.schema_constraint import SchemaConstraint

__all__ = [
    "AnswerContract",
    "BooleanContract",
    "Message",
    "MessageRole",
    "MultiChoiceContract",
    "PatternContract",
    "ResponseFragment",
    "SchemaConstraint",
    "SingleChoiceContract",
]
