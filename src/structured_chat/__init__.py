"""Typed, schema-constrained answers from chat-completion models."""

from structured_chat.core.application.ports import ChatTransportPort
from structured_chat.core.application.services.schema_builder import build_schema
from structured_chat.core.application.structured_chat import StructuredChat
from structured_chat.core.entities.chat_request import ChatRequest
from structured_chat.core.exceptions import InvalidArgumentError, TransportError
from structured_chat.core.value_objects import (
    AnswerContract,
    BooleanContract,
    MultiChoiceContract,
    PatternContract,
    ResponseFragment,
    SingleChoiceContract,
)

__all__ = [
    "AnswerContract",
    "BooleanContract",
    "ChatRequest",
    "ChatTransportPort",
    "InvalidArgumentError",
    "MultiChoiceContract",
    "PatternContract",
    "ResponseFragment",
    "SingleChoiceContract",
    "StructuredChat",
    "TransportError",
    "build_schema",
]
