from __future__ import annotations

from dataclasses import dataclass

from structured_chat.core.value_objects.message import Message
from structured_chat.core.value_objects.message_role import MessageRole
from structured_chat.core.value_objects.schema_constraint import SchemaConstraint


@dataclass(frozen=True, slots=True)
class ChatRequest:
    model: str
    messages: tuple[Message, ...]
    constraint: SchemaConstraint
    stream: bool = False

    def __post_init__(self) -> None:
        if not self.model:
            raise ValueError("ChatRequest.model must be non-empty")
        if not self.messages:
            raise ValueError("ChatRequest.messages must be non-empty")

    @classmethod
    def for_question(
        cls, model: str, question: str, constraint: SchemaConstraint, stream: bool = False
    ) -> ChatRequest:
        """Single user-role message carrying *question*."""
        return cls(
            model=model,
            messages=(Message(role=MessageRole.USER, content=question),),
            constraint=constraint,
            stream=stream,
        )
