from __future__ import annotations

from dataclasses import dataclass

from structured_chat.core.value_objects.message_role import MessageRole


@dataclass(frozen=True, slots=True)
class Message:
    role: MessageRole
    content: str

    def __post_init__(self) -> None:
        if not self.content:
            raise ValueError("Message.content must be non-empty")

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}
