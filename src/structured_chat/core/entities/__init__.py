from structured_chat.core.entities.chat_request import ChatRequest

__all__ = ["ChatRequest"]
