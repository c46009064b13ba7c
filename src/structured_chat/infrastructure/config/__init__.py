from structured_chat.infrastructure.config.container import build_structured_chat

__all__ = ["build_structured_chat"]
