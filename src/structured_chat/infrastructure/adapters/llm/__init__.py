from structured_chat.infrastructure.adapters.llm.litellm_chat_transport import LiteLlmChatTransport

__all__ = ["LiteLlmChatTransport"]
