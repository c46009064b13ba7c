from structured_chat.infrastructure.adapters.llm.config.llm_settings import LlmSettings

__all__ = ["LlmSettings"]
