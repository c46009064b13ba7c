"""Composition root — builds a fully-wired StructuredChat from settings."""

from structured_chat.core.application.structured_chat import StructuredChat
from structured_chat.infrastructure.adapters.llm.config.llm_settings import LlmSettings
from structured_chat.infrastructure.adapters.llm.litellm_chat_transport import (
    LiteLlmChatTransport,
)
from structured_chat.infrastructure.observability.logger_factory_service import (
    configure_logging,
    get_logger,
)
from structured_chat.infrastructure.observability.tracing_setup import configure_tracing


def build_structured_chat(settings: LlmSettings | None = None) -> StructuredChat:
    """Wire the litellm transport into a StructuredChat bound to ``settings.model``.

    Settings are read from the environment / ``.env`` when not supplied.
    """
    configure_logging()
    configure_tracing()

    settings = settings or LlmSettings()
    get_logger("container").info(
        "Structured chat configured",
        llm_model=settings.model,
        api_base=settings.api_base,
        stream=settings.stream,
    )
    return StructuredChat(
        transport=LiteLlmChatTransport(settings),
        model=settings.model,
        stream=settings.stream,
    )
