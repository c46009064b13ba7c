"""Implements ChatTransportPort via ``litellm.acompletion``.

Works against any litellm-routable endpoint; the default settings target a
local Ollama server.
"""

import json
import time
from collections.abc import AsyncIterator
from typing import Any

import litellm
import structlog

from structured_chat.core.application.ports import ChatTransportPort
from structured_chat.core.entities.chat_request import ChatRequest
from structured_chat.core.exceptions import TransportError
from structured_chat.core.value_objects.response_fragment import ResponseFragment
from structured_chat.infrastructure.adapters.llm.config.llm_settings import LlmSettings
from structured_chat.infrastructure.adapters.llm.litellm_chunk_mapper import (
    chunk_to_fragment,
    completion_to_fragment,
    token_usage,
)
from structured_chat.infrastructure.observability.metrics_service import TOKENS_TOTAL
from structured_chat.infrastructure.observability.redaction_service import redact_text
from structured_chat.infrastructure.observability.tracing_setup import get_tracer

logger = structlog.get_logger()


class LiteLlmChatTransport(ChatTransportPort):
    """Sends one chat request through litellm and exposes the answer as fragments.

    ``stream`` comes from the request: streamed responses are mapped chunk by
    chunk, a single-shot completion becomes one terminal fragment.
    """

    def __init__(self, settings: LlmSettings) -> None:
        self._settings = settings

    # ── Public contract ──────────────────────────────────────────

    async def submit(self, request: ChatRequest) -> AsyncIterator[ResponseFragment]:
        kwargs = self._build_kwargs(request)
        self._log_outgoing_payload(kwargs["messages"], request.model)

        start = time.perf_counter()
        with get_tracer().start_as_current_span("llm.completion") as span:
            span.set_attribute("llm.model", request.model)
            span.set_attribute("llm.stream", request.stream)
            try:
                response = await litellm.acompletion(**kwargs)
            except Exception as exc:
                raise self._map_error(exc) from exc

        if request.stream:
            return self._iterate_chunks(response, request.model, start)

        self._record_usage(response, request.model, self._elapsed_ms(start), "SUCCESS")
        return self._single_fragment(completion_to_fragment(response))

    # ── Private helpers ──────────────────────────────────────────

    def _build_kwargs(self, request: ChatRequest) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self._normalize_model_id(request.model),
            "messages": [message.to_dict() for message in request.messages],
            "response_format": request.constraint.to_response_format(),
            "stream": request.stream,
        }
        if self._settings.api_base:
            kwargs["api_base"] = self._settings.api_base
        if self._settings.api_key is not None:
            kwargs["api_key"] = self._settings.api_key.get_secret_value()
        if self._settings.timeout_seconds is not None:
            kwargs["timeout"] = self._settings.timeout_seconds
        return kwargs

    async def _iterate_chunks(
        self, stream: Any, model_id: str, start: float
    ) -> AsyncIterator[ResponseFragment]:
        """Map chunks until the stream ends or the consumer closes this generator.

        The ``llm.stream`` span and the usage record cover the whole consumption.
        Usage is taken from the last consumed chunk that carries one; chunks the
        consumer never pulls are not seen.
        """
        span = get_tracer().start_span("llm.stream", attributes={"llm.model": model_id})
        usage_chunk: Any = None
        status = "SUCCESS"
        try:
            async for chunk in stream:
                if getattr(chunk, "usage", None) is not None:
                    usage_chunk = chunk
                fragment = chunk_to_fragment(chunk)
                if fragment is not None:
                    yield fragment
        except Exception as exc:
            status = "FAILED"
            span.record_exception(exc)
            raise self._map_error(exc) from exc
        finally:
            span.end()
            self._record_usage(usage_chunk, model_id, self._elapsed_ms(start), status)

    @staticmethod
    async def _single_fragment(fragment: ResponseFragment) -> AsyncIterator[ResponseFragment]:
        yield fragment

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return round((time.perf_counter() - start) * 1000, 2)

    @staticmethod
    def _normalize_model_id(model_id: str) -> str:
        """Convert ``provider:model`` to ``provider/model`` for litellm routing."""
        return model_id.replace(":", "/", 1)

    @staticmethod
    def _log_outgoing_payload(messages: list[dict[str, str]], model_id: str) -> None:
        """Log the redacted prompt payload before sending to the LLM."""
        raw_prompt = json.dumps(messages, ensure_ascii=False, default=str)
        logger.debug(
            "Sending payload to LLM",
            prompt_text=redact_text(raw_prompt),
            llm_model=model_id,
            tags=["llm-prompt"],
        )

    @staticmethod
    def _record_usage(source: Any, model_id: str, duration_ms: float, status: str) -> None:
        """Log the finished inference and record token metrics from *source*.usage."""
        tokens_in, tokens_out = token_usage(source)
        TOKENS_TOTAL.labels(model=model_id, type="prompt").inc(tokens_in)
        TOKENS_TOTAL.labels(model=model_id, type="completion").inc(tokens_out)
        logger.info(
            "LLM inference completed",
            llm_model=model_id,
            tokens_in=tokens_in,
            tokens_out=tokens_out,
            status=status,
            duration_ms=duration_ms,
            tags=["llm-response"],
        )

    @staticmethod
    def _map_error(exc: Exception) -> TransportError:
        code = getattr(exc, "status_code", None)
        return TransportError(
            provider="litellm",
            message=f"{type(exc).__name__}: {exc}",
            status_code=code if isinstance(code, int) else None,
        )
