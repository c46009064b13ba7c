"""Structured chat facade: one coroutine per answer shape.

Pipeline per call: Validate -> Build schema -> Dispatch -> Aggregate -> Decode
-> Post-process. Caller mistakes raise ``InvalidArgumentError`` before
dispatch; every runtime failure degrades to the shape's fail-closed default.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterable, Sequence
from contextlib import AbstractAsyncContextManager, aclosing, nullcontext
from typing import Any

import structlog
from structlog.contextvars import bound_contextvars

from structured_chat.core.application.ports import ChatTransportPort
from structured_chat.core.application.services.response_decoder import decode
from structured_chat.core.application.services.schema_builder import build_schema
from structured_chat.core.application.services.stream_aggregator import aggregate
from structured_chat.core.entities.chat_request import ChatRequest
from structured_chat.core.exceptions import InvalidArgumentError
from structured_chat.core.value_objects.answer_contract import (
    AnswerContract,
    BooleanContract,
    MultiChoiceContract,
    PatternContract,
    SingleChoiceContract,
)
from structured_chat.core.value_objects.response_fragment import ResponseFragment
from structured_chat.infrastructure.observability.metrics_service import (
    DISPATCH_SECONDS,
    OUTCOME_ANSWERED,
    OUTCOME_DECODE_FAILED,
    OUTCOME_PATTERN_MISMATCH,
    OUTCOME_TRANSPORT_FAILED,
    REQUESTS_TOTAL,
)
from structured_chat.infrastructure.observability.tracing_setup import trace_operation

logger = structlog.get_logger()


def build_pattern_prompt(question: str, pattern: str, description: str | None = None) -> str:
    """Append an explicit pattern instruction to *question*."""
    prompt = f"{question}\n\nIMPORTANT: Your response must match this exact regex pattern: {pattern}"
    if description:
        prompt += f"\nDescription: {description}"
    return prompt


def _closing(fragments: AsyncIterable[ResponseFragment]) -> AbstractAsyncContextManager[Any]:
    """Close the fragment stream on exit when it supports ``aclose``, releasing the transport."""
    if hasattr(fragments, "aclose"):
        return aclosing(fragments)  # type: ignore[type-var]
    return nullcontext(fragments)


def _require_text(value: object, argument: str, label: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(argument, f"{label} cannot be null or empty.")


class StructuredChat:
    """Asks a chat model questions whose answers must follow a JSON schema.

    The model identifier is fixed at construction. Instances hold no per-call
    state, so one instance can serve concurrent calls.
    """

    def __init__(self, transport: ChatTransportPort, model: str, stream: bool = False) -> None:
        _require_text(model, "model", "Model")
        self._transport = transport
        self._model = model
        self._stream = stream

    @property
    def model(self) -> str:
        return self._model

    # ── Public contract ──────────────────────────────────────────

    @trace_operation("structured_chat.ask_boolean")
    async def ask_boolean(self, question: str) -> bool:
        """Yes/no answer; ``False`` when the model's output cannot be decoded."""
        _require_text(question, "question", "Question")
        logger.debug("Processing boolean question", question=question)

        response = await self._send(question, BooleanContract(), "boolean")
        if response is None:
            return False

        self._record("boolean", OUTCOME_ANSWERED)
        logger.debug("Boolean response", answer=response.answer)
        return response.answer

    @trace_operation("structured_chat.ask_single_choice")
    async def ask_single_choice(self, question: str, options: Sequence[str]) -> str | None:
        """One option out of *options*, or ``None`` on failure.

        The schema restricts the model to *options* but the answer is not
        checked against them afterwards.
        """
        _require_text(question, "question", "Question")
        contract = SingleChoiceContract(options)
        logger.debug(
            "Processing single choice question", question=question, options=list(contract.options)
        )

        response = await self._send(question, contract, "single_choice")
        if response is None:
            return None

        self._record("single_choice", OUTCOME_ANSWERED)
        logger.debug("Single choice response", selected=response.selected)
        return response.selected

    @trace_operation("structured_chat.ask_multi_choice")
    async def ask_multi_choice(self, question: str, options: Sequence[str]) -> list[str]:
        """Every option the model selected, in model order; ``[]`` on failure."""
        _require_text(question, "question", "Question")
        contract = MultiChoiceContract(options)
        logger.debug(
            "Processing multi-choice question", question=question, options=list(contract.options)
        )

        response = await self._send(question, contract, "multi_choice")
        if response is None:
            return []

        self._record("multi_choice", OUTCOME_ANSWERED)
        logger.debug("Multi-choice response", selected=response.selected)
        return list(response.selected)

    @trace_operation("structured_chat.ask_pattern")
    async def ask_pattern(
        self, question: str, pattern: str, description: str | None = None
    ) -> str | None:
        """Free-text answer that must match *pattern* (``re.search`` semantics).

        A decoded answer that does not match is discarded: the schema only
        describes the pattern, it cannot make the model honour it.
        """
        _require_text(question, "question", "Question")
        contract = PatternContract(pattern, description)
        logger.debug("Processing regex pattern question", question=question, pattern=pattern)

        prompt = build_pattern_prompt(question, pattern, description)
        response = await self._send(prompt, contract, "pattern")
        if response is None:
            return None

        if not contract.matches(response.answer):
            self._record("pattern", OUTCOME_PATTERN_MISMATCH)
            logger.warning(
                "Response doesn't match pattern",
                answer=response.answer,
                pattern=pattern,
                error_type="PatternMismatch",
            )
            return None

        self._record("pattern", OUTCOME_ANSWERED)
        logger.debug("Regex pattern response", answer=response.answer)
        return response.answer

    # ── Private helpers ──────────────────────────────────────────

    async def _send(self, question: str, contract: AnswerContract, variant: str) -> Any:
        """Dispatch *question* under *contract*; the decoded answer schema or ``None``."""
        constraint, shape = build_schema(contract)
        request = ChatRequest.for_question(self._model, question, constraint, stream=self._stream)

        with bound_contextvars(answer_variant=variant, llm_model=self._model):
            logger.debug(
                "Sending structured chat request",
                answer_schema=constraint.name,
                json_schema=constraint.json_schema,
            )
            raw = await self._dispatch(request, variant)
            if raw is None:
                return None

            logger.debug("Raw model response", answer_schema=constraint.name, raw_response=raw)

            decoded = decode(raw, shape)
            if decoded is None:
                self._record(variant, OUTCOME_DECODE_FAILED)
            return decoded

    async def _dispatch(self, request: ChatRequest, variant: str) -> str | None:
        """Submit *request* and aggregate its fragments; ``None`` on transport failure."""
        start = time.perf_counter()
        try:
            fragments = await self._transport.submit(request)
            async with _closing(fragments):
                return await aggregate(fragments)
        except Exception as exc:
            self._record(variant, OUTCOME_TRANSPORT_FAILED)
            logger.error(
                "Error sending structured chat request",
                answer_schema=request.constraint.name,
                error_type=type(exc).__name__,
                error_details=str(exc),
            )
            return None
        finally:
            DISPATCH_SECONDS.labels(variant=variant).observe(time.perf_counter() - start)

    @staticmethod
    def _record(variant: str, outcome: str) -> None:
        REQUESTS_TOTAL.labels(variant=variant, outcome=outcome).inc()
