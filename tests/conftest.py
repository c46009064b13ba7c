from collections.abc import AsyncIterator

import pytest

from structured_chat.core.application.ports import ChatTransportPort
from structured_chat.core.entities.chat_request import ChatRequest
from structured_chat.core.value_objects.response_fragment import ResponseFragment


class ScriptedTransport(ChatTransportPort):
    """In-memory transport replaying a fixed fragment script for every request."""

    def __init__(
        self,
        fragments: list[ResponseFragment | None] | None = None,
        error: BaseException | None = None,
    ) -> None:
        self.fragments = fragments or []
        self.error = error
        self.requests: list[ChatRequest] = []
        self.pulled = 0

    async def submit(self, request: ChatRequest) -> AsyncIterator[ResponseFragment]:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[ResponseFragment]:
        for fragment in self.fragments:
            self.pulled += 1
            yield fragment


@pytest.fixture
def transport_factory():
    def _make(
        reply: str | None = None,
        fragments: list[ResponseFragment | None] | None = None,
        error: BaseException | None = None,
    ) -> ScriptedTransport:
        if reply is not None:
            fragments = [ResponseFragment(text=reply, done=True)]
        return ScriptedTransport(fragments=fragments, error=error)

    return _make
