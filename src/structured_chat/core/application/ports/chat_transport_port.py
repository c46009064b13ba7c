from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from structured_chat.core.entities.chat_request import ChatRequest
from structured_chat.core.value_objects.response_fragment import ResponseFragment


class ChatTransportPort(ABC):
    """Port for the chat-completion transport.

    Implementations MUST raise:
        - TransportError: on provider-level failures (connection, auth, HTTP status).

    It lives in ``core.exceptions``.
    """

    @abstractmethod
    async def submit(self, request: ChatRequest) -> AsyncIterator[ResponseFragment]:
        """Send *request* and return the response as a lazy fragment stream.

        Args:
            request: The model identifier, the single user message and the
                schema constraint the answer must follow.

        Returns:
            A single-pass async iterator of ``ResponseFragment``. A fragment
            with ``done=True`` marks the end of the answer; the transport may
            keep producing after it. Consumers ignore the rest and call
            ``aclose`` when the iterator provides it, which ends the transport's
            work on the response.

        Raises:
            TransportError: When the request cannot be delivered or the
                provider rejects it.
        """
