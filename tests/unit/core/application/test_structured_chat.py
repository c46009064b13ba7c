"""Unit tests — StructuredChat facade (zero I/O, scripted transport)."""

import asyncio

import pytest
from prometheus_client import REGISTRY
from structlog.testing import capture_logs

from structured_chat.core.application.ports import ChatTransportPort
from structured_chat.core.application.structured_chat import StructuredChat, build_pattern_prompt
from structured_chat.core.entities.chat_request import ChatRequest
from structured_chat.core.exceptions import InvalidArgumentError, TransportError
from structured_chat.core.value_objects.message_role import MessageRole
from structured_chat.core.value_objects.response_fragment import ResponseFragment

MODEL = "ollama_chat:gemma3:12b"
COLORS = ["Red", "Blue", "Green"]
PHONE = r"^\(\d{3}\) \d{3}-\d{4}$"


def _requests_total(variant: str, outcome: str) -> float:
    value = REGISTRY.get_sample_value(
        "structured_chat_requests_total", {"variant": variant, "outcome": outcome}
    )
    return value or 0.0


class TestConstruction:
    def test_exposes_model(self, transport_factory) -> None:
        assert StructuredChat(transport_factory(), MODEL).model == MODEL

    def test_rejects_blank_model(self, transport_factory) -> None:
        with pytest.raises(InvalidArgumentError, match="Model"):
            StructuredChat(transport_factory(), " ")


class TestAskBoolean:
    async def test_returns_decoded_answer(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(reply='{"answer": true}'), MODEL)

        assert await chat.ask_boolean("Is BMW a car maker?") is True

    async def test_false_answer(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(reply='{"answer": false}'), MODEL)

        assert await chat.ask_boolean("Is BMW a cosmetic company?") is False

    async def test_malformed_output_fails_closed(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(reply="not json"), MODEL)

        assert await chat.ask_boolean("Is BMW a car maker?") is False

    async def test_string_boolean_is_not_coerced(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(reply='{"answer": "true"}'), MODEL)

        assert await chat.ask_boolean("Is BMW a car maker?") is False

    async def test_transport_error_fails_closed(self, transport_factory) -> None:
        transport = transport_factory(error=TransportError(provider="litellm", message="down"))
        chat = StructuredChat(transport, MODEL)

        with capture_logs() as logs:
            result = await chat.ask_boolean("Is BMW a car maker?")

        assert result is False
        errors = [entry for entry in logs if entry["log_level"] == "error"]
        assert errors[0]["error_type"] == "TransportError"
        assert errors[0]["answer_schema"] == "boolean_answer"

    async def test_unexpected_transport_exception_fails_closed(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(error=RuntimeError("boom")), MODEL)

        assert await chat.ask_boolean("Is BMW a car maker?") is False

    async def test_fragmented_response_is_reassembled(self, transport_factory) -> None:
        transport = transport_factory(
            fragments=[
                ResponseFragment('{"answer"'),
                ResponseFragment(""),
                ResponseFragment(": true}", done=True),
                ResponseFragment("trailing garbage"),
            ]
        )
        chat = StructuredChat(transport, MODEL)

        assert await chat.ask_boolean("Is BMW a car maker?") is True
        assert transport.pulled == 3

    @pytest.mark.parametrize("question", ["", "   ", None])
    async def test_blank_question_raises_before_dispatch(self, transport_factory, question) -> None:
        transport = transport_factory(reply='{"answer": true}')
        chat = StructuredChat(transport, MODEL)

        with pytest.raises(InvalidArgumentError, match="Question cannot be null or empty") as info:
            await chat.ask_boolean(question)

        assert info.value.argument == "question"
        assert transport.requests == []

    async def test_cancellation_propagates(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(error=asyncio.CancelledError()), MODEL)

        with pytest.raises(asyncio.CancelledError):
            await chat.ask_boolean("Is BMW a car maker?")


class TestRequestShape:
    async def test_sends_single_user_message_with_constraint(self, transport_factory) -> None:
        transport = transport_factory(reply='{"selected": "Blue"}')
        chat = StructuredChat(transport, MODEL)

        await chat.ask_single_choice("Pick a primary color", COLORS)

        (request,) = transport.requests
        assert isinstance(request, ChatRequest)
        assert request.model == MODEL
        assert request.stream is False
        assert len(request.messages) == 1
        assert request.messages[0].role is MessageRole.USER
        assert request.messages[0].content == "Pick a primary color"
        assert request.constraint.name == "single_choice_answer"
        assert request.constraint.json_schema["properties"]["selected"]["enum"] == COLORS

    async def test_stream_flag_reaches_request(self, transport_factory) -> None:
        transport = transport_factory(reply='{"answer": true}')
        chat = StructuredChat(transport, MODEL, stream=True)

        await chat.ask_boolean("Q")

        assert transport.requests[0].stream is True

    async def test_each_call_builds_its_own_request(self, transport_factory) -> None:
        transport = transport_factory(reply='{"answer": true}')
        chat = StructuredChat(transport, MODEL)

        await chat.ask_boolean("first")
        await chat.ask_boolean("second")

        assert [r.messages[0].content for r in transport.requests] == ["first", "second"]


class TestAskSingleChoice:
    async def test_returns_selected_option(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(reply='{"selected":"Blue"}'), MODEL)

        assert await chat.ask_single_choice("Pick a primary color", COLORS) == "Blue"

    async def test_out_of_set_answer_is_returned_as_is(self, transport_factory) -> None:
        # No membership check after decoding, unlike ask_pattern's regex check.
        chat = StructuredChat(transport_factory(reply='{"selected":"Purple"}'), MODEL)

        assert await chat.ask_single_choice("Pick a primary color", COLORS) == "Purple"

    async def test_decode_failure_returns_none(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(reply='{"choice": "Blue"}'), MODEL)

        assert await chat.ask_single_choice("Pick a primary color", COLORS) is None

    async def test_transport_failure_returns_none(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(error=ConnectionError("refused")), MODEL)

        assert await chat.ask_single_choice("Pick a primary color", COLORS) is None

    async def test_empty_options_raise_before_dispatch(self, transport_factory) -> None:
        transport = transport_factory(reply='{"selected":"Blue"}')
        chat = StructuredChat(transport, MODEL)

        with pytest.raises(InvalidArgumentError, match="Options cannot be empty"):
            await chat.ask_single_choice("Q", [])

        assert transport.requests == []

    @pytest.mark.parametrize("options", [None, ["Red", ""], ["Red", "  "], "Red"])
    async def test_invalid_options_raise_before_dispatch(self, transport_factory, options) -> None:
        transport = transport_factory(reply='{"selected":"Blue"}')
        chat = StructuredChat(transport, MODEL)

        with pytest.raises(InvalidArgumentError) as info:
            await chat.ask_single_choice("Q", options)

        assert info.value.argument == "options"
        assert transport.requests == []

    async def test_question_is_checked_before_options(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(), MODEL)

        with pytest.raises(InvalidArgumentError) as info:
            await chat.ask_single_choice("", [])

        assert info.value.argument == "question"


class TestAskMultiChoice:
    async def test_returns_selected_options_in_order(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(reply='{"selected": ["Blue", "Red"]}'), MODEL)

        assert await chat.ask_multi_choice("What are the primary colors?", COLORS) == ["Blue", "Red"]

    async def test_empty_selection(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(reply='{"selected": []}'), MODEL)

        assert await chat.ask_multi_choice("Q", COLORS) == []

    async def test_decode_failure_returns_empty_list(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(reply='{"selected": "Red"}'), MODEL)

        assert await chat.ask_multi_choice("Q", COLORS) == []

    async def test_transport_failure_returns_empty_list(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(error=TimeoutError()), MODEL)

        assert await chat.ask_multi_choice("Q", COLORS) == []

    async def test_uses_array_schema(self, transport_factory) -> None:
        transport = transport_factory(reply='{"selected": []}')
        chat = StructuredChat(transport, MODEL)

        await chat.ask_multi_choice("Q", COLORS)

        selected = transport.requests[0].constraint.json_schema["properties"]["selected"]
        assert selected == {"type": "array", "items": {"type": "string", "enum": COLORS}}

    async def test_invalid_options_raise_before_dispatch(self, transport_factory) -> None:
        transport = transport_factory()
        chat = StructuredChat(transport, MODEL)

        with pytest.raises(InvalidArgumentError):
            await chat.ask_multi_choice("Q", ["Red", None])

        assert transport.requests == []


class TestAskPattern:
    async def test_returns_matching_answer(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(reply='{"answer": "(212) 555-0199"}'), MODEL)

        assert await chat.ask_pattern("Generate a US phone number", PHONE) == "(212) 555-0199"

    async def test_non_matching_answer_returns_none(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(reply='{"answer": "555-1234"}'), MODEL)

        with capture_logs() as logs:
            result = await chat.ask_pattern("Generate a US phone number", PHONE)

        assert result is None
        warning = next(e for e in logs if e["event"] == "Response doesn't match pattern")
        assert warning["answer"] == "555-1234"
        assert warning["pattern"] == PHONE

    async def test_empty_answer_must_match_too(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(reply='{"answer": ""}'), MODEL)

        assert await chat.ask_pattern("Generate a US phone number", PHONE) is None

    async def test_decode_failure_returns_none(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(reply="(212) 555-0199"), MODEL)

        assert await chat.ask_pattern("Generate a US phone number", PHONE) is None

    async def test_prompt_names_pattern(self, transport_factory) -> None:
        transport = transport_factory(reply='{"answer": "(212) 555-0199"}')
        chat = StructuredChat(transport, MODEL)

        await chat.ask_pattern("Generate a US phone number", PHONE)

        content = transport.requests[0].messages[0].content
        assert content == (
            "Generate a US phone number\n\n"
            f"IMPORTANT: Your response must match this exact regex pattern: {PHONE}"
        )
        description = transport.requests[0].constraint.json_schema["properties"]["answer"]
        assert description["description"] == f"Must match the regex pattern: {PHONE}"

    async def test_prompt_and_schema_carry_description(self, transport_factory) -> None:
        transport = transport_factory(reply='{"answer": "(212) 555-0199"}')
        chat = StructuredChat(transport, MODEL)

        await chat.ask_pattern("Generate a US phone number", PHONE, "US format with area code")

        request = transport.requests[0]
        assert request.messages[0].content.endswith("\nDescription: US format with area code")
        answer_schema = request.constraint.json_schema["properties"]["answer"]
        assert answer_schema["description"] == "US format with area code"

    @pytest.mark.parametrize("pattern", ["", "   ", None, "(unclosed"])
    async def test_invalid_pattern_raises_before_dispatch(self, transport_factory, pattern) -> None:
        transport = transport_factory()
        chat = StructuredChat(transport, MODEL)

        with pytest.raises(InvalidArgumentError) as info:
            await chat.ask_pattern("Q", pattern)

        assert info.value.argument == "pattern"
        assert transport.requests == []

    async def test_records_pattern_mismatch_metric(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(reply='{"answer": "nope"}'), MODEL)
        before = _requests_total("pattern", "pattern_mismatch")

        await chat.ask_pattern("Q", PHONE)

        assert _requests_total("pattern", "pattern_mismatch") == before + 1


class TestBuildPatternPrompt:
    def test_without_description(self) -> None:
        assert build_pattern_prompt("Q", "^a$") == (
            "Q\n\nIMPORTANT: Your response must match this exact regex pattern: ^a$"
        )

    def test_empty_description_is_omitted(self) -> None:
        assert "Description" not in build_pattern_prompt("Q", "^a$", "")


class TestMetrics:
    async def test_records_answered_and_decode_failed(self, transport_factory) -> None:
        answered_before = _requests_total("boolean", "answered")
        failed_before = _requests_total("boolean", "decode_failed")

        await StructuredChat(transport_factory(reply='{"answer": true}'), MODEL).ask_boolean("Q")
        await StructuredChat(transport_factory(reply="oops"), MODEL).ask_boolean("Q")

        assert _requests_total("boolean", "answered") == answered_before + 1
        assert _requests_total("boolean", "decode_failed") == failed_before + 1

    async def test_records_transport_failure(self, transport_factory) -> None:
        before = _requests_total("multi_choice", "transport_failed")

        await StructuredChat(transport_factory(error=OSError()), MODEL).ask_multi_choice("Q", COLORS)

        assert _requests_total("multi_choice", "transport_failed") == before + 1


class TestConcurrency:
    async def test_concurrent_calls_do_not_share_state(self, transport_factory) -> None:
        yes = StructuredChat(transport_factory(reply='{"answer": true}'), MODEL)
        pick = StructuredChat(transport_factory(reply='{"selected": "Green"}'), MODEL)

        results = await asyncio.gather(
            yes.ask_boolean("Q1"),
            pick.ask_single_choice("Q2", COLORS),
            yes.ask_boolean("Q3"),
        )

        assert results == [True, "Green", True]


class ClosableTransport(ChatTransportPort):
    """Fragment generator that reports when it is closed."""

    def __init__(self, fragments: list[ResponseFragment]) -> None:
        self.fragments = fragments
        self.pulled = 0
        self.closed = False

    async def submit(self, request):
        return self._iterate()

    async def _iterate(self):
        try:
            for fragment in self.fragments:
                self.pulled += 1
                yield fragment
        finally:
            self.closed = True


class TestStreamRelease:
    async def test_stream_is_closed_after_terminal_fragment(self) -> None:
        transport = ClosableTransport(
            [ResponseFragment('{"answer": true}', done=True), ResponseFragment("never read")]
        )
        chat = StructuredChat(transport, MODEL, stream=True)

        assert await chat.ask_boolean("Q") is True
        assert transport.closed is True
        assert transport.pulled == 1

    async def test_stream_is_closed_when_decode_fails(self) -> None:
        transport = ClosableTransport([ResponseFragment("oops", done=True), ResponseFragment("x")])
        chat = StructuredChat(transport, MODEL)

        assert await chat.ask_multi_choice("Q", COLORS) == []
        assert transport.closed is True

    async def test_plain_async_iterable_is_accepted(self) -> None:
        class FragmentList:
            def __aiter__(self):
                return self._gen()

            async def _gen(self):
                yield ResponseFragment('{"selected": "Red"}', done=True)

        class ListTransport(ChatTransportPort):
            async def submit(self, request):
                return FragmentList()

        chat = StructuredChat(ListTransport(), MODEL)

        assert await chat.ask_single_choice("Q", COLORS) == "Red"


class TestDebugLogging:
    async def test_logs_json_schema_before_sending_and_raw_after(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(reply='{"selected": ["Red"]}'), MODEL)

        with capture_logs() as logs:
            await chat.ask_multi_choice("Pick colors", COLORS)

        events = [entry["event"] for entry in logs]
        sending = logs[events.index("Sending structured chat request")]
        raw = logs[events.index("Raw model response")]
        assert events.index("Sending structured chat request") < events.index("Raw model response")
        assert sending["log_level"] == "debug"
        assert sending["answer_schema"] == "multi_choice_answer"
        assert sending["json_schema"]["properties"]["selected"]["items"]["enum"] == COLORS
        assert raw["log_level"] == "debug"
        assert raw["raw_response"] == '{"selected": ["Red"]}'

    async def test_no_raw_log_when_transport_fails(self, transport_factory) -> None:
        chat = StructuredChat(transport_factory(error=OSError("down")), MODEL)

        with capture_logs() as logs:
            await chat.ask_boolean("Q")

        events = [entry["event"] for entry in logs]
        assert "Sending structured chat request" in events
        assert "Raw model response" not in events
