"""Tests for the Gemini chat bridge."""

import json

import httpx
import pytest
import respx
from httpx import Response

from prakriti.chat import APOLOGY_MESSAGE, ChatBridge, Conversation
from prakriti.models import ChatRole, ChatTurn


GENERATE_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash:generateContent"
)


def reply(text: str) -> Response:
    return Response(
        200,
        json={"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]},
    )


class TestBuildPayload:
    """Tests for request payload construction."""

    def test_history_then_message(self) -> None:
        bridge = ChatBridge(api_key="test-key")
        history = [
            ChatTurn(role=ChatRole.USER, text="నమస్తే"),
            {"role": "model", "text": "నమస్కారం!"},
        ]
        payload = bridge.build_payload("జీవామృతం ఎలా?", history)

        assert [c["role"] for c in payload["contents"]] == ["user", "model", "user"]
        assert payload["contents"][-1]["parts"][0]["text"] == "జీవామృతం ఎలా?"
        assert payload["generationConfig"]["temperature"] == 0.7
        assert "Prakriti Mitra" in payload["systemInstruction"]["parts"][0]["text"]

    def test_empty_history(self) -> None:
        payload = ChatBridge(api_key="k").build_payload("hi", ())
        assert len(payload["contents"]) == 1


class TestSend:
    """Tests for ChatBridge.send."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_returns_model_text(self) -> None:
        route = respx.post(GENERATE_URL).mock(return_value=reply("వేప కషాయం వాడండి."))
        async with ChatBridge(api_key="test-key") as bridge:
            text = await bridge.send("పురుగులు ఉన్నాయి")

        assert text == "వేప కషాయం వాడండి."
        request = route.calls.last.request
        assert request.headers["x-goog-api-key"] == "test-key"
        body = json.loads(request.content)
        assert body["contents"][-1]["parts"][0]["text"] == "పురుగులు ఉన్నాయి"

    @pytest.mark.asyncio
    @respx.mock
    async def test_joins_multiple_parts(self) -> None:
        respx.post(GENERATE_URL).mock(
            return_value=Response(
                200,
                json={"candidates": [{"content": {"parts": [{"text": "a"}, {"text": "b"}]}}]},
            )
        )
        async with ChatBridge(api_key="k") as bridge:
            assert await bridge.send("x") == "ab"

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error_returns_apology(self) -> None:
        respx.post(GENERATE_URL).mock(side_effect=httpx.ConnectError("offline"))
        async with ChatBridge(api_key="k") as bridge:
            assert await bridge.send("hello") == APOLOGY_MESSAGE

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout_returns_apology(self) -> None:
        respx.post(GENERATE_URL).mock(side_effect=httpx.ReadTimeout("slow"))
        async with ChatBridge(api_key="k") as bridge:
            assert await bridge.send("hello") == APOLOGY_MESSAGE

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_returns_apology(self) -> None:
        route = respx.post(GENERATE_URL).mock(return_value=Response(500, json={}))
        async with ChatBridge(api_key="k") as bridge:
            assert await bridge.send("hello") == APOLOGY_MESSAGE
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_response_returns_apology(self) -> None:
        respx.post(GENERATE_URL).mock(return_value=Response(200, json={"candidates": []}))
        async with ChatBridge(api_key="k") as bridge:
            assert await bridge.send("hello") == APOLOGY_MESSAGE

    @pytest.mark.asyncio
    @respx.mock
    async def test_missing_key_returns_apology(self) -> None:
        route = respx.post(GENERATE_URL).mock(return_value=reply("unused"))
        async with ChatBridge(api_key="") as bridge:
            assert await bridge.send("hello") == APOLOGY_MESSAGE
        assert not route.called


class TestConversation:
    """Tests for the append-only conversation history."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_turns_accumulate_in_order(self) -> None:
        route = respx.post(GENERATE_URL).mock(
            side_effect=[reply("మొదటి జవాబు"), reply("రెండవ జవాబు")]
        )
        async with ChatBridge(api_key="k") as bridge:
            conversation = Conversation(bridge)
            assert await conversation.ask("ఒకటి") == "మొదటి జవాబు"
            assert await conversation.ask("రెండు") == "రెండవ జవాబు"

        assert [(t.role, t.text) for t in conversation.turns] == [
            (ChatRole.USER, "ఒకటి"),
            (ChatRole.MODEL, "మొదటి జవాబు"),
            (ChatRole.USER, "రెండు"),
            (ChatRole.MODEL, "రెండవ జవాబు"),
        ]
        second = json.loads(route.calls[1].request.content)
        assert [c["parts"][0]["text"] for c in second["contents"]] == [
            "ఒకటి",
            "మొదటి జవాబు",
            "రెండు",
        ]

    @pytest.mark.asyncio
    @respx.mock
    async def test_failure_is_recorded_as_apology(self) -> None:
        respx.post(GENERATE_URL).mock(side_effect=httpx.ConnectError("offline"))
        async with ChatBridge(api_key="k") as bridge:
            conversation = Conversation(bridge)
            assert await conversation.ask("hello") == APOLOGY_MESSAGE
        assert conversation.turns[-1] == ChatTurn(role=ChatRole.MODEL, text=APOLOGY_MESSAGE)

    @pytest.mark.asyncio
    async def test_blank_message_ignored(self) -> None:
        conversation = Conversation(ChatBridge(api_key="k"))
        assert await conversation.ask("   ") is None
        assert conversation.turns == []
