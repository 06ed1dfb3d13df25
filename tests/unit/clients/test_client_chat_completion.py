"""Unit tests for ChatCompletionClient using httpx.MockTransport."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from repolens.clients.client_chat_completion import ChatCompletionClient
from repolens.enums.enum_summary_provider import EnumSummaryProvider
from repolens.exceptions import GenerationFailedError


def completion_body(content: object) -> dict[str, object]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> ChatCompletionClient:
    return ChatCompletionClient(transport=httpx.MockTransport(handler))


@pytest.mark.unit
class TestComplete:
    async def test_posts_chat_completion_request(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=completion_body("Summary text."))

        async with make_client(handler) as client:
            text = await client.complete(
                "system",
                "user",
                api_key="gsk_key",
                provider=EnumSummaryProvider.GROQ,
                max_tokens=500,
            )

        assert text == "Summary text."
        request = seen[0]
        assert str(request.url) == "https://api.groq.com/openai/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer gsk_key"
        body = json.loads(request.content)
        assert body["model"] == "llama-3.3-70b-versatile"
        assert body["max_tokens"] == 500
        assert body["temperature"] == 0.5
        assert [m["role"] for m in body["messages"]] == ["system", "user"]

    async def test_openai_endpoint(self) -> None:
        urls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            urls.append(str(request.url))
            return httpx.Response(200, json=completion_body("ok"))

        async with make_client(handler) as client:
            await client.complete(
                "s", "u", api_key="sk-x", provider=EnumSummaryProvider.OPENAI, max_tokens=10
            )
        assert urls == ["https://api.openai.com/v1/chat/completions"]

    async def test_error_message_extracted_from_json_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                401, json={"error": {"message": "Invalid API Key", "type": "auth"}}
            )

        async with make_client(handler) as client:
            with pytest.raises(GenerationFailedError, match="Invalid API Key") as exc_info:
                await client.complete(
                    "s", "u", api_key="bad", provider=EnumSummaryProvider.GROQ, max_tokens=10
                )
        assert exc_info.value.status_code == 401
        assert exc_info.value.provider == "groq"

    async def test_non_json_error_body_is_wrapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        async with make_client(handler) as client:
            with pytest.raises(GenerationFailedError) as exc_info:
                await client.complete(
                    "s", "u", api_key="k", provider=EnumSummaryProvider.OPENAI, max_tokens=10
                )
        assert str(exc_info.value) == "OpenAI API error: Bad Gateway"

    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(GenerationFailedError, match="request failed"):
                await client.complete(
                    "s", "u", api_key="k", provider=EnumSummaryProvider.GROQ, max_tokens=10
                )

    @pytest.mark.parametrize(
        "body", [{"choices": []}, {"unexpected": True}, completion_body(None)]
    )
    async def test_malformed_success_response(self, body: dict[str, object]) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=body)

        async with make_client(handler) as client:
            with pytest.raises(GenerationFailedError):
                await client.complete(
                    "s", "u", api_key="k", provider=EnumSummaryProvider.GROQ, max_tokens=10
                )


@pytest.mark.unit
class TestLifecycle:
    async def test_connect_and_close_are_idempotent(self) -> None:
        client = make_client(lambda request: httpx.Response(200))
        await client.connect()
        await client.connect()
        assert client.is_connected
        await client.close()
        await client.close()
        assert not client.is_connected

    def test_endpoint_override(self) -> None:
        client = ChatCompletionClient(
            endpoints={EnumSummaryProvider.GROQ: ("http://localhost:8000/v1/", "local")}
        )
        assert client.endpoint_for(EnumSummaryProvider.GROQ) == (
            "http://localhost:8000/v1",
            "local",
        )


@pytest.mark.unit
class TestValidateApiKey:
    async def test_accepted_key(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/openai/v1/models"
            return httpx.Response(200, json={"data": []})

        async with make_client(handler) as client:
            assert await client.validate_api_key(EnumSummaryProvider.GROQ, "gsk_key")

    async def test_rejected_key(self) -> None:
        async with make_client(lambda request: httpx.Response(401)) as client:
            assert not await client.validate_api_key(EnumSummaryProvider.OPENAI, "sk-bad")

    async def test_blank_key_makes_no_request(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        async with make_client(handler) as client:
            assert not await client.validate_api_key(EnumSummaryProvider.GROQ, "  ")

    async def test_transport_error_is_invalid(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        async with make_client(handler) as client:
            assert not await client.validate_api_key(EnumSummaryProvider.GROQ, "gsk_key")
