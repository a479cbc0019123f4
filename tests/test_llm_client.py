"""
Unit tests for the chat-completions API client.

Tests API client functionality with mocked transports and error handling.
"""

import json

import httpx
import pytest

from config.settings import LLMSettings
from services.llm_client import (
    ChatCompletionsClient, ChatMessage, LLMResponse,
    LLMServiceError, UpstreamHTTPError, UpstreamTimeoutError,
    UpstreamConnectionError, MalformedResponseError
)


def make_client(handler, **overrides):
    settings = LLMSettings(api_key="test-api-key", base_url="https://api.test/", **overrides)
    return ChatCompletionsClient(settings, transport=httpx.MockTransport(handler))


def completion(content, model="deepseek-chat"):
    return {
        "model": model,
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 15, "total_tokens": 25}
    }


class TestChatCompletionsClient:
    """Test cases for ChatCompletionsClient."""

    def test_client_initialization(self):
        client = make_client(lambda request: httpx.Response(200, json=completion("x")))

        assert client.api_key == "test-api-key"
        assert client.base_url == "https://api.test"
        assert client.completions_url == "https://api.test/chat/completions"
        assert client.model == "deepseek-chat"
        assert client.timeout == 60.0

    @pytest.mark.parametrize("api_key", [None, "", "   ", "your_deepseek_api_key_here"])
    def test_client_initialization_without_api_key(self, api_key):
        with pytest.raises(ValueError, match="API key is required"):
            ChatCompletionsClient(LLMSettings(api_key=api_key))

    @pytest.mark.asyncio
    async def test_successful_request(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=completion("好的"))

        async with make_client(handler) as client:
            response = await client.generate_response(
                [ChatMessage(role="system", content="sys"), {"role": "user", "content": "画圆"}],
                temperature=0.2
            )

        assert isinstance(response, LLMResponse)
        assert response.content == "好的"
        assert response.usage["total_tokens"] == 25
        assert seen["url"] == "https://api.test/chat/completions"
        assert seen["auth"] == "Bearer test-api-key"
        assert seen["body"]["model"] == "deepseek-chat"
        assert seen["body"]["temperature"] == 0.2
        assert seen["body"]["messages"] == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "画圆"}
        ]

    @pytest.mark.asyncio
    async def test_non_2xx_carries_upstream_payload(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(401, json={"error": {"message": "Authentication Fails"}})

        async with make_client(handler) as client:
            with pytest.raises(UpstreamHTTPError) as exc_info:
                await client.generate_response([{"role": "user", "content": "x"}])

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == {"error": {"message": "Authentication Fails"}}
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_rate_limit_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(429, text="slow down")

        async with make_client(handler) as client:
            with pytest.raises(UpstreamHTTPError) as exc_info:
                await client.generate_response([{"role": "user", "content": "x"}])

        assert exc_info.value.detail == "slow down"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_client(handler) as client:
            with pytest.raises(UpstreamTimeoutError):
                await client.generate_response([{"role": "user", "content": "x"}])

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(UpstreamConnectionError):
                await client.generate_response([{"role": "user", "content": "x"}])

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        async with make_client(lambda request: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(MalformedResponseError):
                await client.generate_response([{"role": "user", "content": "x"}])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{}, {"choices": []}, {"choices": [{"message": {}}]}, [1, 2]])
    async def test_missing_content(self, payload):
        async with make_client(lambda request: httpx.Response(200, json=payload)) as client:
            with pytest.raises(MalformedResponseError):
                await client.generate_response([{"role": "user", "content": "x"}])

    @pytest.mark.asyncio
    async def test_null_content_is_empty_reply(self):
        async with make_client(lambda request: httpx.Response(200, json=completion(None))) as client:
            response = await client.generate_response([{"role": "user", "content": "x"}])

        assert response.content == ""

    def test_error_hierarchy(self):
        for error_class in (UpstreamHTTPError, UpstreamTimeoutError, UpstreamConnectionError, MalformedResponseError):
            assert issubclass(error_class, LLMServiceError)
