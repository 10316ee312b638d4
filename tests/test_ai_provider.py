"""
Tests for the Anthropic completion client.

The HTTP API is replaced by httpx.MockTransport.
"""

import json

import httpx
import pytest

from roybot.core.config import Settings
from roybot.services.ai_provider import AIProviderError, AnthropicProvider

pytestmark = pytest.mark.anyio


def make_provider(handler) -> AnthropicProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="https://api.test")
    return AnthropicProvider("test-key", model="claude-test", client=client)


class TestGenerate:
    async def test_returns_first_text_block(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json={
                "content": [{"type": "text", "text": "Hello, Ana."}, {"type": "text", "text": "ignored"}],
            })

        provider = make_provider(handler)
        reply = await provider.generate("Hi Roy", system="You are ROY.")

        assert reply == "Hello, Ana."
        request = seen["request"]
        assert request.url.path == "/v1/messages"
        assert request.headers["x-api-key"] == "test-key"
        assert request.headers["anthropic-version"] == "2023-06-01"
        body = json.loads(request.content)
        assert body["model"] == "claude-test"
        assert body["system"] == "You are ROY."
        assert body["messages"] == [{"role": "user", "content": "Hi Roy"}]
        assert body["max_tokens"] == 500
        await provider.aclose()

    async def test_system_prompt_is_optional(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert "system" not in json.loads(request.content)
            return httpx.Response(200, json={"content": [{"type": "text", "text": "ok"}]})

        provider = make_provider(handler)
        assert await provider.generate("ping") == "ok"
        await provider.aclose()

    @pytest.mark.parametrize("response", [
        httpx.Response(500, json={"error": {"message": "overloaded"}}),
        httpx.Response(401, json={"error": {"message": "bad key"}}),
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json={"content": []}),
        httpx.Response(200, json={"unexpected": True}),
    ])
    async def test_failures_raise_provider_error(self, response) -> None:
        provider = make_provider(lambda request: response)

        with pytest.raises(AIProviderError):
            await provider.generate("Hi")
        await provider.aclose()

    async def test_transport_error_raises_provider_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider = make_provider(handler)
        with pytest.raises(AIProviderError):
            await provider.generate("Hi")
        await provider.aclose()


class TestFromSettings:
    def test_no_key_means_no_provider(self) -> None:
        assert AnthropicProvider.from_settings(Settings(ANTHROPIC_API_KEY=None)) is None

    async def test_uses_configured_model(self) -> None:
        provider = AnthropicProvider.from_settings(
            Settings(ANTHROPIC_API_KEY="k", ANTHROPIC_MODEL="claude-other")
        )
        assert provider.model == "claude-other"
        await provider.aclose()
