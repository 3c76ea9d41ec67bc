"""Unit tests for LLMClient."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from review_sentinel.core.exceptions import ModelCallError
from review_sentinel.core.llm_client import PROVIDERS, LLMClient, describe_http_error


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove provider keys and model overrides from the environment."""
    for var in ("OPENAI_API_KEY", "OPENROUTER_API_KEY", "OPENAI_MODEL", "OPENROUTER_MODEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    return LLMClient()


def _reply(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class TestProviderSelection:
    """API key detection and model defaults."""

    def test_no_key_raises(self):
        with pytest.raises(ValueError, match="No API key found"):
            LLMClient()

    def test_openai_preferred(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
        monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or")

        client = LLMClient()

        assert client.provider == "openai"
        assert client.model == "gpt-4o-mini"
        assert client.api_endpoint == PROVIDERS["openai"][3]

    def test_openrouter_when_only_key(self, monkeypatch):
        monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or")

        client = LLMClient()

        assert client.provider == "openrouter"
        assert client.model == "google/gemini-flash-1.5"

    def test_explicit_provider_without_key(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")

        with pytest.raises(ValueError, match="OPENROUTER_API_KEY"):
            LLMClient(provider="openrouter")

    def test_model_from_env(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4o")

        assert LLMClient().model == "gpt-4o"

    def test_explicit_model_wins(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4o")

        assert LLMClient(model="o3-mini").model == "o3-mini"

    def test_key_parameter(self):
        client = LLMClient(openrouter_api_key="sk-param")

        assert client.provider == "openrouter"
        assert client.api_key == "sk-param"


class TestGenerate:
    """generate() extracts reply text or raises ModelCallError."""

    @pytest.mark.asyncio
    async def test_returns_content(self, client):
        with patch.object(
            client, "_chat_completion", AsyncMock(return_value=_reply('{"issues": []}'))
        ) as mock_call:
            text = await client.generate("Review this")

        assert text == '{"issues": []}'
        messages = mock_call.await_args.args[0]
        assert messages == [{"role": "user", "content": "Review this"}]

    @pytest.mark.asyncio
    async def test_empty_content(self, client):
        with patch.object(client, "_chat_completion", AsyncMock(return_value=_reply("  "))):
            with pytest.raises(ModelCallError, match="empty"):
                await client.generate("p")

    @pytest.mark.asyncio
    async def test_null_content(self, client):
        with patch.object(client, "_chat_completion", AsyncMock(return_value=_reply(None))):
            with pytest.raises(ModelCallError):
                await client.generate("p")

    @pytest.mark.asyncio
    async def test_malformed_envelope(self, client):
        with patch.object(
            client, "_chat_completion", AsyncMock(return_value={"choices": []})
        ):
            with pytest.raises(ModelCallError, match="did not contain a message"):
                await client.generate("p")


class TestChatCompletion:
    """HTTP failures map to ModelCallError."""

    @pytest.mark.asyncio
    async def test_success(self, client):
        request = httpx.Request("POST", client.api_endpoint)
        response = httpx.Response(200, json=_reply("ok"), request=request)

        with patch.object(httpx.AsyncClient, "post", AsyncMock(return_value=response)):
            assert await client.generate("p") == "ok"

    @pytest.mark.asyncio
    async def test_timeout(self, client):
        with patch.object(
            httpx.AsyncClient,
            "post",
            AsyncMock(side_effect=httpx.TimeoutException("slow")),
        ):
            with pytest.raises(ModelCallError, match="timed out"):
                await client.generate("p")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code,message",
        [
            (401, "Invalid Openai API key"),
            (429, "rate limit"),
            (503, "server error"),
            (400, "HTTP 400"),
        ],
    )
    async def test_http_errors(self, client, status_code, message):
        request = httpx.Request("POST", client.api_endpoint)
        response = httpx.Response(status_code, json={}, request=request)

        with patch.object(httpx.AsyncClient, "post", AsyncMock(return_value=response)):
            with pytest.raises(ModelCallError, match=message) as exc_info:
                await client.generate("p")

        assert exc_info.value.context["status_code"] == status_code

    @pytest.mark.asyncio
    async def test_connection_error(self, client):
        with patch.object(
            httpx.AsyncClient,
            "post",
            AsyncMock(side_effect=httpx.ConnectError("refused")),
        ):
            with pytest.raises(ModelCallError, match="LLM request failed"):
                await client.generate("p")


def test_describe_http_error_names_env_var():
    assert "OPENROUTER_API_KEY" in describe_http_error("openrouter", 401)
    assert describe_http_error("openai", 418) == "Openai API error (HTTP 418)"
