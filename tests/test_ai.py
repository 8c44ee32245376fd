"""Tests for the AI reading assistant."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from phewreader.config import AIProviderConfig, AppConfig
from phewreader.errors import SubscriptionRequiredError
from phewreader.services.ai import NOT_CONFIGURED, AIService
from phewreader.services.subscription import SubscriptionService


def _config(tmp_path: Path, api_key: str = "sk-test") -> AppConfig:
    config = AppConfig(data_dir=tmp_path / "data", config_dir=tmp_path / "config")
    config.providers["openrouter"] = AIProviderConfig(
        name="openrouter",
        api_key=api_key,
        base_url="https://openrouter.ai/api/v1",
        model="openai/gpt-3.5-turbo",
    )
    config.ai_provider = "openrouter"
    return config


def _response(content: str) -> AsyncMock:
    mock_response = AsyncMock()
    mock_response.status_code = 200
    mock_response.raise_for_status = Mock(return_value=None)
    mock_response.json = Mock(return_value={"choices": [{"message": {"content": content}}]})
    return mock_response


@pytest.fixture
def ai(tmp_path: Path, subscriptions: SubscriptionService) -> AIService:
    subscriptions.upgrade("basic")
    return AIService(_config(tmp_path), subscriptions)


class TestAIService:
    def test_is_configured(self, ai: AIService):
        assert ai.is_configured is True

    def test_not_configured_without_key(self, tmp_path: Path, subscriptions: SubscriptionService):
        assert AIService(_config(tmp_path, api_key=""), subscriptions).is_configured is False

    @pytest.mark.asyncio
    async def test_free_tier_blocked_before_request(
        self, tmp_path: Path, subscriptions: SubscriptionService
    ):
        service = AIService(_config(tmp_path), subscriptions)
        with patch("httpx.AsyncClient.post") as post:
            with pytest.raises(SubscriptionRequiredError) as exc:
                await service.ask("Why?", "context", "Title")
            post.assert_not_called()
        assert exc.value.feature == "ai"

    @pytest.mark.asyncio
    async def test_missing_key_returns_error(
        self, tmp_path: Path, subscriptions: SubscriptionService
    ):
        subscriptions.upgrade("basic")
        service = AIService(_config(tmp_path, api_key=""), subscriptions)
        response = await service.ask("Why?", "context", "Title")
        assert response.success is False
        assert response.error == NOT_CONFIGURED

    @pytest.mark.asyncio
    async def test_ask_success(self, ai: AIService):
        with patch("httpx.AsyncClient.post", return_value=_response(" The answer. ")) as post:
            response = await ai.ask("Why?", "some context", "Dune", page=3)
        assert response.success is True
        assert response.content == "The answer."

        kwargs = post.call_args.kwargs
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
        assert kwargs["json"]["model"] == "openai/gpt-3.5-turbo"
        assert kwargs["json"]["max_tokens"] == 500
        user = kwargs["json"]["messages"][1]["content"]
        assert "Book: Dune (Page 3)" in user
        assert "Question: Why?" in user
        await ai.close()

    @pytest.mark.asyncio
    async def test_context_truncated(self, ai: AIService):
        context = "a" * 1990 + "b" * 10 + "c" * 500
        with patch("httpx.AsyncClient.post", return_value=_response("ok")) as post:
            await ai.ask("Q", context, "T")
        user = post.call_args.kwargs["json"]["messages"][1]["content"]
        assert "b" * 10 + "..." in user
        assert "c" not in user.split("Content context: ")[1].split("Question")[0]
        await ai.close()

    @pytest.mark.asyncio
    async def test_empty_answer(self, ai: AIService):
        with patch("httpx.AsyncClient.post", return_value=_response("")):
            response = await ai.ask("Q", "ctx", "T")
        assert response.content == "No response received"
        await ai.close()

    @pytest.mark.asyncio
    async def test_http_error_returns_error(self, ai: AIService):
        request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
        error_response = httpx.Response(500, request=request, text="server down")
        with patch("httpx.AsyncClient.post", return_value=error_response):
            response = await ai.ask("Q", "ctx", "T")
        assert response.success is False
        assert "HTTP 500" in response.error
        await ai.close()

    @pytest.mark.asyncio
    async def test_network_error_returns_error(self, ai: AIService):
        request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
        with patch(
            "httpx.AsyncClient.post", side_effect=httpx.ConnectError("refused", request=request)
        ):
            response = await ai.ask("Q", "ctx", "T")
        assert response.success is False
        assert "ConnectError" in response.error
        await ai.close()

    @pytest.mark.asyncio
    async def test_malformed_response(self, ai: AIService):
        bad = _response("x")
        bad.json = Mock(return_value={"choices": []})
        with patch("httpx.AsyncClient.post", return_value=bad):
            response = await ai.ask("Q", "ctx", "T")
        assert response.success is False
        assert "unexpected response format" in response.error
        await ai.close()

    @pytest.mark.asyncio
    async def test_summarize_and_explain(self, ai: AIService):
        with patch("httpx.AsyncClient.post", return_value=_response("ok")) as post:
            await ai.summarize_page("page text", "T", 4)
            summary_prompt = post.call_args.kwargs["json"]["messages"][1]["content"]
            await ai.explain_concept("entropy", "ctx", "T")
            explain_prompt = post.call_args.kwargs["json"]["messages"][1]["content"]
        assert "summary of this page (4)" in summary_prompt
        assert 'concept of "entropy"' in explain_prompt
        await ai.close()
