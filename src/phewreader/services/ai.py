from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import httpx

from phewreader.config import AIProviderConfig, AppConfig
from phewreader.services.subscription import require_ai

if TYPE_CHECKING:
    from phewreader.services.subscription import SubscriptionService

log = logging.getLogger(__name__)

NOT_CONFIGURED = "AI service not configured. Please check your API key settings."


@dataclass
class AIResponse:
    success: bool
    content: str = ""
    error: Optional[str] = None


class AIService:
    """Reading assistant backed by an OpenAI-compatible chat completions API."""

    def __init__(self, config: AppConfig, subscriptions: "SubscriptionService") -> None:
        self._config = config
        self._subscriptions = subscriptions
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def provider(self) -> Optional[AIProviderConfig]:
        return self._config.get_active_provider()

    @property
    def is_configured(self) -> bool:
        p = self.provider
        if not p:
            return False
        if p.name == "ollama":
            return bool(p.base_url)
        return bool(p.api_key and p.base_url)

    async def ask(
        self, question: str, context: str, title: str, page: Optional[int] = None
    ) -> AIResponse:
        """Ask about a book. Raises SubscriptionRequiredError without AI entitlement."""
        require_ai(self._subscriptions.current())

        if not self.is_configured:
            return AIResponse(success=False, error=NOT_CONFIGURED)

        page_context = f" (Page {page})" if page is not None else ""
        excerpt = context[: self._config.ai_context_chars]
        system_prompt = (
            f'You are a helpful reading assistant for the book "{title}". '
            f"Provide clear, concise answers about the book content. "
            f"Focus on explanations, summaries, and insights that help the reader "
            f"understand better."
        )
        user_prompt = (
            f"Book: {title}{page_context}\n\n"
            f"Content context: {excerpt}...\n\n"
            f"Question: {question}"
        )

        try:
            content = await self._call_api(system_prompt, user_prompt)
        except RuntimeError as e:
            return AIResponse(success=False, error=str(e))
        return AIResponse(success=True, content=content or "No response received")

    async def summarize_page(self, page_text: str, title: str, page: int) -> AIResponse:
        return await self.ask(
            f"Please provide a concise summary of this page ({page}).",
            page_text,
            title,
            page,
        )

    async def explain_concept(self, concept: str, context: str, title: str) -> AIResponse:
        return await self.ask(
            f'Please explain the concept of "{concept}" as mentioned in this book.',
            context,
            title,
        )

    async def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        p = self.provider
        if not p:
            raise RuntimeError("No AI provider configured")

        if self._client is None:
            self._client = httpx.AsyncClient(timeout=60.0)

        headers: dict[str, str] = {"Content-Type": "application/json"}
        if p.api_key:
            headers["Authorization"] = f"Bearer {p.api_key}"

        url = f"{p.base_url.rstrip('/')}/chat/completions"
        payload = {
            "model": p.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": self._config.ai_max_tokens,
            "temperature": self._config.ai_temperature,
        }

        try:
            resp = await self._client.post(url, json=payload, headers=headers)
            resp.raise_for_status()
            data = resp.json()
            return (data["choices"][0]["message"]["content"] or "").strip()
        except httpx.HTTPStatusError as e:
            log.error(
                "AI API error: %s %s",
                e.response.status_code,
                e.response.text[:200],
            )
            raise RuntimeError(f"AI request failed: HTTP {e.response.status_code}") from e
        except (KeyError, IndexError, TypeError) as e:
            log.error("Unexpected AI response format: %s", e)
            raise RuntimeError("AI request failed: unexpected response format") from e
        except httpx.RequestError as e:
            log.error("AI request error: %s %s -> %s", type(e).__name__, url, e)
            raise RuntimeError(f"AI request failed: {type(e).__name__} ({url})") from e

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
