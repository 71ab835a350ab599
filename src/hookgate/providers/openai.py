"""OpenAI client.

Also serves any OpenAI-compatible endpoint (OpenRouter, Ollama, Groq)
through ``base_url``.
"""

from __future__ import annotations

import logging
from typing import Any

from hookgate.providers.base import BaseClient
from hookgate.types.providers import ChatMessage, LLMResponse, ProviderUsage

logger = logging.getLogger(__name__)


class OpenAIClient(BaseClient):
    """Client for OpenAI-compatible chat completion APIs.

    Parameters
    ----------
    model:
        Model ID (e.g. ``"gpt-4o"``).
    api_key:
        API key.  When *None* the SDK falls back to ``OPENAI_API_KEY``.
    base_url:
        Optional custom base URL for OpenAI-compatible endpoints.
    provider:
        Name used in error messages (``"openai"``, ``"openrouter"``, ...).
    """

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        base_url: str | None = None,
        provider: str = "openai",
    ) -> None:
        super().__init__(model)
        import openai

        self.provider = provider
        kwargs: dict[str, Any] = {}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if base_url is not None:
            kwargs["base_url"] = base_url
        self._client = openai.AsyncOpenAI(**kwargs)
        self._sdk_errors = (openai.OpenAIError,)

    async def _complete(
        self,
        messages: list[ChatMessage],
        *,
        model_id: str,
        max_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        response = await self._client.chat.completions.create(
            model=model_id,
            messages=[{"role": m.role, "content": m.content} for m in messages],
            max_tokens=max_tokens,
            temperature=temperature,
        )

        text = ""
        if response.choices:
            text = response.choices[0].message.content or ""
        usage = ProviderUsage()
        if response.usage is not None:
            usage = ProviderUsage(
                input_tokens=response.usage.prompt_tokens,
                output_tokens=response.usage.completion_tokens,
            )
        logger.debug(
            "%s/%s: %d in, %d out tokens",
            self.provider, model_id, usage.input_tokens, usage.output_tokens,
        )
        return LLMResponse(content=text, model=response.model or model_id, usage=usage)
