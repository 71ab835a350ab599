"""Anthropic/Claude client."""

from __future__ import annotations

import logging

from hookgate.providers.base import BaseClient
from hookgate.types.providers import ChatMessage, LLMResponse, ProviderUsage

logger = logging.getLogger(__name__)


class AnthropicClient(BaseClient):
    """Client for Anthropic's Messages API.

    Uses the official ``anthropic`` SDK (``AsyncAnthropic``). System
    messages are lifted out of the message list into the ``system``
    parameter, as the API requires.

    Parameters
    ----------
    model:
        Model ID (e.g. ``"claude-haiku-4-5"``).
    api_key:
        Anthropic API key.  When *None* the SDK falls back to the
        ``ANTHROPIC_API_KEY`` environment variable.
    """

    provider = "anthropic"

    def __init__(self, model: str, api_key: str | None = None) -> None:
        super().__init__(model)
        import anthropic

        self._client = anthropic.AsyncAnthropic(api_key=api_key) if api_key else anthropic.AsyncAnthropic()
        self._sdk_errors = (anthropic.APIError,)

    async def _complete(
        self,
        messages: list[ChatMessage],
        *,
        model_id: str,
        max_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        system, conversation = self.split_system(messages)
        kwargs = {
            "model": model_id,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": m.role, "content": m.content} for m in conversation],
        }
        if system:
            kwargs["system"] = system

        response = await self._client.messages.create(**kwargs)

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        usage = ProviderUsage(
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        logger.debug(
            "anthropic/%s: %d in, %d out tokens",
            model_id, usage.input_tokens, usage.output_tokens,
        )
        return LLMResponse(content=text, model=response.model, usage=usage)
