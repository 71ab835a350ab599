"""Resolve ``provider/model`` strings and build the matching client."""

from __future__ import annotations

import os

from hookgate.types.providers import LLMClient, ProviderInfo

DEFAULT_MODELS: dict[str, str] = {
    "anthropic": "claude-sonnet-4-5-20250514",
    "openai": "gpt-4o",
    "openai-codex": "gpt-5.3-codex",
    "openrouter": "anthropic/claude-3-sonnet",
}

BASE_URLS: dict[str, str] = {
    "openrouter": "https://openrouter.ai/api/v1",
}

ENV_MAP: dict[str, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "openai-codex": "OPENAI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}


def parse_model(model: str) -> ProviderInfo:
    """Split ``"provider/model"``.

    Without a known provider prefix the whole string is taken as an
    Anthropic model ID. An empty model part selects the provider default.
    """
    prefix, sep, rest = model.partition("/")
    if sep and prefix in DEFAULT_MODELS:
        return ProviderInfo(
            provider=prefix,
            model_id=rest or DEFAULT_MODELS[prefix],
            base_url=BASE_URLS.get(prefix),
        )
    return ProviderInfo(provider="anthropic", model_id=model)


def resolve_api_key(provider: str, explicit_key: str | None = None) -> str | None:
    """Explicit key, else the provider's environment variable."""
    if explicit_key:
        return explicit_key
    env_var = ENV_MAP.get(provider)
    if env_var:
        return os.environ.get(env_var) or None
    return None


def create_llm_client(model: str, api_key: str | None = None) -> LLMClient:
    """Instantiate the client for *model* (``"provider/model"``)."""
    info = parse_model(model)
    key = resolve_api_key(info.provider, api_key)

    if info.provider == "anthropic":
        from hookgate.providers.anthropic import AnthropicClient

        return AnthropicClient(info.model_id, api_key=key)

    from hookgate.providers.openai import OpenAIClient

    return OpenAIClient(
        info.model_id, api_key=key, base_url=info.base_url, provider=info.provider,
    )
