"""LLM clients used by prompt hooks.

Public surface
--------------
- :class:`BaseClient`        — abstract base with retry
- ``providers.anthropic``    — Claude client (Anthropic SDK)
- ``providers.openai``       — OpenAI / compatible endpoints (openai SDK)
- :func:`parse_model`        — split ``provider/model`` strings
- :func:`create_llm_client`  — factory that returns the right client
"""

from __future__ import annotations

from hookgate.providers.base import BaseClient
from hookgate.providers.registry import create_llm_client, parse_model, resolve_api_key

__all__ = [
    "BaseClient",
    "create_llm_client",
    "parse_model",
    "resolve_api_key",
]
