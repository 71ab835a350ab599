"""Test fixtures: hook script factory, fake LLM client, isolated breaker."""

from __future__ import annotations

import asyncio
import sys
import textwrap
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from hookgate.hooks.circuit import CircuitBreakerStore
from hookgate.types.providers import ChatMessage, LLMResponse


@dataclass
class FakeLLM:
    """A scripted LLM client.

    Usage:
        llm = FakeLLM(content='{"decision": "deny", "reason": "nope"}')
        llm = FakeLLM(delay=5.0)                      # never answers in time
        llm = FakeLLM(error=ConnectionError("down"))  # transport failure
    """

    content: str = '{"decision": "allow"}'
    delay: float = 0.0
    error: Exception | None = None
    calls: list[dict[str, Any]] = field(default_factory=list)

    @property
    def model_id(self) -> str:
        return "fake-model"

    async def complete(
        self,
        messages: list[ChatMessage],
        *,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        self.calls.append({
            "messages": list(messages),
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.content, model=self.model_id)


@pytest.fixture
def breaker() -> CircuitBreakerStore:
    """A fresh breaker store so tests never share failure counts."""
    return CircuitBreakerStore()


@pytest.fixture
def hook_script(tmp_path: Path) -> Callable[..., tuple[str, str]]:
    """Write a Python hook script and return its argv.

    Each script gets a unique file so its handler identity (and therefore
    breaker state) is independent of other scripts in the same test.
    """
    counter = {"n": 0}

    def make(body: str) -> tuple[str, str]:
        counter["n"] += 1
        path = tmp_path / f"hook_{counter['n']}.py"
        path.write_text(textwrap.dedent(body))
        return (sys.executable, str(path))

    return make
