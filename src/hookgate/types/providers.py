"""LLM capability protocol and message types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """A plain-text chat message."""

    role: str  # "system", "user", "assistant"
    content: str


@dataclass(slots=True)
class ProviderUsage:
    """Token usage from a provider response."""

    input_tokens: int = 0
    output_tokens: int = 0


@dataclass(slots=True)
class LLMResponse:
    """Text returned by an LLM call."""

    content: str
    model: str = ""
    usage: ProviderUsage = field(default_factory=ProviderUsage)


@runtime_checkable
class LLMClient(Protocol):
    """Send messages, get text back."""

    @property
    def model_id(self) -> str:
        """The model identifier being used."""
        ...

    async def complete(
        self,
        messages: list[ChatMessage],
        *,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        """Run one completion. System messages are allowed in *messages*.

        *model* is a ``provider/model`` string; implementations map it to
        their own model ID.
        """
        ...


@dataclass(frozen=True, slots=True)
class ProviderInfo:
    """Resolved provider for a ``provider/model`` string."""

    provider: str
    model_id: str
    base_url: str | None = None
