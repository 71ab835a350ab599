"""Base LLM client with shared retry logic and message splitting."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

from hookgate.errors import ProviderError
from hookgate.providers.registry import parse_model
from hookgate.types.providers import ChatMessage, LLMResponse

logger = logging.getLogger(__name__)

# Errors that are worth retrying on — rate limits and server overload.
_RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 529})
_MAX_RETRIES: int = 2
_BACKOFF_BASE: float = 0.5  # seconds; doubled each retry


def _is_retryable(exc: BaseException) -> bool:
    """Return True when *exc* represents a transient error worth retrying."""
    if type(exc).__name__ in {"RateLimitError", "OverloadedError"}:
        return True
    status_code: int | None = getattr(exc, "status_code", None)
    return status_code is not None and status_code in _RETRYABLE_STATUS_CODES


class BaseClient(ABC):
    """Abstract base class for provider clients.

    Sub-classes implement :meth:`_complete`; :meth:`complete` adds retry
    with exponential back-off on transient provider errors. The caller
    bounds the total time (prompt hooks race it against their timeout).

    Parameters
    ----------
    model:
        The provider-side model identifier (e.g. ``"claude-haiku-4-5"``).
    """

    provider: str = ""

    def __init__(self, model: str) -> None:
        self._model = model
        # SDK exception types re-raised as ProviderError; set by sub-classes.
        self._sdk_errors: tuple[type[BaseException], ...] = ()

    @property
    def model_id(self) -> str:
        return self._model

    async def complete(
        self,
        messages: list[ChatMessage],
        *,
        model: str | None = None,
        max_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        """Run a completion, retrying transient errors.

        *model* (``provider/model``) overrides the client's own model; only
        its model ID part is used.
        """
        model_id = parse_model(model).model_id if model else self._model
        try:
            return await self._retry_with_backoff(
                self._complete, messages,
                model_id=model_id, max_tokens=max_tokens, temperature=temperature,
            )
        except self._sdk_errors as exc:
            raise ProviderError(self.provider, str(exc)) from exc

    @abstractmethod
    async def _complete(
        self,
        messages: list[ChatMessage],
        *,
        model_id: str,
        max_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        """Run a single request against the provider."""
        ...

    @staticmethod
    def split_system(messages: list[ChatMessage]) -> tuple[str, list[ChatMessage]]:
        """Separate system messages (joined) from the conversation."""
        system = "\n\n".join(m.content for m in messages if m.role == "system")
        return system, [m for m in messages if m.role != "system"]

    async def _retry_with_backoff(self, coro_fn: Any, /, *args: Any, **kwargs: Any) -> Any:
        """Call *coro_fn*, retrying up to :data:`_MAX_RETRIES` times on transient errors."""
        delay = _BACKOFF_BASE
        for attempt in range(1, _MAX_RETRIES + 2):
            try:
                return await coro_fn(*args, **kwargs)
            except Exception as exc:
                if not _is_retryable(exc) or attempt > _MAX_RETRIES:
                    raise
                logger.warning(
                    "Transient error on attempt %d/%d (%s). Retrying in %.1fs.",
                    attempt,
                    _MAX_RETRIES + 1,
                    type(exc).__name__,
                    delay,
                )
                await asyncio.sleep(delay)
                delay *= 2.0
        raise RuntimeError("Unexpected state in _retry_with_backoff")  # pragma: no cover
