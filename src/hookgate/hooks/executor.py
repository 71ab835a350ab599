"""Route a handler descriptor to the executor for its kind."""

from __future__ import annotations

from typing import Any

from hookgate.hooks.circuit import CircuitBreakerStore, default_breaker
from hookgate.hooks.command import run_command_hook
from hookgate.hooks.prompt import run_prompt_hook
from hookgate.types.hooks import (
    AgentHandler,
    CommandHandler,
    HookError,
    HookInput,
    HookOutcome,
    PromptHandler,
)
from hookgate.types.providers import LLMClient


async def run_hook(
    handler: Any,
    hook_input: HookInput,
    *,
    llm: LLMClient | None = None,
    breaker: CircuitBreakerStore = default_breaker,
) -> HookOutcome:
    """Run any handler. Never raises; every path resolves to an outcome."""
    if isinstance(handler, CommandHandler):
        return await run_command_hook(handler, hook_input, breaker=breaker)
    if isinstance(handler, PromptHandler):
        return await run_prompt_hook(handler, hook_input, llm=llm, breaker=breaker)
    if isinstance(handler, AgentHandler):
        return HookError("Agent handlers not yet implemented")
    kind = getattr(handler, "type", None)
    if kind is None and isinstance(handler, dict):
        kind = handler.get("type")
    return HookError(f"Unknown handler type: {kind}")
