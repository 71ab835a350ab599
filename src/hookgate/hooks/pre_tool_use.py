"""PreToolUse hooks: gate a tool call before it runs.

Handlers run one at a time in registry order. The first deny wins and
stops evaluation; ``updatedInput`` from allowing handlers accumulates,
later keys overwriting earlier ones. Handler errors never block the tool.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from hookgate.core.config import get_hooks_config
from hookgate.hooks.circuit import CircuitBreakerStore, default_breaker
from hookgate.hooks.executor import run_hook
from hookgate.hooks.registry import match_hooks
from hookgate.types.hooks import (
    HookBlocked,
    HookError,
    HookEvent,
    HookInput,
    HooksConfig,
    HookSuccess,
)
from hookgate.types.providers import LLMClient

logger = logging.getLogger(__name__)

# Handler kinds wired for this event.
SUPPORTED_HANDLER_TYPES = frozenset({"command"})

_FROM_SETTINGS: Any = object()


@dataclass(frozen=True, slots=True)
class PreToolUseRequest:
    """The tool call about to run."""

    tool_name: str
    tool_input: dict[str, Any] = field(default_factory=dict)
    session_id: str | None = None
    cwd: str | None = None


@dataclass(frozen=True, slots=True)
class PreToolUseResult:
    """Aggregated verdict for one tool call."""

    decision: str = "allow"
    reason: str | None = None
    updated_input: dict[str, Any] | None = None

    @property
    def denied(self) -> bool:
        return self.decision == "deny"


def _resolve_config(config: Any, cwd: str | None) -> HooksConfig | None:
    if config is _FROM_SETTINGS:
        return get_hooks_config(cwd)
    return config


async def run_pre_tool_use_hooks(
    request: PreToolUseRequest,
    *,
    config: HooksConfig | None = _FROM_SETTINGS,
    llm: LLMClient | None = None,
    breaker: CircuitBreakerStore = default_breaker,
) -> PreToolUseResult:
    """Run all matching PreToolUse handlers for *request*.

    *config* defaults to the settings-file config (None when the feature is
    disabled); pass it explicitly to bypass settings discovery.
    """
    resolved = _resolve_config(config, request.cwd)
    if not resolved:
        return PreToolUseResult()

    handlers = match_hooks(resolved, HookEvent.PRE_TOOL_USE, request.tool_name)
    if not handlers:
        return PreToolUseResult()

    hook_input = HookInput(
        hook_event_name=HookEvent.PRE_TOOL_USE,
        session_id=request.session_id,
        tool_name=request.tool_name,
        tool_input=request.tool_input,
        cwd=request.cwd,
    )

    accumulated: dict[str, Any] | None = None

    for handler in handlers:
        kind = getattr(handler, "type", None)
        if kind not in SUPPORTED_HANDLER_TYPES:
            logger.debug("Skipping unsupported handler type: %s", kind)
            continue

        outcome = await run_hook(handler, hook_input, llm=llm, breaker=breaker)

        if isinstance(outcome, HookBlocked):
            logger.info(
                "PreToolUse hook denied: tool=%s reason=%s", request.tool_name, outcome.reason,
            )
            return PreToolUseResult(decision="deny", reason=outcome.reason)

        if isinstance(outcome, HookError):
            logger.warning(
                "PreToolUse hook error: tool=%s error=%s", request.tool_name, outcome.message,
            )
            continue

        if isinstance(outcome, HookSuccess):
            output = outcome.output
            if output.decision == "deny":
                logger.info(
                    "PreToolUse hook denied via output: tool=%s reason=%s",
                    request.tool_name, output.reason,
                )
                return PreToolUseResult(decision="deny", reason=output.reason)
            if output.updated_input is not None:
                accumulated = {**(accumulated or {}), **output.updated_input}

    return PreToolUseResult(decision="allow", updated_input=accumulated)


def has_pre_tool_use_hooks(
    tool_name: str,
    *,
    config: HooksConfig | None = _FROM_SETTINGS,
    cwd: str | None = None,
) -> bool:
    """Whether any PreToolUse handler matches *tool_name*."""
    resolved = _resolve_config(config, cwd)
    if not resolved:
        return False
    return len(match_hooks(resolved, HookEvent.PRE_TOOL_USE, tool_name)) > 0
