"""Prompt hooks: ask an LLM for an allow/deny/ask decision."""

from __future__ import annotations

import asyncio
import json
import logging
import re

from hookgate.hooks.circuit import CircuitBreakerStore, default_breaker, handler_id
from hookgate.types.hooks import (
    DEFAULT_TIMEOUTS,
    HookError,
    HookInput,
    HookOutcome,
    HookOutput,
    HookSuccess,
    PromptHandler,
)
from hookgate.types.providers import ChatMessage, LLMClient

logger = logging.getLogger(__name__)

DEFAULT_PROMPT_MODEL = "anthropic/claude-haiku-4-5"
PROMPT_MAX_TOKENS = 500
PROMPT_TEMPERATURE = 0.0

SYSTEM_PROMPT = """\
You are a hook handler for an AI agent system. Your job is to evaluate tool usage and return a decision.

You must respond with valid JSON in this exact format:
{
  "decision": "allow" | "deny" | "ask",
  "reason": "optional explanation",
  "updatedInput": {} // optional modified tool parameters
}

Rules:
- "allow": Proceed with the tool call
- "deny": Block the tool call (provide reason)
- "ask": Prompt for user confirmation
- Keep responses concise and focused"""

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def build_user_prompt(handler: PromptHandler, hook_input: HookInput) -> str:
    """Embed the configured prompt and the event context in one message."""
    tool_name = hook_input.tool_name if hook_input.tool_name is not None else "N/A"
    tool_input = json.dumps(dict(hook_input.tool_input or {}), indent=2, default=str)
    return (
        f"{handler.prompt}\n\n"
        "Hook Context:\n"
        f"- Event: {hook_input.event_name}\n"
        f"- Tool: {tool_name}\n"
        f"- Tool Input: {tool_input}\n\n"
        "Respond with JSON only."
    )


def extract_json_text(content: str) -> str:
    """Strip a markdown code fence around the JSON, if there is one."""
    text = content.strip()
    match = _FENCE_RE.search(text)
    if match:
        text = match.group(1).strip()
    return text


def _resolve_client(model: str, llm: LLMClient | None) -> LLMClient:
    if llm is not None:
        return llm
    # Imported lazily so the SDKs are only loaded when a prompt hook runs.
    from hookgate.providers import create_llm_client

    return create_llm_client(model)


async def run_prompt_hook(
    handler: PromptHandler,
    hook_input: HookInput,
    *,
    llm: LLMClient | None = None,
    breaker: CircuitBreakerStore = default_breaker,
) -> HookOutcome:
    """Run one prompt handler.

    The LLM call races ``handler.timeout`` (default 30s); a late response is
    discarded. Every failure, including a timeout, counts against the
    circuit breaker.
    """
    hid = handler_id(handler)
    limit = breaker.threshold

    if breaker.is_disabled(hid):
        return HookError(f"Hook disabled after {limit} consecutive failures")

    timeout = handler.timeout if handler.timeout is not None else DEFAULT_TIMEOUTS["prompt"]
    model = handler.model or DEFAULT_PROMPT_MODEL
    messages = [
        ChatMessage(role="system", content=SYSTEM_PROMPT),
        ChatMessage(role="user", content=build_user_prompt(handler, hook_input)),
    ]

    try:
        client = _resolve_client(model, llm)
        try:
            response = await asyncio.wait_for(
                client.complete(
                    messages,
                    model=model,
                    max_tokens=PROMPT_MAX_TOKENS,
                    temperature=PROMPT_TEMPERATURE,
                ),
                timeout=timeout,
            )
        except TimeoutError as exc:
            raise TimeoutError("Timeout") from exc
    except Exception as exc:
        error_msg = str(exc) or type(exc).__name__
        logger.debug("Prompt hook %s failed: %s", hid, error_msg)
        if breaker.record_failure(hid):
            return HookError(f"Prompt hook failed (disabled after {limit} failures): {error_msg}")
        return HookError(f"Prompt hook failed: {error_msg}")

    try:
        output = HookOutput.from_dict(json.loads(extract_json_text(response.content)))
    except ValueError:
        if breaker.record_failure(hid):
            return HookError(
                f"Invalid JSON from LLM (disabled after {limit} failures): {response.content}",
            )
        return HookError(f"Invalid JSON from LLM: {response.content}")

    breaker.record_success(hid)
    return HookSuccess(output)
