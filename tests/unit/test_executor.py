"""Tests for hookgate.hooks.executor — routing by handler kind."""

from __future__ import annotations

import pytest

from hookgate.hooks.executor import run_hook
from hookgate.types.hooks import (
    AgentHandler,
    CommandHandler,
    HookBlocked,
    HookError,
    HookEvent,
    HookInput,
    HookSuccess,
    PromptHandler,
)
from tests.conftest import FakeLLM

INPUT = HookInput(hook_event_name=HookEvent.PRE_TOOL_USE, tool_name="Bash", tool_input={})


class TestRunHook:
    @pytest.mark.asyncio
    async def test_command(self, hook_script, breaker):
        argv = hook_script("print('{\"decision\": \"allow\"}')\n")
        outcome = await run_hook(CommandHandler(command=argv), INPUT, breaker=breaker)
        assert isinstance(outcome, HookSuccess)

    @pytest.mark.asyncio
    async def test_command_parse_error(self, breaker):
        outcome = await run_hook(CommandHandler(command="a > b"), INPUT, breaker=breaker)
        assert isinstance(outcome, HookBlocked)

    @pytest.mark.asyncio
    async def test_prompt(self, breaker):
        llm = FakeLLM(content='{"decision": "ask"}')
        outcome = await run_hook(PromptHandler(prompt="p"), INPUT, llm=llm, breaker=breaker)
        assert isinstance(outcome, HookSuccess)
        assert outcome.output.decision == "ask"
        assert len(llm.calls) == 1

    @pytest.mark.asyncio
    async def test_prompt_model_override(self, breaker):
        llm = FakeLLM()
        handler = PromptHandler(prompt="p", model="openai/gpt-4o-mini")
        await run_hook(handler, INPUT, llm=llm, breaker=breaker)
        assert llm.calls[0]["model"] == "openai/gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_agent_not_implemented(self, breaker):
        outcome = await run_hook(AgentHandler(agent="reviewer"), INPUT, breaker=breaker)
        assert outcome == HookError("Agent handlers not yet implemented")

    @pytest.mark.asyncio
    async def test_unknown_type(self, breaker):
        outcome = await run_hook({"type": "webhook"}, INPUT, breaker=breaker)
        assert outcome == HookError("Unknown handler type: webhook")
