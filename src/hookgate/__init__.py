"""hookgate — policy-enforcement hooks for agent tool calls.

Usage:
    import hookgate

    result = await hookgate.run_pre_tool_use_hooks(
        hookgate.PreToolUseRequest(tool_name="Bash", tool_input={"command": "ls"}),
    )
    if result.denied:
        print(result.reason)
"""

from hookgate.errors import (
    CommandParseError,
    HookgateError,
    HooksConfigError,
    ProviderError,
    SettingsError,
)
from hookgate.hooks.circuit import CircuitBreakerStore, default_breaker, handler_id
from hookgate.hooks.command import parse_command, run_command_hook
from hookgate.hooks.executor import run_hook
from hookgate.hooks.pre_tool_use import (
    PreToolUseRequest,
    PreToolUseResult,
    has_pre_tool_use_hooks,
    run_pre_tool_use_hooks,
)
from hookgate.hooks.prompt import run_prompt_hook
from hookgate.hooks.registry import hooks_config_from_settings, match_hooks, matches_pattern
from hookgate.types.hooks import (
    AgentHandler,
    CommandHandler,
    HookBlocked,
    HookError,
    HookEvent,
    HookInput,
    HookOutcome,
    HookOutput,
    HookRule,
    HookSuccess,
    PromptHandler,
)

__version__ = "0.1.0"

__all__ = [
    # Orchestration
    "PreToolUseRequest",
    "PreToolUseResult",
    "has_pre_tool_use_hooks",
    "run_pre_tool_use_hooks",
    # Execution
    "CircuitBreakerStore",
    "default_breaker",
    "handler_id",
    "parse_command",
    "run_command_hook",
    "run_hook",
    "run_prompt_hook",
    # Registry
    "hooks_config_from_settings",
    "match_hooks",
    "matches_pattern",
    # Types
    "AgentHandler",
    "CommandHandler",
    "HookBlocked",
    "HookError",
    "HookEvent",
    "HookInput",
    "HookOutcome",
    "HookOutput",
    "HookRule",
    "HookSuccess",
    "PromptHandler",
    # Errors
    "CommandParseError",
    "HookgateError",
    "HooksConfigError",
    "ProviderError",
    "SettingsError",
]
