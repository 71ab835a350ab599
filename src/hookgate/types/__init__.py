"""Public types for hookgate."""

from hookgate.types.hooks import (
    DEFAULT_TIMEOUTS,
    AgentHandler,
    CommandHandler,
    HookBlocked,
    HookError,
    HookEvent,
    HookHandler,
    HookInput,
    HookOutcome,
    HookOutput,
    HookRule,
    HooksConfig,
    HookSuccess,
    PromptHandler,
)
from hookgate.types.providers import ChatMessage, LLMClient, LLMResponse, ProviderInfo, ProviderUsage

__all__ = [
    "DEFAULT_TIMEOUTS",
    "AgentHandler",
    "ChatMessage",
    "CommandHandler",
    "HookBlocked",
    "HookError",
    "HookEvent",
    "HookHandler",
    "HookInput",
    "HookOutcome",
    "HookOutput",
    "HookRule",
    "HookSuccess",
    "HooksConfig",
    "LLMClient",
    "LLMResponse",
    "PromptHandler",
    "ProviderInfo",
    "ProviderUsage",
]
