"""Exception hierarchy for hookgate."""

from __future__ import annotations


class HookgateError(Exception):
    """Base class for all hookgate errors."""


class CommandParseError(HookgateError, ValueError):
    """A configured hook command cannot be turned into a safe argv."""


class HooksConfigError(HookgateError, ValueError):
    """The hooks section of the settings is malformed."""


class SettingsError(HookgateError):
    """A settings file could not be read or parsed."""


class ProviderError(HookgateError):
    """An LLM provider call failed."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider} API error: {message}")
        self.provider = provider
