"""Hook types: handler descriptors, rules, inputs, and outcomes."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Union

from hookgate.errors import HooksConfigError

DEFAULT_TIMEOUTS: dict[str, float] = {
    "command": 600.0,
    "prompt": 30.0,
    "agent": 60.0,
}


class HookEvent(Enum):
    """Events that can trigger hooks."""

    PRE_TOOL_USE = "PreToolUse"
    POST_TOOL_USE = "PostToolUse"
    POST_TOOL_USE_FAILURE = "PostToolUseFailure"
    USER_PROMPT_SUBMIT = "UserPromptSubmit"
    NOTIFICATION = "Notification"
    STOP = "Stop"
    SUBAGENT_STOP = "SubagentStop"
    PRE_COMPACT = "PreCompact"
    SESSION_START = "SessionStart"
    SESSION_END = "SessionEnd"


Decision = Literal["allow", "deny", "ask"]
DECISIONS: frozenset[str] = frozenset({"allow", "deny", "ask"})


@dataclass(frozen=True, slots=True)
class CommandHandler:
    """Run an external command. The argv is never interpreted by a shell."""

    command: str | tuple[str, ...]
    timeout: float | None = None
    type: Literal["command"] = "command"


@dataclass(frozen=True, slots=True)
class PromptHandler:
    """Ask an LLM for a decision."""

    prompt: str
    model: str | None = None
    timeout: float | None = None
    type: Literal["prompt"] = "prompt"


@dataclass(frozen=True, slots=True)
class AgentHandler:
    """Reserved: delegate the decision to a sub-agent. Not executed yet."""

    agent: str
    timeout: float | None = None
    type: Literal["agent"] = "agent"


HookHandler = Union[CommandHandler, PromptHandler, AgentHandler]


@dataclass(frozen=True, slots=True)
class HookRule:
    """A matcher pattern and the handlers it triggers, in order."""

    matcher: str
    hooks: tuple[HookHandler, ...] = ()


# Read-only mapping of event -> ordered rules. Keys may be HookEvent members
# or their string values.
HooksConfig = Mapping[Union[HookEvent, str], Sequence[HookRule]]


@dataclass(frozen=True, slots=True)
class HookInput:
    """Event payload sent to a handler."""

    hook_event_name: HookEvent | str
    session_id: str | None = None
    tool_name: str | None = None
    tool_input: Mapping[str, Any] | None = None
    cwd: str | None = None

    @property
    def event_name(self) -> str:
        if isinstance(self.hook_event_name, HookEvent):
            return self.hook_event_name.value
        return self.hook_event_name

    def to_dict(self) -> dict[str, Any]:
        """Wire form written to a command hook's stdin. None fields are dropped."""
        data: dict[str, Any] = {"hook_event_name": self.event_name}
        if self.session_id is not None:
            data["session_id"] = self.session_id
        if self.tool_name is not None:
            data["tool_name"] = self.tool_name
        if self.tool_input is not None:
            data["tool_input"] = dict(self.tool_input)
        if self.cwd is not None:
            data["cwd"] = self.cwd
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


@dataclass(frozen=True, slots=True)
class HookOutput:
    """Decision record returned by a handler."""

    decision: str = "allow"
    reason: str | None = None
    updated_input: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> HookOutput:
        """Build from the decision JSON shape.

        A missing or null ``decision`` means allow. Raises ``ValueError`` when
        *data* is not an object, the decision is not one of allow/deny/ask,
        or ``updatedInput`` is present but not an object.
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        decision = data.get("decision")
        if decision is None:
            decision = "allow"
        elif not isinstance(decision, str) or decision not in DECISIONS:
            raise ValueError(f"invalid decision: {decision!r}")
        updated = data.get("updatedInput")
        if updated is not None and not isinstance(updated, dict):
            raise ValueError("updatedInput must be a JSON object")
        reason = data.get("reason")
        extra = {
            k: v for k, v in data.items()
            if k not in ("decision", "reason", "updatedInput")
        }
        return cls(
            decision=decision,
            reason=str(reason) if reason is not None else None,
            updated_input=updated,
            extra=extra,
        )


@dataclass(frozen=True, slots=True)
class HookSuccess:
    """The handler ran and produced a decision."""

    output: HookOutput


@dataclass(frozen=True, slots=True)
class HookBlocked:
    """The handler explicitly denied the action (or its config is unusable)."""

    reason: str


@dataclass(frozen=True, slots=True)
class HookError:
    """The handler malfunctioned; the action is not gated by it."""

    message: str


HookOutcome = Union[HookSuccess, HookBlocked, HookError]


def _timeout(raw: Mapping[str, Any]) -> float | None:
    value = raw.get("timeout")
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise HooksConfigError(f"Invalid hook timeout: {value!r}")
    return float(value)


def handler_from_dict(raw: Mapping[str, Any]) -> HookHandler:
    """Build a handler descriptor from its settings representation."""
    if not isinstance(raw, Mapping):
        raise HooksConfigError(f"Hook handler must be a table, got {type(raw).__name__}")

    kind = raw.get("type")
    if kind == "command":
        command = raw.get("command")
        if isinstance(command, str):
            return CommandHandler(command=command, timeout=_timeout(raw))
        if isinstance(command, (list, tuple)) and all(isinstance(a, str) for a in command):
            return CommandHandler(command=tuple(command), timeout=_timeout(raw))
        raise HooksConfigError("Command hook requires 'command' as a string or list of strings")
    if kind == "prompt":
        prompt = raw.get("prompt")
        if not isinstance(prompt, str) or not prompt:
            raise HooksConfigError("Prompt hook requires a non-empty 'prompt'")
        model = raw.get("model")
        if model is not None and not isinstance(model, str):
            raise HooksConfigError("Prompt hook 'model' must be a string")
        return PromptHandler(prompt=prompt, model=model, timeout=_timeout(raw))
    if kind == "agent":
        agent = raw.get("agent")
        if not isinstance(agent, str) or not agent:
            raise HooksConfigError("Agent hook requires a non-empty 'agent'")
        return AgentHandler(agent=agent, timeout=_timeout(raw))
    raise HooksConfigError(f"Unknown hook handler type: {kind!r}")


def rule_from_dict(raw: Mapping[str, Any]) -> HookRule:
    """Build a rule from ``{"matcher": ..., "hooks": [...]}``.

    A missing matcher matches everything.
    """
    if not isinstance(raw, Mapping):
        raise HooksConfigError(f"Hook rule must be a table, got {type(raw).__name__}")
    matcher = raw.get("matcher", "*")
    if not isinstance(matcher, str):
        raise HooksConfigError(f"Hook matcher must be a string, got {matcher!r}")
    hooks = raw.get("hooks", [])
    if not isinstance(hooks, list):
        raise HooksConfigError("Hook rule 'hooks' must be a list")
    return HookRule(matcher=matcher, hooks=tuple(handler_from_dict(h) for h in hooks))
