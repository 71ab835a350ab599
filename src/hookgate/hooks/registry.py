"""Resolve configured rules into the ordered handlers for an event."""

from __future__ import annotations

import fnmatch
from collections.abc import Mapping, Sequence
from typing import Any

from hookgate.errors import HooksConfigError
from hookgate.types.hooks import (
    HookEvent,
    HookHandler,
    HookRule,
    HooksConfig,
    rule_from_dict,
)


def matches_pattern(pattern: str, identifier: str) -> bool:
    """Check if *identifier* matches a glob *pattern* (case-sensitive)."""
    # Exact match (fast path)
    if pattern == "*" or pattern == identifier:
        return True
    return fnmatch.fnmatchcase(identifier, pattern)


def get_rules_for_event(
    config: HooksConfig | None, event: HookEvent | str,
) -> Sequence[HookRule]:
    """Rules configured for *event*, whether keyed by enum member or name."""
    if not config:
        return ()
    if isinstance(event, HookEvent):
        rules = config.get(event)
        if rules is None:
            rules = config.get(event.value)
    else:
        rules = config.get(event)
        if rules is None:
            try:
                rules = config.get(HookEvent(event))
            except ValueError:
                rules = None
    return rules or ()


def match_hooks(
    config: HooksConfig | None,
    event: HookEvent | str,
    identifier: str,
) -> list[HookHandler]:
    """Handlers of every rule whose matcher accepts *identifier*.

    Rules are visited in configuration order and their handlers are
    concatenated as-is, without reordering or deduplication.
    """
    handlers: list[HookHandler] = []
    for rule in get_rules_for_event(config, event):
        if matches_pattern(rule.matcher, identifier):
            handlers.extend(rule.hooks)
    return handlers


def has_hooks_for_event(config: HooksConfig | None, event: HookEvent | str) -> bool:
    return len(get_rules_for_event(config, event)) > 0


def get_patterns_for_event(config: HooksConfig | None, event: HookEvent | str) -> list[str]:
    """Unique matchers for *event*, in first-seen order."""
    return list(dict.fromkeys(rule.matcher for rule in get_rules_for_event(config, event)))


def count_handlers_for_event(config: HooksConfig | None, event: HookEvent | str) -> int:
    return sum(len(rule.hooks) for rule in get_rules_for_event(config, event))


def parse_hooks_config(raw: Mapping[str, Any]) -> dict[HookEvent | str, list[HookRule]]:
    """Build a typed config from ``{event_name: [rule, ...]}``.

    Known event names become :class:`HookEvent` keys; unknown names are kept
    as strings so newer settings files still load.
    """
    if not isinstance(raw, Mapping):
        raise HooksConfigError(f"Hooks config must be a table, got {type(raw).__name__}")
    config: dict[HookEvent | str, list[HookRule]] = {}
    for name, rules in raw.items():
        if not isinstance(rules, list):
            raise HooksConfigError(f"Rules for {name!r} must be a list")
        try:
            key: HookEvent | str = HookEvent(name)
        except ValueError:
            key = name
        config[key] = [rule_from_dict(r) for r in rules]
    return config


def hooks_config_from_settings(
    settings: Mapping[str, Any] | None,
) -> dict[HookEvent | str, list[HookRule]] | None:
    """Read the ``hooks.claude`` section of a settings mapping."""
    if not settings:
        return None
    hooks = settings.get("hooks")
    if not isinstance(hooks, Mapping):
        return None
    claude = hooks.get("claude")
    if claude is None:
        return None
    return parse_hooks_config(claude)
