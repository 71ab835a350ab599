"""Per-handler circuit breaker.

A handler that fails ``MAX_CONSECUTIVE_FAILURES`` times in a row is
disabled for the rest of the process. A success resets the failure
count but never re-enables a disabled handler; only :meth:`reset` does.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict, dataclass, is_dataclass
from typing import Any

from hookgate.types.hooks import AgentHandler, CommandHandler, PromptHandler

logger = logging.getLogger(__name__)

MAX_CONSECUTIVE_FAILURES = 3
_PROMPT_ID_PREFIX = 50


def handler_id(handler: Any) -> str:
    """Stable identity for breaker bookkeeping.

    Derived from the descriptor's contents, so descriptors rebuilt from an
    identical config share state.
    """
    if isinstance(handler, CommandHandler):
        command = handler.command
        cmd = command if isinstance(command, str) else " ".join(command)
        return f"command:{cmd}"
    if isinstance(handler, PromptHandler):
        return f"prompt:{handler.prompt[:_PROMPT_ID_PREFIX]}"
    if isinstance(handler, AgentHandler):
        return f"agent:{handler.agent}"
    data = asdict(handler) if is_dataclass(handler) and not isinstance(handler, type) else handler
    return f"unknown:{json.dumps(data, sort_keys=True, default=str)}"


@dataclass(slots=True)
class CircuitBreakerState:
    """Failure counter for one handler identity."""

    failures: int = 0
    disabled: bool = False


class CircuitBreakerStore:
    """Thread-safe map of handler identity -> :class:`CircuitBreakerState`."""

    def __init__(self, threshold: int = MAX_CONSECUTIVE_FAILURES) -> None:
        self._threshold = threshold
        self._states: dict[str, CircuitBreakerState] = {}
        self._lock = threading.Lock()

    @property
    def threshold(self) -> int:
        return self._threshold

    def _get(self, handler_id: str) -> CircuitBreakerState:
        state = self._states.get(handler_id)
        if state is None:
            state = CircuitBreakerState()
            self._states[handler_id] = state
        return state

    def record_success(self, handler_id: str) -> None:
        """Reset the failure count. Does not clear ``disabled``."""
        with self._lock:
            self._get(handler_id).failures = 0

    def record_failure(self, handler_id: str) -> bool:
        """Count a failure. Returns True once the handler is disabled."""
        with self._lock:
            state = self._get(handler_id)
            state.failures += 1
            if state.failures >= self._threshold:
                if not state.disabled:
                    logger.warning(
                        "Hook %s disabled after %d consecutive failures",
                        handler_id, state.failures,
                    )
                state.disabled = True
                return True
            return False

    def is_disabled(self, handler_id: str) -> bool:
        with self._lock:
            state = self._states.get(handler_id)
            return state.disabled if state is not None else False

    def state(self, handler_id: str) -> CircuitBreakerState:
        """Snapshot of the state for *handler_id* (a fresh state if unseen)."""
        with self._lock:
            state = self._states.get(handler_id)
            if state is None:
                return CircuitBreakerState()
            return CircuitBreakerState(failures=state.failures, disabled=state.disabled)

    def reset(self, handler_id: str) -> None:
        with self._lock:
            self._states.pop(handler_id, None)

    def reset_all(self) -> None:
        with self._lock:
            self._states.clear()


# Process-wide store shared by every executor that isn't handed its own.
default_breaker = CircuitBreakerStore()
