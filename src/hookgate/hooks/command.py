"""Command hooks: argv parsing and supervised subprocess execution."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import shlex
import signal
from collections.abc import Sequence
from dataclasses import dataclass

from hookgate.errors import CommandParseError
from hookgate.hooks.circuit import CircuitBreakerStore, default_breaker, handler_id
from hookgate.types.hooks import (
    DEFAULT_TIMEOUTS,
    CommandHandler,
    HookBlocked,
    HookError,
    HookInput,
    HookOutcome,
    HookOutput,
    HookSuccess,
)

logger = logging.getLogger(__name__)

OUTPUT_LIMIT_BYTES = 10 * 1024 * 1024  # stdout + stderr combined
KILL_GRACE_SECONDS = 5.0
DENY_EXIT_CODE = 2

_READ_CHUNK = 64 * 1024
_OPERATOR_CHARS = frozenset(";&|<>()`")
_GLOB_CHARS = frozenset("*?")
_UNSUPPORTED = "Command contains unsupported operators"

# The child may exit (or close stdin) before reading its input.
_BENIGN_STDIN_ERRORS = (BrokenPipeError, ConnectionResetError)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _check_literal(command: str) -> None:
    """Reject shell operators, globs and comments appearing outside quotes."""
    quote: str | None = None
    escaped = False
    word_start = True
    for ch in command:
        if escaped:
            escaped = False
            word_start = False
            continue
        if quote == "'":
            if ch == "'":
                quote = None
            continue
        if quote == '"':
            if ch == "\\":
                escaped = True
            elif ch == '"':
                quote = None
            continue
        if ch == "\\":
            escaped = True
            continue
        if ch in ("'", '"'):
            quote = ch
            word_start = False
            continue
        if ch.isspace():
            word_start = True
            continue
        if ch in _OPERATOR_CHARS or ch in _GLOB_CHARS or (ch == "#" and word_start):
            raise CommandParseError(_UNSUPPORTED)
        word_start = False


def parse_command(command: str | Sequence[str]) -> list[str]:
    """Turn a configured command into an argv for direct process creation.

    Lists are used verbatim. Strings are split with POSIX shell quoting
    rules, and rejected outright if they contain anything a shell would
    interpret (pipes, redirects, separators, substitutions, globs).
    """
    if not isinstance(command, str):
        argv = list(command)
        if not argv:
            raise CommandParseError("Command array is empty")
        return argv

    _check_literal(command)
    try:
        argv = shlex.split(command)
    except ValueError as exc:
        # Unbalanced quotes or a trailing escape.
        raise CommandParseError(f"{_UNSUPPORTED}: {exc}") from exc
    if not argv:
        raise CommandParseError("Command string is empty")
    return argv


# ---------------------------------------------------------------------------
# Process supervision
# ---------------------------------------------------------------------------


def _signal_group(proc: asyncio.subprocess.Process, sig: int) -> None:
    """Signal the hook's whole process group (it leads its own session)."""
    try:
        os.killpg(proc.pid, sig)
    except (ProcessLookupError, PermissionError):
        # Group already gone (or only zombies left on some platforms).
        pass


class _KillTimers:
    """Primary timeout (SIGTERM) and the SIGKILL escalation it arms.

    The escalation also cancels *io* so a descendant that survives SIGKILL
    or keeps the pipes open cannot stall the caller.
    """

    def __init__(
        self,
        proc: asyncio.subprocess.Process,
        io: asyncio.Future,
        timeout: float,
        grace: float,
    ) -> None:
        self._proc = proc
        self._io = io
        self._grace = grace
        self._loop = asyncio.get_running_loop()
        self._term_handle = self._loop.call_later(timeout, self._on_timeout)
        self._kill_handle: asyncio.TimerHandle | None = None
        self.fired = False

    def _on_timeout(self) -> None:
        # The direct child may be gone while a background descendant still
        # holds stdout/stderr, so this fires regardless of its returncode.
        self.fired = True
        logger.debug("Hook process %d timed out, sending SIGTERM", self._proc.pid)
        _signal_group(self._proc, signal.SIGTERM)
        self._kill_handle = self._loop.call_later(self._grace, self._on_grace_expired)

    def _on_grace_expired(self) -> None:
        logger.debug("Hook process %d ignored SIGTERM, sending SIGKILL", self._proc.pid)
        _signal_group(self._proc, signal.SIGKILL)
        self._io.cancel()

    def cancel(self) -> None:
        self._term_handle.cancel()
        if self._kill_handle is not None:
            self._kill_handle.cancel()


@dataclass(slots=True)
class _OutputBudget:
    limit: int
    used: int = 0
    exceeded: bool = False


@dataclass(slots=True)
class _ProcessRun:
    returncode: int | None
    stdout: str
    stderr: str
    timed_out: bool = False
    overflowed: bool = False
    stdin_error: OSError | None = None


async def _feed_stdin(proc: asyncio.subprocess.Process, payload: bytes) -> OSError | None:
    stdin = proc.stdin
    if stdin is None:
        return None
    try:
        stdin.write(payload)
        await stdin.drain()
        stdin.close()
        await stdin.wait_closed()
    except _BENIGN_STDIN_ERRORS:
        stdin.close()
    except OSError as exc:
        stdin.close()
        _signal_group(proc, signal.SIGKILL)
        return exc
    return None


async def _drain(
    stream: asyncio.StreamReader | None,
    budget: _OutputBudget,
    proc: asyncio.subprocess.Process,
) -> bytes:
    if stream is None:
        return b""
    chunks: list[bytes] = []
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            break
        budget.used += len(chunk)
        if budget.used > budget.limit:
            if not budget.exceeded:
                budget.exceeded = True
                _signal_group(proc, signal.SIGKILL)
            break
        chunks.append(chunk)
    return b"".join(chunks)


async def _run_process(argv: list[str], payload: bytes, timeout: float) -> _ProcessRun:
    """Spawn *argv*, feed *payload* on stdin, and collect its output.

    Raises ``OSError`` if the process cannot be started.
    """
    proc = await asyncio.create_subprocess_exec(
        *argv,
        stdin=asyncio.subprocess.PIPE,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        start_new_session=True,
    )
    logger.debug("Started hook process %d: %s", proc.pid, argv[0])
    budget = _OutputBudget(limit=OUTPUT_LIMIT_BYTES)
    io = asyncio.ensure_future(asyncio.gather(
        _feed_stdin(proc, payload),
        _drain(proc.stdout, budget, proc),
        _drain(proc.stderr, budget, proc),
    ))
    timers = _KillTimers(proc, io, timeout, KILL_GRACE_SECONDS)
    try:
        # asyncio.wait so the escalation timer can cancel io without
        # cancelling this coroutine.
        await asyncio.wait({io})
        if io.cancelled():
            # Already SIGKILLed; proc.wait() could block on pipes a
            # detached descendant still holds.
            stdin_error, stdout, stderr = None, b"", b""
            returncode = proc.returncode
        else:
            stdin_error, stdout, stderr = io.result()
            returncode = await proc.wait()
    finally:
        timers.cancel()
        if not io.done():
            io.cancel()
        if proc.returncode is None:
            _signal_group(proc, signal.SIGKILL)

    return _ProcessRun(
        returncode=returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
        timed_out=timers.fired,
        overflowed=budget.exceeded,
        stdin_error=stdin_error,
    )


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


def _fail(
    breaker: CircuitBreakerStore,
    hid: str,
    message: str,
    disabled_message: str | None = None,
) -> HookError:
    disabled = breaker.record_failure(hid)
    if disabled and disabled_message is not None:
        return HookError(disabled_message)
    return HookError(message)


async def run_command_hook(
    handler: CommandHandler,
    hook_input: HookInput,
    *,
    breaker: CircuitBreakerStore = default_breaker,
) -> HookOutcome:
    """Run one command handler against *hook_input*.

    Exit code 0 means success (stdout holds the decision JSON, or nothing),
    exit code 2 is an explicit deny with the reason on stderr, and anything
    else is a failure counted by the circuit breaker.
    """
    hid = handler_id(handler)
    limit = breaker.threshold

    if breaker.is_disabled(hid):
        return HookError(f"Hook disabled after {limit} consecutive failures")

    try:
        argv = parse_command(handler.command)
    except CommandParseError as exc:
        logger.warning("Hook %s has an unusable command: %s", hid, exc)
        return HookBlocked(str(exc))

    timeout = handler.timeout if handler.timeout is not None else DEFAULT_TIMEOUTS["command"]

    try:
        run = await _run_process(argv, hook_input.to_json().encode("utf-8"), timeout)
    except OSError as exc:
        return _fail(
            breaker, hid,
            f"Hook failed to start: {exc}",
            f"Hook failed to start, disabled after {limit} failures: {exc}",
        )

    if run.timed_out:
        return _fail(breaker, hid, "Hook timed out")

    if run.overflowed:
        return _fail(breaker, hid, f"Hook output exceeded {OUTPUT_LIMIT_BYTES} bytes")

    if run.stdin_error is not None:
        return _fail(breaker, hid, f"Failed to write hook input: {run.stdin_error}")

    if run.returncode == 0:
        text = run.stdout.strip()
        try:
            output = HookOutput.from_dict(json.loads(text) if text else {})
        except ValueError:
            return _fail(
                breaker, hid,
                f"Invalid JSON output: {run.stdout}",
                f"Invalid JSON output (disabled after {limit} failures): {run.stdout}",
            )
        breaker.record_success(hid)
        return HookSuccess(output)

    if run.returncode == DENY_EXIT_CODE:
        breaker.record_success(hid)
        return HookBlocked(run.stderr.strip() or "Hook denied")

    code = run.returncode
    return _fail(
        breaker, hid,
        f"Hook failed (exit {code}): {run.stderr}",
        f"Hook failed (exit {code}), disabled after {limit} failures: {run.stderr}",
    )
