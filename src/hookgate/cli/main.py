"""CLI entry point for hookgate."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from hookgate.errors import HookgateError
from hookgate.hooks.circuit import handler_id
from hookgate.hooks.pre_tool_use import PreToolUseRequest, run_pre_tool_use_hooks
from hookgate.types.hooks import DEFAULT_TIMEOUTS, HookEvent, HookRule


def _load_config(settings: str | None, cwd: str | None) -> dict[Any, list[HookRule]] | None:
    """Explicit --settings bypasses the feature flag; otherwise use discovery."""
    from hookgate.core.config import get_hooks_config, load_hooks_config

    if settings is None:
        return get_hooks_config(cwd)
    try:
        return load_hooks_config(settings)
    except HookgateError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _event_name(event: HookEvent | str) -> str:
    return event.value if isinstance(event, HookEvent) else event


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
def cli(verbose: bool) -> None:
    """hookgate -- policy hooks for agent tool calls.

    \b
    Usage:
      hookgate list
      hookgate check Bash --input '{"command": "ls"}'
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


@cli.command("list")
@click.option("--event", "-e", default=None, help="Only show this event (e.g. PreToolUse)")
@click.option("--settings", type=click.Path(dir_okay=False), default=None, help="Settings file")
@click.option("--cwd", default=None, help="Directory to search for .hookgate/settings")
def list_hooks(event: str | None, settings: str | None, cwd: str | None) -> None:
    """Show configured hook rules."""
    config = _load_config(settings, cwd)
    if not config:
        click.echo("No hooks configured (set HOOKGATE_HOOKS_ENABLED=1 or pass --settings).")
        return

    tbl = Table(show_lines=False, expand=False)
    tbl.add_column("Event", no_wrap=True)
    tbl.add_column("Matcher", no_wrap=True)
    tbl.add_column("Type", no_wrap=True)
    tbl.add_column("Handler")
    tbl.add_column("Timeout", justify="right", no_wrap=True)

    rows = 0
    for key, rules in config.items():
        name = _event_name(key)
        if event and name != event:
            continue
        for rule in rules:
            for handler in rule.hooks:
                timeout = handler.timeout or DEFAULT_TIMEOUTS[handler.type]
                tbl.add_row(name, rule.matcher, handler.type, handler_id(handler), f"{timeout:g}s")
                rows += 1

    if not rows:
        click.echo(f"No hooks configured for {event}.")
        return
    Console(soft_wrap=True).print(tbl)


@cli.command("check")
@click.argument("tool_name")
@click.option("--input", "-i", "tool_input", default="{}", help="Tool input as a JSON object")
@click.option("--session", "-s", default=None, help="Session ID passed to hooks")
@click.option("--cwd", default=None, help="Working directory passed to hooks")
@click.option("--settings", type=click.Path(dir_okay=False), default=None, help="Settings file")
def check(
    tool_name: str,
    tool_input: str,
    session: str | None,
    cwd: str | None,
    settings: str | None,
) -> None:
    """Run PreToolUse hooks for TOOL_NAME and print the decision.

    Exits 2 when the tool call is denied.
    """
    try:
        params = json.loads(tool_input)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--input") from e
    if not isinstance(params, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--input")

    config = _load_config(settings, cwd)
    request = PreToolUseRequest(
        tool_name=tool_name,
        tool_input=params,
        session_id=session,
        cwd=str(Path(cwd).resolve()) if cwd else None,
    )
    result = asyncio.run(run_pre_tool_use_hooks(request, config=config))

    out: dict[str, Any] = {"decision": result.decision}
    if result.reason is not None:
        out["reason"] = result.reason
    if result.updated_input is not None:
        out["updatedInput"] = result.updated_input
    click.echo(json.dumps(out))
    if result.denied:
        sys.exit(2)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
