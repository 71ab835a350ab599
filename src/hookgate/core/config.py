"""Settings loading (TOML/JSON settings files, env vars)."""

from __future__ import annotations

import json
import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from hookgate.errors import HookgateError, SettingsError
from hookgate.hooks.registry import hooks_config_from_settings
from hookgate.types.hooks import HookEvent, HookRule

logger = logging.getLogger(__name__)

# Load .env from current directory (and parents), won't override existing env vars
load_dotenv()

ENABLED_ENV = "HOOKGATE_HOOKS_ENABLED"
SETTINGS_ENV = "HOOKGATE_SETTINGS"
SETTINGS_DIR = ".hookgate"
SETTINGS_NAMES = ("settings.toml", "settings.json")

_TRUTHY = {"1", "true", "yes", "on"}


def is_hooks_enabled() -> bool:
    """Feature flag for hook evaluation. Off unless explicitly enabled."""
    return os.environ.get(ENABLED_ENV, "").strip().lower() in _TRUTHY


def find_settings_file(cwd: str | None = None) -> Path | None:
    """Locate the settings file.

    ``$HOOKGATE_SETTINGS`` wins; otherwise ``.hookgate/settings.{toml,json}``
    is searched in *cwd*, the process cwd, then the home directory.
    """
    if override := os.environ.get(SETTINGS_ENV):
        path = Path(override).expanduser()
        return path if path.exists() else None

    search_dirs: list[Path] = []
    if cwd:
        search_dirs.append(Path(cwd))
    search_dirs.append(Path.cwd())
    search_dirs.append(Path.home())

    for d in search_dirs:
        for name in SETTINGS_NAMES:
            path = d / SETTINGS_DIR / name
            if path.exists():
                return path
    return None


def load_settings(path: str | Path) -> dict[str, Any]:
    """Parse a TOML or JSON settings file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SettingsError(f"Cannot read settings file {path}: {exc}") from exc

    try:
        if path.suffix == ".toml":
            data: Any = tomllib.loads(text)
        else:
            data = json.loads(text)
    except ValueError as exc:
        raise SettingsError(f"Malformed settings file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {path} must contain a table at the top level")
    return data


def load_hooks_config(path: str | Path) -> dict[HookEvent | str, list[HookRule]] | None:
    """Read and validate the hooks section of one settings file."""
    return hooks_config_from_settings(load_settings(path))


def get_hooks_config(cwd: str | None = None) -> dict[HookEvent | str, list[HookRule]] | None:
    """Hooks config for the current environment.

    Returns None when the feature flag is off, no settings file exists, or
    the settings cannot be loaded; callers treat all three the same way.
    """
    if not is_hooks_enabled():
        return None
    path = find_settings_file(cwd)
    if path is None:
        return None
    try:
        return load_hooks_config(path)
    except HookgateError as exc:
        logger.warning("Ignoring hooks config: %s", exc)
        return None
