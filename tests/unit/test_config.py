"""Tests for hookgate.core.config — feature flag and settings discovery."""

from __future__ import annotations

import json

import pytest

from hookgate.core.config import (
    find_settings_file,
    get_hooks_config,
    is_hooks_enabled,
    load_hooks_config,
    load_settings,
)
from hookgate.errors import SettingsError
from hookgate.types.hooks import CommandHandler, HookEvent, HookRule

TOML_SETTINGS = """
[[hooks.claude.PreToolUse]]
matcher = "Bash"
hooks = [{ type = "command", command = "./guard.sh", timeout = 5 }]
"""


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run with an empty cwd and home so real settings files are never found."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    monkeypatch.delenv("HOOKGATE_SETTINGS", raising=False)
    monkeypatch.delenv("HOOKGATE_HOOKS_ENABLED", raising=False)
    return tmp_path


def _write(directory, name, text):
    settings_dir = directory / ".hookgate"
    settings_dir.mkdir(parents=True, exist_ok=True)
    path = settings_dir / name
    path.write_text(text)
    return path


class TestFeatureFlag:
    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes", " on "])
    def test_enabled(self, monkeypatch, value):
        monkeypatch.setenv("HOOKGATE_HOOKS_ENABLED", value)
        assert is_hooks_enabled() is True

    @pytest.mark.parametrize("value", ["", "0", "false", "off", "nope"])
    def test_disabled(self, monkeypatch, value):
        monkeypatch.setenv("HOOKGATE_HOOKS_ENABLED", value)
        assert is_hooks_enabled() is False

    def test_unset(self, monkeypatch):
        monkeypatch.delenv("HOOKGATE_HOOKS_ENABLED", raising=False)
        assert is_hooks_enabled() is False


class TestFindSettingsFile:
    def test_none_found(self, isolated):
        assert find_settings_file() is None

    def test_explicit_cwd_first(self, isolated):
        project = isolated / "project"
        expected = _write(project, "settings.toml", TOML_SETTINGS)
        _write(isolated / "work", "settings.toml", TOML_SETTINGS)
        assert find_settings_file(str(project)) == expected

    def test_process_cwd(self, isolated):
        expected = _write(isolated / "work", "settings.json", "{}")
        assert find_settings_file() == expected

    def test_home_fallback(self, isolated):
        expected = _write(isolated / "home", "settings.toml", "")
        assert find_settings_file() == expected

    def test_toml_preferred_over_json(self, isolated):
        expected = _write(isolated / "work", "settings.toml", "")
        _write(isolated / "work", "settings.json", "{}")
        assert find_settings_file() == expected

    def test_env_override(self, isolated, monkeypatch):
        path = isolated / "custom.json"
        path.write_text("{}")
        _write(isolated / "work", "settings.toml", "")
        monkeypatch.setenv("HOOKGATE_SETTINGS", str(path))
        assert find_settings_file() == path

    def test_env_override_missing(self, isolated, monkeypatch):
        _write(isolated / "work", "settings.toml", "")
        monkeypatch.setenv("HOOKGATE_SETTINGS", str(isolated / "absent.toml"))
        assert find_settings_file() is None


class TestLoadSettings:
    def test_toml(self, tmp_path):
        path = tmp_path / "settings.toml"
        path.write_text(TOML_SETTINGS)
        data = load_settings(path)
        assert data["hooks"]["claude"]["PreToolUse"][0]["matcher"] == "Bash"

    def test_json(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"hooks": {"claude": {}}}))
        assert load_settings(path) == {"hooks": {"claude": {}}}

    def test_missing_file(self, tmp_path):
        with pytest.raises(SettingsError, match="Cannot read"):
            load_settings(tmp_path / "nope.toml")

    def test_malformed_toml(self, tmp_path):
        path = tmp_path / "settings.toml"
        path.write_text("[hooks\n")
        with pytest.raises(SettingsError, match="Malformed"):
            load_settings(path)

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        with pytest.raises(SettingsError, match="Malformed"):
            load_settings(path)

    def test_non_object_json(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[]")
        with pytest.raises(SettingsError, match="top level"):
            load_settings(path)

    def test_load_hooks_config(self, tmp_path):
        path = tmp_path / "settings.toml"
        path.write_text(TOML_SETTINGS)
        assert load_hooks_config(path) == {
            HookEvent.PRE_TOOL_USE: [
                HookRule(matcher="Bash", hooks=(CommandHandler(command="./guard.sh", timeout=5.0),)),
            ],
        }


class TestGetHooksConfig:
    def test_flag_off(self, isolated):
        _write(isolated / "work", "settings.toml", TOML_SETTINGS)
        assert get_hooks_config() is None

    def test_flag_on(self, isolated, monkeypatch):
        _write(isolated / "work", "settings.toml", TOML_SETTINGS)
        monkeypatch.setenv("HOOKGATE_HOOKS_ENABLED", "1")
        config = get_hooks_config()
        assert [r.matcher for r in config[HookEvent.PRE_TOOL_USE]] == ["Bash"]

    def test_no_file(self, isolated, monkeypatch):
        monkeypatch.setenv("HOOKGATE_HOOKS_ENABLED", "1")
        assert get_hooks_config() is None

    def test_invalid_config_ignored(self, isolated, monkeypatch, caplog):
        _write(isolated / "work", "settings.json", json.dumps(
            {"hooks": {"claude": {"PreToolUse": [{"hooks": [{"type": "webhook"}]}]}}},
        ))
        monkeypatch.setenv("HOOKGATE_HOOKS_ENABLED", "1")
        with caplog.at_level("WARNING", logger="hookgate.core.config"):
            assert get_hooks_config() is None
        assert "Ignoring hooks config" in caplog.text
