"""Tests for the hookgate CLI."""

from __future__ import annotations

import json
import sys

import pytest
from click.testing import CliRunner

from hookgate.cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def settings_file(tmp_path):
    """Settings that deny Bash and let everything else through."""
    script = tmp_path / "deny_bash.py"
    script.write_text(
        "import json, sys\n"
        "data = json.load(sys.stdin)\n"
        "if data['tool_name'] == 'Bash':\n"
        "    print(json.dumps({'decision': 'deny', 'reason': 'no shell'}))\n"
    )
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "hooks": {
            "claude": {
                "PreToolUse": [
                    {"matcher": "*", "hooks": [
                        {"type": "command", "command": [sys.executable, str(script)], "timeout": 10},
                    ]},
                    {"matcher": "mcp__*", "hooks": [{"type": "prompt", "prompt": "Is this safe?"}]},
                ],
            },
        },
    }))
    return str(path)


class TestList:
    def test_lists_rules(self, runner, settings_file):
        result = runner.invoke(cli, ["list", "--settings", settings_file])
        assert result.exit_code == 0, result.output
        assert "PreToolUse" in result.output
        assert "mcp__*" in result.output
        assert "prompt" in result.output

    def test_event_filter(self, runner, settings_file):
        result = runner.invoke(cli, ["list", "--settings", settings_file, "--event", "Stop"])
        assert result.exit_code == 0
        assert "No hooks configured for Stop." in result.output

    def test_nothing_configured(self, runner, monkeypatch):
        monkeypatch.delenv("HOOKGATE_HOOKS_ENABLED", raising=False)
        result = runner.invoke(cli, ["list"])
        assert result.exit_code == 0
        assert "No hooks configured" in result.output

    def test_bad_settings(self, runner, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{oops")
        result = runner.invoke(cli, ["list", "--settings", str(path)])
        assert result.exit_code == 1
        assert "Malformed settings file" in result.output


class TestCheck:
    def test_deny_exits_2(self, runner, settings_file):
        result = runner.invoke(
            cli, ["check", "Bash", "--input", '{"command": "ls"}', "--settings", settings_file],
        )
        assert result.exit_code == 2
        assert json.loads(result.output) == {"decision": "deny", "reason": "no shell"}

    def test_allow(self, runner, settings_file):
        result = runner.invoke(
            cli, ["check", "Read", "--input", '{"file_path": "a.py"}', "--settings", settings_file],
        )
        assert result.exit_code == 0
        assert json.loads(result.output) == {"decision": "allow"}

    def test_invalid_input_json(self, runner, settings_file):
        result = runner.invoke(cli, ["check", "Bash", "--input", "{nope", "--settings", settings_file])
        assert result.exit_code == 2
        assert "not valid JSON" in result.output

    def test_input_must_be_object(self, runner, settings_file):
        result = runner.invoke(cli, ["check", "Bash", "--input", "[1]", "--settings", settings_file])
        assert result.exit_code == 2
        assert "must be a JSON object" in result.output
