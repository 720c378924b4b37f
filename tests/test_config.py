"""Tests for config loading and custom command rendering."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from lazybeads.config import (
    DEFAULT_POLL_INTERVAL,
    MIN_POLL_INTERVAL,
    ConfigError,
    CustomCommand,
    config_path,
    load_config,
    parse_config,
    render_command,
    run_custom_command,
)


class TestConfigPath:
    def test_explicit_env(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("LAZYBEADS_CONFIG", str(tmp_path / "mine.yml"))
        assert config_path() == tmp_path / "mine.yml"

    def test_xdg(self, monkeypatch, tmp_path: Path):
        monkeypatch.delenv("LAZYBEADS_CONFIG", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert config_path() == tmp_path / "lazybeads" / "config.yml"

    def test_home_fallback(self, monkeypatch, tmp_path: Path):
        monkeypatch.delenv("LAZYBEADS_CONFIG", raising=False)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert config_path() == tmp_path / ".config" / "lazybeads" / "config.yml"


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path):
        config = load_config(tmp_path / "absent.yml")
        assert config.custom_commands == []
        assert config.poll_interval == DEFAULT_POLL_INTERVAL

    def test_full_file(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text(
            "pollInterval: 5\n"
            "logLevel: DEBUG\n"
            "customCommands:\n"
            "  - key: t\n"
            "    description: Open in tmux\n"
            "    command: tmux new-window {id:sh}\n"
            "  - key: o\n"
            "    context: detail\n"
            "    command: open {id}\n"
        )
        config = load_config(path)
        assert config.poll_interval == 5.0
        assert config.log_level == "DEBUG"
        assert [c.key for c in config.custom_commands] == ["t", "o"]
        assert config.custom_commands[0].context == "list"
        assert config.command_for("o", "detail").command == "open {id}"
        assert config.command_for("o", "list") is None

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("")
        assert load_config(path).custom_commands == []

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("customCommands: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(path)


class TestParseConfig:
    def test_poll_interval_minimum(self):
        assert parse_config({"pollInterval": 0.01}).poll_interval == MIN_POLL_INTERVAL

    def test_poll_interval_not_a_number(self):
        with pytest.raises(ConfigError):
            parse_config({"pollInterval": "soon"})

    @pytest.mark.parametrize(
        "commands",
        [
            "not a list",
            ["not a mapping"],
            [{"key": "t"}],
            [{"key": "t", "command": "x", "context": "sidebar"}],
        ],
    )
    def test_bad_commands(self, commands):
        with pytest.raises(ConfigError):
            parse_config({"customCommands": commands})

    def test_top_level_must_be_mapping(self):
        with pytest.raises(ConfigError):
            parse_config(["a", "b"])

    def test_global_context_applies_everywhere(self):
        cmd = CustomCommand(key="g", command="x", context="global")
        assert cmd.applies_to("list") and cmd.applies_to("board") and cmd.applies_to("detail")


class TestRenderCommand:
    def test_fields(self, issue_factory):
        issue = issue_factory("bd-7", "Fix it", priority=1)
        assert render_command("bd show {id} # P{priority} {status}", issue) == "bd show bd-7 # P1 open"

    def test_shell_quoting(self, issue_factory):
        issue = issue_factory("bd-7", "it's $HOME")
        assert render_command("echo {title:sh}", issue) == "echo 'it'\"'\"'s $HOME'"

    def test_unknown_field(self, issue_factory):
        with pytest.raises(ConfigError):
            render_command("echo {nope}", issue_factory("bd-7"))

    def test_malformed_template(self, issue_factory):
        with pytest.raises(ConfigError):
            render_command("echo {id", issue_factory("bd-7"))


class TestRunCustomCommand:
    def test_launches_without_waiting(self, issue_factory, tmp_path: Path):
        cmd = CustomCommand(key="t", command="echo {id:sh}")
        with patch("subprocess.Popen") as popen:
            run_custom_command(cmd, issue_factory("bd-7"), cwd=tmp_path)
        args, kwargs = popen.call_args
        assert args[0] == "echo bd-7"
        assert kwargs["shell"] is True
        assert kwargs["cwd"] == tmp_path
        assert kwargs["stdin"] == subprocess.DEVNULL
