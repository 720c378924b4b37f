"""Configuration loading and custom commands.

Reads an optional YAML file:

    pollInterval: 2
    logLevel: INFO
    logFile: /tmp/lazybeads.log
    customCommands:
      - key: w
        description: Open in tmux
        context: list
        command: tmux new-window -n {id:sh} "bd show {id:sh}"
"""

from __future__ import annotations

import os
import shlex
import string
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from . import logging_bridge as log
from .data.models import Issue

DEFAULT_POLL_INTERVAL = 2.0
MIN_POLL_INTERVAL = 0.5
CONTEXTS = ("list", "detail", "board", "global")


class ConfigError(Exception):
    """Raised when the config file exists but can't be used."""


@dataclass
class CustomCommand:
    """A user-defined shell command bound to a key."""

    key: str
    command: str
    description: str = ""
    context: str = "list"

    def applies_to(self, context: str) -> bool:
        return self.context == context or self.context == "global"


@dataclass
class Config:
    custom_commands: list[CustomCommand] = field(default_factory=list)
    poll_interval: float = DEFAULT_POLL_INTERVAL
    log_level: str = "INFO"
    log_file: str | None = None
    path: Path | None = None

    def command_for(self, key: str, context: str) -> CustomCommand | None:
        """Return the first custom command bound to key in context."""
        for cmd in self.custom_commands:
            if cmd.key == key and cmd.applies_to(context):
                return cmd
        return None


def config_path() -> Path:
    """Locate the config file.

    Checks $LAZYBEADS_CONFIG, then $XDG_CONFIG_HOME/lazybeads/config.yml, then
    ~/.config/lazybeads/config.yml.
    """
    explicit = os.environ.get("LAZYBEADS_CONFIG")
    if explicit:
        return Path(explicit).expanduser()
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "lazybeads" / "config.yml"
    return Path.home() / ".config" / "lazybeads" / "config.yml"


def _parse_command(raw: Any, index: int) -> CustomCommand:
    if not isinstance(raw, dict):
        raise ConfigError(f"customCommands[{index}] must be a mapping")
    key = str(raw.get("key") or "")
    command = str(raw.get("command") or "")
    if not key or not command:
        raise ConfigError(f"customCommands[{index}] needs both key and command")
    context = str(raw.get("context") or "list")
    if context not in CONTEXTS:
        raise ConfigError(f"customCommands[{index}] has unknown context {context!r}")
    return CustomCommand(
        key=key,
        command=command,
        description=str(raw.get("description") or ""),
        context=context,
    )


def parse_config(raw: Any, path: Path | None = None) -> Config:
    """Build a Config from a decoded YAML document."""
    if raw is None:
        return Config(path=path)
    if not isinstance(raw, dict):
        raise ConfigError("config must be a mapping")

    commands_raw = raw.get("customCommands") or []
    if not isinstance(commands_raw, list):
        raise ConfigError("customCommands must be a list")
    commands = [_parse_command(item, i) for i, item in enumerate(commands_raw)]

    try:
        poll_interval = float(raw.get("pollInterval", DEFAULT_POLL_INTERVAL))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"pollInterval must be a number: {e}") from e

    log_file = raw.get("logFile")
    return Config(
        custom_commands=commands,
        poll_interval=max(MIN_POLL_INTERVAL, poll_interval),
        log_level=str(raw.get("logLevel") or "INFO"),
        log_file=str(Path(str(log_file)).expanduser()) if log_file else None,
        path=path,
    )


def load_config(path: Path | None = None) -> Config:
    """Load the config file, returning defaults if it doesn't exist.

    Raises:
        ConfigError: If the file can't be read or isn't valid.
    """
    path = path or config_path()
    if not path.exists():
        return Config(path=path)
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"failed to read {path}: {e}") from e
    return parse_config(raw, path)


class _CommandFormatter(string.Formatter):
    """str.format with a ``sh`` format spec that shell-quotes the value."""

    def format_field(self, value: Any, format_spec: str) -> str:
        if format_spec == "sh":
            return shlex.quote(str(value))
        return super().format_field(value, format_spec)


def issue_fields(issue: Issue) -> dict[str, Any]:
    return {
        "id": issue.id,
        "title": issue.title,
        "status": issue.status.value,
        "priority": issue.priority,
        "type": issue.issue_type.value,
        "assignee": issue.assignee,
    }


def render_command(template: str, issue: Issue) -> str:
    """Fill {field} placeholders in template from issue.

    Raises:
        ConfigError: On unknown fields or malformed placeholders.
    """
    try:
        return _CommandFormatter().format(template, **issue_fields(issue))
    except (KeyError, IndexError, ValueError) as e:
        raise ConfigError(f"bad command template {template!r}: {e}") from e


def run_custom_command(cmd: CustomCommand, issue: Issue, cwd: Path | None = None) -> subprocess.Popen:
    """Render and launch cmd without waiting for it to finish."""
    rendered = render_command(cmd.command, issue)
    log.log(f"Running custom command '{cmd.key}': {rendered}")
    return subprocess.Popen(
        rendered,
        shell=True,
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )
