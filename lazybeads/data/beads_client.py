"""Wrapper around the bd command-line tool.

Every call shells out to ``bd`` with ``--json`` where bd supports it and
parses the output into models. Failures raise BeadsError; the UI decides how
to surface them.
"""

from __future__ import annotations

import json
import re
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from .. import logging_bridge as log
from .models import Comment, Issue, IssueStatus, IssueType, Snapshot

DEFAULT_TIMEOUT = 30

# Go emits RFC 3339 with up to nine fractional digits and a "Z" suffix
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


class BeadsError(Exception):
    """Raised when a bd invocation fails or returns unparsable output."""


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp from bd, returning None if absent or invalid."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(r"\1", text)
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _str_tuple(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


def parse_issue(data: dict[str, Any]) -> Issue:
    """Build an Issue from one bd JSON object.

    Args:
        data: A decoded JSON object from ``bd list --json`` or ``bd show``.

    Returns:
        The parsed Issue.

    Raises:
        BeadsError: If the object has no identifier.
    """
    issue_id = data.get("id")
    if not issue_id:
        raise BeadsError(f"issue without id in bd output: {data!r}")
    try:
        priority = int(data.get("priority", 2))
    except (TypeError, ValueError):
        priority = 2
    return Issue(
        id=str(issue_id),
        title=str(data.get("title") or ""),
        status=IssueStatus.parse(data.get("status")),
        priority=priority,
        issue_type=IssueType.parse(data.get("issue_type")),
        description=str(data.get("description") or ""),
        assignee=str(data.get("assignee") or ""),
        labels=_str_tuple(data.get("labels")),
        blocked_by=_str_tuple(data.get("blocked_by")),
        blocks=_str_tuple(data.get("blocks")),
        created_at=parse_timestamp(data.get("created_at")),
        updated_at=parse_timestamp(data.get("updated_at")),
        closed_at=parse_timestamp(data.get("closed_at")),
    )


def parse_comment(data: dict[str, Any]) -> Comment:
    try:
        comment_id = int(data.get("id", 0))
    except (TypeError, ValueError):
        comment_id = 0
    return Comment(
        id=comment_id,
        author=str(data.get("author") or ""),
        text=str(data.get("text") or ""),
        created_at=parse_timestamp(data.get("created_at")),
    )


@dataclass
class CreateOptions:
    """Options for ``bd create``."""

    title: str
    description: str = ""
    issue_type: str = "task"
    priority: int = 2
    labels: list[str] = field(default_factory=list)


@dataclass
class UpdateOptions:
    """Options for ``bd update``. Empty fields are left unchanged."""

    status: str = ""
    priority: int | None = None
    title: str = ""
    assignee: str = ""
    issue_type: str = ""
    description: str | None = None
    notes: str = ""


class BeadsClient:
    """Thin client for the bd CLI."""

    def __init__(self, executable: str = "bd", cwd: Path | None = None, timeout: int = DEFAULT_TIMEOUT) -> None:
        self.executable = executable
        self.cwd = cwd
        self.timeout = timeout

    def is_initialized(self) -> bool:
        """Check whether the working directory contains a .beads directory."""
        base = self.cwd or Path.cwd()
        return (base / ".beads").is_dir()

    def _run(self, args: list[str]) -> str:
        """Run bd with args and return stdout.

        Raises:
            BeadsError: If bd is missing, times out, or exits non-zero.
        """
        cmd = [self.executable, *args]
        log.log_debug(f"bd: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                cwd=self.cwd,
            )
        except FileNotFoundError as e:
            raise BeadsError(f"{self.executable} not found on PATH") from e
        except subprocess.TimeoutExpired as e:
            raise BeadsError(f"bd {args[0]} timed out after {self.timeout}s") from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            log.log_error(f"bd {args[0]} failed (exit {result.returncode}): {stderr}")
            detail = f": {stderr}" if stderr else ""
            raise BeadsError(f"bd {args[0]} failed{detail}")
        return result.stdout

    def _run_json(self, args: list[str]) -> Any:
        out = self._run(args)
        if not out.strip():
            return []
        try:
            return json.loads(out)
        except json.JSONDecodeError as e:
            raise BeadsError(f"failed to parse bd {args[0]} output: {e}") from e

    def _run_issues(self, args: list[str]) -> list[Issue]:
        data = self._run_json(args)
        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            raise BeadsError(f"unexpected bd {args[0]} output")
        return [parse_issue(item) for item in data]

    def list(self, *filters: str) -> list[Issue]:
        """Return issues from ``bd list`` with optional extra filter flags."""
        return self._run_issues(["list", "--json", *filters])

    def ready(self) -> list[Issue]:
        """Return open issues with no outstanding blockers."""
        return self._run_issues(["ready", "--json"])

    def fetch_all(self) -> Snapshot:
        """Fetch every issue plus the ready set.

        A failure of ``bd ready`` is not fatal: the snapshot simply has an
        empty ready set, so nothing lands in the board's Ready column.
        """
        issues = self.list("--all", "--limit=0")
        try:
            ready_ids = frozenset(issue.id for issue in self.ready())
        except BeadsError as e:
            log.log_warn(f"bd ready failed, continuing without ready set: {e}")
            ready_ids = frozenset()
        log.log_debug(f"Fetched {len(issues)} issues, {len(ready_ids)} ready")
        return Snapshot(issues=tuple(issues), ready_ids=ready_ids)

    def create(self, opts: CreateOptions) -> Issue:
        args = ["create", "--title", opts.title, "--json"]
        if opts.issue_type:
            args += ["--type", opts.issue_type]
        if 0 <= opts.priority <= 4:
            args += ["--priority", str(opts.priority)]
        if opts.description:
            args += ["-d", opts.description]
        if opts.labels:
            args += ["-l", ",".join(opts.labels)]
        issues = self._run_issues(args)
        if not issues:
            raise BeadsError("bd create returned no issue")
        return issues[0]

    def update(self, issue_id: str, opts: UpdateOptions) -> None:
        args = ["update", issue_id]
        if opts.status:
            args += ["--status", opts.status]
        if opts.priority is not None:
            args += ["--priority", str(opts.priority)]
        if opts.title:
            args += ["--title", opts.title]
        if opts.assignee:
            args += ["--assignee", opts.assignee]
        if opts.issue_type:
            args += ["--type", opts.issue_type]
        if opts.description is not None:
            args += ["-d", opts.description]
        if opts.notes:
            args += ["--notes", opts.notes]
        self._run(args)

    def delete(self, issue_id: str) -> None:
        self._run(["delete", issue_id, "--force"])

    def comments(self, issue_id: str) -> list[Comment]:
        data = self._run_json(["comments", issue_id, "--json"])
        if not isinstance(data, list):
            return []
        return [parse_comment(item) for item in data if isinstance(item, dict)]

    def add_comment(self, issue_id: str, text: str) -> None:
        self._run(["comments", "add", issue_id, text])

    def add_blocker(self, blockee: str, blocker: str) -> None:
        """Record that blocker blocks blockee."""
        self._run(["dep", "add", blockee, blocker])

    def remove_blocker(self, blockee: str, blocker: str) -> None:
        self._run(["dep", "rm", blockee, blocker])
