"""Pytest configuration and fixtures for lazybeads tests."""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from lazybeads.data.beads_client import BeadsError
from lazybeads.data.models import Issue, IssueStatus, IssueType, Snapshot

BASE_TIME = datetime(2024, 1, 15, 10, 0, 0)


def make_issue(
    issue_id: str,
    title: str = "",
    status: str = "open",
    priority: int = 2,
    updated: int = 0,
    created: int = 0,
    closed: int | None = None,
    blocked_by: tuple[str, ...] = (),
    issue_type: str = "task",
) -> Issue:
    """Build an Issue; times are minutes after BASE_TIME."""
    return Issue(
        id=issue_id,
        title=title or f"Issue {issue_id}",
        status=IssueStatus(status),
        priority=priority,
        issue_type=IssueType(issue_type),
        blocked_by=blocked_by,
        created_at=BASE_TIME + timedelta(minutes=created),
        updated_at=BASE_TIME + timedelta(minutes=updated),
        closed_at=BASE_TIME + timedelta(minutes=closed) if closed is not None else None,
    )


@pytest.fixture
def issue_factory():
    """Return the make_issue factory."""
    return make_issue


@pytest.fixture
def sample_issues() -> list[Issue]:
    """A small project: an epic with children in every status plus loose issues."""
    return [
        make_issue("bd-1", "Auth epic", priority=1, issue_type="epic"),
        make_issue("bd-1.1", "Login form", priority=1, updated=5),
        make_issue("bd-1.2", "Session tokens", status="in_progress", priority=0),
        make_issue("bd-1.3", "Password reset", status="closed", closed=30),
        make_issue("bd-1.1.1", "Login validation", priority=2),
        make_issue("bd-2", "Flaky CI", priority=0, issue_type="bug"),
        make_issue("bd-3", "Write docs", priority=3, blocked_by=("bd-2",)),
        make_issue("bd-4", "Dark mode", status="in_progress", priority=2),
        make_issue("bd-5", "Old cleanup", status="closed", closed=10),
    ]


@pytest.fixture
def sample_snapshot(sample_issues) -> Snapshot:
    return Snapshot(issues=tuple(sample_issues), ready_ids=frozenset({"bd-1", "bd-1.1", "bd-1.1.1", "bd-2"}))


class FakeClient:
    """Stands in for BeadsClient in app tests; records every write."""

    def __init__(self, snapshot: Snapshot, cwd: Path | None = None) -> None:
        self.snapshot = snapshot
        self.cwd = cwd or Path.cwd()
        self.fail_with: str | None = None
        self.fetches = 0
        self.updates: list[tuple[str, object]] = []
        self.deleted: list[str] = []
        self.created: list[object] = []
        self.comments_added: list[tuple[str, str]] = []
        self.blockers_added: list[tuple[str, str]] = []
        self.blockers_removed: list[tuple[str, str]] = []

    def fetch_all(self) -> Snapshot:
        self.fetches += 1
        if self.fail_with:
            raise BeadsError(self.fail_with)
        return self.snapshot

    def update(self, issue_id: str, opts) -> None:
        self.updates.append((issue_id, opts))

    def delete(self, issue_id: str) -> None:
        self.deleted.append(issue_id)

    def create(self, opts):
        self.created.append(opts)
        return make_issue("bd-9", opts.title)

    def add_comment(self, issue_id: str, text: str) -> None:
        self.comments_added.append((issue_id, text))

    def add_blocker(self, blockee: str, blocker: str) -> None:
        self.blockers_added.append((blockee, blocker))

    def remove_blocker(self, blockee: str, blocker: str) -> None:
        self.blockers_removed.append((blockee, blocker))

    def comments(self, issue_id: str) -> list:
        return []


@pytest.fixture
def fake_client(sample_snapshot, tmp_path: Path) -> FakeClient:
    return FakeClient(sample_snapshot, cwd=tmp_path)
