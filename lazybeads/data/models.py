"""Data models for lazybeads."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class IssueStatus(Enum):
    """Issue status as reported by bd."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"

    @classmethod
    def parse(cls, value: str | None) -> "IssueStatus":
        """Map a raw status string to a status, defaulting to OPEN."""
        try:
            return cls(value)
        except ValueError:
            return cls.OPEN


class IssueType(Enum):
    """Issue type as reported by bd."""

    TASK = "task"
    BUG = "bug"
    FEATURE = "feature"
    EPIC = "epic"
    CHORE = "chore"

    @classmethod
    def parse(cls, value: str | None) -> "IssueType":
        """Map a raw type string to a type, defaulting to TASK."""
        try:
            return cls(value)
        except ValueError:
            return cls.TASK


STATUS_ICONS = {
    IssueStatus.OPEN: "○",
    IssueStatus.IN_PROGRESS: "◐",
    IssueStatus.CLOSED: "●",
}

PRIORITY_LABELS = {
    0: "Critical",
    1: "High",
    2: "Medium",
    3: "Low",
    4: "Backlog",
}


@dataclass(frozen=True)
class Issue:
    """A single beads issue.

    Issues are never mutated in place; a refresh replaces the whole snapshot.
    """

    id: str
    title: str
    status: IssueStatus = IssueStatus.OPEN
    priority: int = 2
    issue_type: IssueType = IssueType.TASK
    description: str = ""
    assignee: str = ""
    labels: tuple[str, ...] = ()
    blocked_by: tuple[str, ...] = ()
    blocks: tuple[str, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None
    closed_at: datetime | None = None

    @property
    def priority_label(self) -> str:
        """Short priority label, e.g. "P2"."""
        if 0 <= self.priority <= 4:
            return f"P{self.priority}"
        return "P?"

    @property
    def status_icon(self) -> str:
        return STATUS_ICONS[self.status]

    @property
    def is_blocked(self) -> bool:
        return len(self.blocked_by) > 0


@dataclass(frozen=True)
class Comment:
    """A comment attached to an issue."""

    id: int
    author: str
    text: str
    created_at: datetime | None = None


@dataclass(frozen=True)
class Snapshot:
    """Everything fetched from bd in one refresh."""

    issues: tuple[Issue, ...] = ()
    ready_ids: frozenset[str] = field(default_factory=frozenset)

    def by_id(self) -> dict[str, Issue]:
        return {issue.id: issue for issue in self.issues}

    def __len__(self) -> int:
        return len(self.issues)
