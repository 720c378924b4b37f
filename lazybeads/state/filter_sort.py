"""Filtering and ordering of issues before they are laid out.

Text and preset filters are applied together before issues are split into
status buckets. Sorting is applied per sibling group by the tree builder, so
this module only provides the sort keys.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Callable, Iterable

from ..data.models import Issue, IssueStatus

SortKey = Callable[[Issue], tuple]


class FilterMode(Enum):
    """Preset filters. Only one is active at a time."""

    ALL = "all"
    OPEN = "open"
    CLOSED = "closed"
    READY = "ready"

    @property
    def label(self) -> str:
        return self.value


class SortMode(Enum):
    """Sort orders for sibling groups."""

    DEFAULT = "default"
    CREATED_ASC = "created_asc"
    CREATED_DESC = "created_desc"
    PRIORITY = "priority"
    UPDATED = "updated"

    @property
    def label(self) -> str:
        return {
            SortMode.DEFAULT: "default",
            SortMode.CREATED_ASC: "created ▲",
            SortMode.CREATED_DESC: "created ▼",
            SortMode.PRIORITY: "priority",
            SortMode.UPDATED: "updated",
        }[self]

    def next(self) -> "SortMode":
        """Return the following sort mode, wrapping around."""
        modes = list(SortMode)
        return modes[(modes.index(self) + 1) % len(modes)]


def toggle_filter_mode(current: FilterMode, target: FilterMode) -> FilterMode:
    """Switch to target, or back to ALL if target is already active."""
    if current == target:
        return FilterMode.ALL
    return target


def matches_query(issue: Issue, query: str) -> bool:
    """Case-insensitive substring match against title and identifier."""
    q = query.strip().lower()
    if not q:
        return True
    return q in issue.title.lower() or q in issue.id.lower()


def matches_mode(issue: Issue, mode: FilterMode) -> bool:
    if mode == FilterMode.OPEN:
        return issue.status in (IssueStatus.OPEN, IssueStatus.IN_PROGRESS)
    if mode == FilterMode.CLOSED:
        return issue.status == IssueStatus.CLOSED
    if mode == FilterMode.READY:
        return issue.status != IssueStatus.CLOSED and not issue.is_blocked
    return True


def apply_filters(issues: Iterable[Issue], query: str = "", mode: FilterMode = FilterMode.ALL) -> list[Issue]:
    """Return the issues passing both the text query and the preset filter."""
    return [i for i in issues if matches_mode(i, mode) and matches_query(i, query)]


def split_buckets(issues: Iterable[Issue]) -> dict[IssueStatus, list[Issue]]:
    """Partition issues by status, preserving input order within each bucket."""
    buckets: dict[IssueStatus, list[Issue]] = {status: [] for status in IssueStatus}
    for issue in issues:
        buckets[issue.status].append(issue)
    return buckets


def _ts(value: datetime | None) -> float:
    return value.timestamp() if value is not None else 0.0


def sort_key_for(mode: SortMode) -> SortKey:
    """Return a sort key implementing the given sort mode.

    Every key ends with the identifier so orderings are deterministic.
    """
    if mode == SortMode.CREATED_ASC:
        return lambda i: (_ts(i.created_at), i.id)
    if mode == SortMode.CREATED_DESC:
        return lambda i: (-_ts(i.created_at), i.id)
    if mode == SortMode.PRIORITY:
        return lambda i: (i.priority, i.id)
    if mode == SortMode.UPDATED:
        return lambda i: (-_ts(i.updated_at), i.id)
    # Default: priority ascending, most recently updated first
    return lambda i: (i.priority, -_ts(i.updated_at), i.id)


def closed_sort_key(issue: Issue) -> tuple:
    """Most recently closed first; issues without a closed time sort last."""
    if issue.closed_at is None:
        return (1, 0.0, issue.id)
    return (0, -issue.closed_at.timestamp(), issue.id)


def sort_issues(issues: Iterable[Issue], mode: SortMode) -> list[Issue]:
    return sorted(issues, key=sort_key_for(mode))
