"""Recompute every derived view from a snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..data.models import IssueStatus, Snapshot
from .board import BoardState
from .filter_sort import FilterMode, SortMode, apply_filters, closed_sort_key, sort_key_for, split_buckets
from .focus import PanelFocus
from .panel import PanelState
from .tree import CollapseSet, build_tree

BUCKET_FOR = {
    PanelFocus.IN_PROGRESS: IssueStatus.IN_PROGRESS,
    PanelFocus.OPEN: IssueStatus.OPEN,
    PanelFocus.CLOSED: IssueStatus.CLOSED,
}


@dataclass
class Panels:
    """The three stacked list panels."""

    in_progress: PanelState = field(default_factory=lambda: PanelState("In Progress"))
    open: PanelState = field(default_factory=lambda: PanelState("Open"))
    closed: PanelState = field(default_factory=lambda: PanelState("Closed", collapsible=True))

    def __getitem__(self, key: PanelFocus) -> PanelState:
        return getattr(self, key.value)

    def __iter__(self):
        return iter((self.in_progress, self.open, self.closed))


def recompute_views(
    snapshot: Snapshot,
    query: str = "",
    filter_mode: FilterMode = FilterMode.ALL,
    sort_mode: SortMode = SortMode.DEFAULT,
    collapsed: CollapseSet | None = None,
    panels: Panels | None = None,
    board: BoardState | None = None,
) -> tuple[Panels, BoardState]:
    """Rebuild panel trees and the board for the current filters.

    Existing panels and board are updated in place so their cursors reseat
    on the previously selected identifiers; new ones are created otherwise.
    The board always shows the whole snapshot so its columns stay a
    partition of it.

    Args:
        snapshot: Issues and ready set from the last refresh.
        query: Live text filter.
        filter_mode: Active preset filter.
        sort_mode: Sort applied within sibling groups.
        collapsed: Collapsed tree nodes; read, never modified.
        panels: Panels to update, or None for fresh ones.
        board: Board to update, or None for a fresh one.

    Returns:
        The (panels, board) pair.
    """
    panels = panels if panels is not None else Panels()
    board = board if board is not None else BoardState()
    collapsed = collapsed if collapsed is not None else CollapseSet()
    sort_key = sort_key_for(sort_mode)

    buckets = split_buckets(apply_filters(snapshot.issues, query, filter_mode))
    for focus, status in BUCKET_FOR.items():
        key = closed_sort_key if status == IssueStatus.CLOSED else sort_key
        panels[focus].set_items(build_tree(buckets[status], collapsed, key))

    board.set_issues(snapshot.issues, snapshot.ready_ids, sort_key)
    return panels, board
