"""Hierarchy reconstruction and flattening for one status bucket."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from ..data.hierarchy import parent_id
from ..data.models import Issue
from .filter_sort import SortKey, sort_key_for, SortMode


class CollapseSet:
    """Identifiers of tree nodes the user has collapsed.

    Keyed by identifier so that it survives snapshot replacement. Entries are
    only ever changed by an explicit toggle, collapse or expand; refreshing
    or filtering never touches it.
    """

    def __init__(self, collapsed: Iterable[str] = ()) -> None:
        self._state: dict[str, bool] = {issue_id: True for issue_id in collapsed}

    def is_collapsed(self, issue_id: str) -> bool:
        return self._state.get(issue_id, False)

    def toggle(self, issue_id: str) -> bool:
        """Flip the collapsed state of issue_id and return the new state."""
        collapsed = not self.is_collapsed(issue_id)
        self._state[issue_id] = collapsed
        return collapsed

    def collapse(self, issue_id: str) -> None:
        self._state[issue_id] = True

    def expand(self, issue_id: str) -> None:
        self._state[issue_id] = False

    def __contains__(self, issue_id: object) -> bool:
        return isinstance(issue_id, str) and self.is_collapsed(issue_id)

    def __iter__(self) -> Iterator[str]:
        return (issue_id for issue_id, collapsed in self._state.items() if collapsed)

    def __len__(self) -> int:
        return sum(1 for collapsed in self._state.values() if collapsed)


@dataclass(frozen=True)
class TreeNode:
    """An issue placed in a flattened tree.

    depth is relative to the bucket: an issue whose parent lives in another
    bucket (or nowhere) is a root with depth 0.
    """

    issue: Issue
    depth: int = 0
    has_children: bool = False
    collapsed: bool = False
    hidden_count: int = 0

    @property
    def id(self) -> str:
        return self.issue.id

    @property
    def expanded(self) -> bool:
        return self.has_children and not self.collapsed


def group_by_parent(issues: Iterable[Issue]) -> dict[str, list[Issue]]:
    """Group issues by their parent within the same collection.

    An issue whose parent identifier is not part of the collection lands in
    the root group, keyed by "".
    """
    issues = list(issues)
    present = {issue.id for issue in issues}
    groups: dict[str, list[Issue]] = {}
    for issue in issues:
        parent = parent_id(issue.id)
        key = parent if parent in present else ""
        groups.setdefault(key, []).append(issue)
    return groups


def _subtree_size(issue_id: str, groups: dict[str, list[Issue]]) -> int:
    total = 0
    stack = [issue_id]
    while stack:
        children = groups.get(stack.pop(), [])
        total += len(children)
        stack.extend(child.id for child in children)
    return total


def count_descendants(issue_id: str, issues: Iterable[Issue]) -> int:
    """Count all transitive descendants of issue_id present in issues."""
    return _subtree_size(issue_id, group_by_parent(issues))


def build_tree(
    issues: Iterable[Issue],
    collapsed: CollapseSet | None = None,
    sort_key: SortKey | None = None,
) -> list[TreeNode]:
    """Flatten one bucket into a pre-order sequence of TreeNodes.

    Each sibling group is sorted independently, so ordering never moves a
    child away from its parent. A collapsed node keeps its place but none of
    its descendants are emitted.

    Args:
        issues: Issues already assigned to one status bucket.
        collapsed: Collapse state; None means everything is expanded.
        sort_key: Key applied within every sibling group.

    Returns:
        The flattened nodes in display order.
    """
    collapsed = collapsed if collapsed is not None else CollapseSet()
    sort_key = sort_key or sort_key_for(SortMode.DEFAULT)
    groups = group_by_parent(issues)
    for siblings in groups.values():
        siblings.sort(key=sort_key)

    result: list[TreeNode] = []
    # Explicit stack of (issue, depth); children are pushed in reverse so the
    # first sibling is popped first.
    stack = [(issue, 0) for issue in reversed(groups.get("", []))]
    while stack:
        issue, depth = stack.pop()
        children = groups.get(issue.id, [])
        is_collapsed = bool(children) and collapsed.is_collapsed(issue.id)
        result.append(
            TreeNode(
                issue=issue,
                depth=depth,
                has_children=bool(children),
                collapsed=is_collapsed,
                hidden_count=_subtree_size(issue.id, groups) if is_collapsed else 0,
            )
        )
        if children and not is_collapsed:
            stack.extend((child, depth + 1) for child in reversed(children))
    return result
