"""Cursor and scroll state for one list panel."""

from __future__ import annotations

from typing import Iterable

from ..data.models import Issue
from ..keys import action_for
from .tree import TreeNode

PAGE_SIZE = 10

_PANEL_ACTIONS = ("up", "down", "top", "bottom", "page_up", "page_down")


class PanelState:
    """One flattened tree view plus a cursor.

    The cursor always satisfies ``0 <= cursor < len(items)`` when the panel
    has items and is 0 otherwise. ``offset`` is the first visible row; it is
    maintained by ensure_visible and scroll_by.
    """

    def __init__(self, title: str, collapsible: bool = False) -> None:
        self.title = title
        self.collapsible = collapsible
        self.items: list[TreeNode] = []
        self.cursor = 0
        self.offset = 0
        self.focused = False
        # Collapsible panels start folded into their one-line summary
        self.collapsed = collapsible

    def __len__(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def _clamp(self, index: int) -> int:
        if not self.items:
            return 0
        return max(0, min(index, len(self.items) - 1))

    def set_items(self, nodes: Iterable[TreeNode]) -> None:
        """Replace the sequence, keeping the selected identifier if it survives.

        If the previously selected issue is gone the cursor stays at the same
        index, clamped to the new length.
        """
        previous = self.selected_id()
        self.items = list(nodes)
        if previous is not None:
            for i, node in enumerate(self.items):
                if node.id == previous:
                    self.cursor = i
                    break
            else:
                self.cursor = self._clamp(self.cursor)
        else:
            self.cursor = self._clamp(self.cursor)
        self.offset = max(0, min(self.offset, self.cursor))

    def move_cursor(self, delta: int) -> bool:
        """Move the cursor by delta rows. Returns True if it moved."""
        if not self.items:
            return False
        target = self._clamp(self.cursor + delta)
        moved = target != self.cursor
        self.cursor = target
        return moved

    def jump_top(self) -> bool:
        return self.move_cursor(-self.cursor)

    def jump_bottom(self) -> bool:
        return self.move_cursor(len(self.items) - 1 - self.cursor)

    def page_up(self) -> bool:
        return self.move_cursor(-PAGE_SIZE)

    def page_down(self) -> bool:
        return self.move_cursor(PAGE_SIZE)

    def select_index(self, index: int) -> bool:
        """Put the cursor on index. Out-of-range indexes are ignored."""
        if not 0 <= index < len(self.items):
            return False
        self.cursor = index
        return True

    def scroll_by(self, amount: int) -> bool:
        """Mouse wheel scrolling: moves the cursor and the viewport together."""
        moved = self.move_cursor(amount)
        self.offset = max(0, self.offset + amount)
        self.offset = min(self.offset, self.cursor)
        return moved

    def ensure_visible(self, rows: int) -> int:
        """Adjust offset so the cursor is within a viewport of rows lines.

        Args:
            rows: Number of item rows the panel can show. Values below 1 are
                treated as 1.

        Returns:
            The new offset.
        """
        rows = max(1, rows)
        if self.cursor < self.offset:
            self.offset = self.cursor
        elif self.cursor >= self.offset + rows:
            self.offset = self.cursor - rows + 1
        max_offset = max(0, len(self.items) - rows)
        self.offset = max(0, min(self.offset, max_offset))
        return self.offset

    def selected_item(self) -> TreeNode | None:
        if not self.items:
            return None
        return self.items[self.cursor]

    def selected_issue(self) -> Issue | None:
        node = self.selected_item()
        return node.issue if node is not None else None

    def selected_id(self) -> str | None:
        node = self.selected_item()
        return node.id if node is not None else None

    def set_focus(self, focused: bool) -> None:
        """Record focus. A collapsible panel folds away when it loses focus."""
        self.focused = focused
        if self.collapsible:
            self.collapsed = not focused

    def handle_key(self, key: str) -> bool:
        """Handle a navigation key. Returns True if the key was consumed.

        Navigation keys are consumed even when the cursor cannot move, so that
        they never fall through to global bindings.
        """
        if not self.focused:
            return False
        action = action_for(key, _PANEL_ACTIONS)
        if action is None:
            return False
        if action == "up":
            self.move_cursor(-1)
        elif action == "down":
            self.move_cursor(1)
        elif action == "top":
            self.jump_top()
        elif action == "bottom":
            self.jump_bottom()
        elif action == "page_up":
            self.page_up()
        elif action == "page_down":
            self.page_down()
        return True
