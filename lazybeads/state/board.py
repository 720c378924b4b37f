"""Kanban board: column partition, 2-D cursor and click handling."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Hashable, Iterable

from ..data.models import Issue, IssueStatus
from ..keys import action_for
from .filter_sort import SortKey, SortMode, closed_sort_key, sort_key_for

MIN_COLUMN_WIDTH = 30
DOUBLE_CLICK_THRESHOLD = 0.3  # seconds


class BoardColumn(IntEnum):
    """Board columns in display order."""

    BLOCKED = 0
    OPEN = 1
    READY = 2
    IN_PROGRESS = 3
    DONE = 4

    @property
    def title(self) -> str:
        return self.name.replace("_", " ")


COLUMN_COUNT = len(BoardColumn)


def column_for(issue: Issue, ready_ids: frozenset[str] | set[str]) -> BoardColumn:
    """Return the one column an issue belongs to."""
    if issue.status == IssueStatus.CLOSED:
        return BoardColumn.DONE
    if issue.status == IssueStatus.IN_PROGRESS:
        return BoardColumn.IN_PROGRESS
    if issue.is_blocked:
        return BoardColumn.BLOCKED
    if issue.id in ready_ids:
        return BoardColumn.READY
    return BoardColumn.OPEN


def categorize(
    issues: Iterable[Issue],
    ready_ids: frozenset[str] | set[str] = frozenset(),
    sort_key: SortKey | None = None,
) -> list[list[Issue]]:
    """Partition issues into the five board columns.

    Every issue lands in exactly one column. Columns are sorted with sort_key
    except Done, which is always most recently closed first.
    """
    columns: list[list[Issue]] = [[] for _ in BoardColumn]
    for issue in issues:
        columns[column_for(issue, ready_ids)].append(issue)
    key = sort_key or sort_key_for(SortMode.DEFAULT)
    for col in BoardColumn:
        columns[col].sort(key=closed_sort_key if col == BoardColumn.DONE else key)
    return columns


class ClickResult(Enum):
    SELECT = "select"
    CONFIRM = "confirm"


@dataclass
class ClickTracker:
    """Tells single clicks from double clicks.

    A click on the same target within ``threshold`` seconds of the recorded
    click is a CONFIRM. A CONFIRM clears the record, so a third quick click
    starts a new sequence instead of confirming again.
    """

    threshold: float = DOUBLE_CLICK_THRESHOLD
    last_time: float | None = None
    last_target: Hashable | None = None

    def register(self, target: Hashable, now: float) -> ClickResult:
        if (
            self.last_time is not None
            and self.last_target == target
            and 0 <= now - self.last_time <= self.threshold
        ):
            self.reset()
            return ClickResult.CONFIRM
        self.last_time = now
        self.last_target = target
        return ClickResult.SELECT

    def reset(self) -> None:
        self.last_time = None
        self.last_target = None


_BOARD_ACTIONS = ("up", "down", "top", "bottom", "page_up", "page_down", "prev_column", "next_column")


class BoardState:
    """Five-column board with a (column, row) cursor and a column window."""

    def __init__(self) -> None:
        self.columns: list[list[Issue]] = [[] for _ in BoardColumn]
        self.column = 0
        self.row = 0
        self.offset = 0
        self.visible_count = COLUMN_COUNT
        self.clicks = ClickTracker()

    def __len__(self) -> int:
        return sum(len(col) for col in self.columns)

    def column_issues(self, column: int | None = None) -> list[Issue]:
        return self.columns[self.column if column is None else column]

    def _clamp_row(self) -> None:
        count = len(self.columns[self.column])
        self.row = max(0, min(self.row, count - 1)) if count else 0

    def set_issues(
        self,
        issues: Iterable[Issue],
        ready_ids: frozenset[str] | set[str] = frozenset(),
        sort_key: SortKey | None = None,
    ) -> None:
        """Recategorize, reseating the cursor on the previously selected issue.

        The issue is looked up in every column since a refresh can move it
        (e.g. open to in-progress). If it is gone the cursor keeps its column
        and clamps its row.
        """
        previous = self.selected_issue()
        self.columns = categorize(issues, ready_ids, sort_key)
        if previous is not None:
            for col, col_issues in enumerate(self.columns):
                for row, issue in enumerate(col_issues):
                    if issue.id == previous.id:
                        self.column, self.row = col, row
                        self.ensure_column_visible()
                        return
        self._clamp_row()
        self.ensure_column_visible()

    def move_column(self, delta: int) -> bool:
        target = max(0, min(self.column + delta, COLUMN_COUNT - 1))
        if target == self.column:
            return False
        self.column = target
        self._clamp_row()
        self.ensure_column_visible()
        return True

    def move_row(self, delta: int) -> bool:
        before = self.row
        self.row += delta
        self._clamp_row()
        return self.row != before

    def jump_top(self) -> bool:
        return self.move_row(-self.row)

    def jump_bottom(self) -> bool:
        return self.move_row(len(self.columns[self.column]) - 1 - self.row)

    def select(self, column: int, row: int) -> None:
        """Move the cursor to (column, row), clamping both."""
        self.column = max(0, min(column, COLUMN_COUNT - 1))
        self.row = row
        self._clamp_row()
        self.ensure_column_visible()

    def ensure_column_visible(self) -> None:
        """Slide the column window so the cursor column is inside it."""
        if self.column < self.offset:
            self.offset = self.column
        elif self.column >= self.offset + self.visible_count:
            self.offset = self.column - self.visible_count + 1
        self.offset = max(0, min(self.offset, COLUMN_COUNT - self.visible_count))

    def set_width(self, width: int) -> None:
        """Derive how many columns fit in width terminal cells."""
        self.visible_count = max(1, min(width // MIN_COLUMN_WIDTH, COLUMN_COUNT))
        self.ensure_column_visible()

    def visible_columns(self) -> range:
        return range(self.offset, self.offset + self.visible_count)

    def row_window_start(self, column: int, capacity: int) -> int:
        """First visible row of column when it can show capacity cards.

        The focused column keeps its cursor centred where possible; other
        columns show from the top.
        """
        count = len(self.columns[column])
        if capacity <= 0 or count <= capacity:
            return 0
        selected = self.row if column == self.column else 0
        start = selected - capacity // 2
        return max(0, min(start, count - capacity))

    def selected_issue(self) -> Issue | None:
        col = self.columns[self.column]
        if not col:
            return None
        return col[self.row]

    def click(self, column: int, row: int | None, now: float) -> ClickResult:
        """Select the clicked card and report whether it was a double click.

        Args:
            column: Column index under the pointer.
            row: Card index, or None for an empty column.
            now: Monotonic time of the click, in seconds.
        """
        row = 0 if row is None else row
        self.select(column, row)
        return self.clicks.register((column, row), now)

    def handle_key(self, key: str) -> bool:
        action = action_for(key, _BOARD_ACTIONS)
        if action is None:
            return False
        if action == "up":
            self.move_row(-1)
        elif action == "down":
            self.move_row(1)
        elif action == "top":
            self.jump_top()
        elif action == "bottom":
            self.jump_bottom()
        elif action == "page_up":
            self.move_row(-10)
        elif action == "page_down":
            self.move_row(10)
        elif action == "prev_column":
            self.move_column(-1)
        elif action == "next_column":
            self.move_column(1)
        return True
