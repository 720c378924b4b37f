"""Kanban board view with five issue columns."""

import time

from rich.markup import escape
from rich.text import Text
from textual import events
from textual.containers import Horizontal
from textual.widget import Widget

from ..data.models import Issue
from ..state.board import BoardColumn, BoardState
from ..state.hit_test import HitTester, Rect, Region
from ..themes.catppuccin import COLORS, priority_color

CARD_HEIGHT = 3  # priority/id line, title line, divider

COLUMN_COLORS = {
    BoardColumn.BLOCKED: COLORS["blocked"],
    BoardColumn.OPEN: COLORS["open"],
    BoardColumn.READY: COLORS["ready"],
    BoardColumn.IN_PROGRESS: COLORS["in_progress"],
    BoardColumn.DONE: COLORS["done"],
}


def _fit(text: str, width: int) -> str:
    """Truncate or pad plain text to exactly width cells."""
    if width <= 0:
        return text
    if len(text) > width:
        return text[:width - 1] + "…"
    return text.ljust(width)


def render_card(issue: Issue, width: int, selected: bool = False) -> list[str]:
    """Render an issue as CARD_HEIGHT lines of markup, each width cells wide."""
    color = priority_color(issue.priority)
    header = f"{issue.priority_label} {issue.id} {issue.issue_type.value}"
    padding = " " * max(0, width - len(header))
    lines = [
        f"[{color}]{issue.priority_label}[/] [bold {COLORS['accent']}]{escape(issue.id)}[/]"
        f" [{COLORS['muted']}]{issue.issue_type.value}[/]{padding}",
        escape(_fit(issue.title, width)),
        f"[{COLORS['border']}]{'─' * max(0, width)}[/]",
    ]
    if selected:
        lines[:2] = [f"[on {COLORS['selected']}]{line}[/]" for line in lines[:2]]
    return lines


class BoardColumnWidget(Widget):
    """A single column in the board."""

    DEFAULT_CSS = """
    BoardColumnWidget {
        width: 1fr;
        height: 100%;
        padding: 0 1;
    }
    """

    def __init__(self, column: BoardColumn) -> None:
        super().__init__(id=f"col-{column.name.lower()}", classes="panel")
        self.column = column
        self.board: BoardState | None = None
        self.window_start = 0

    @property
    def capacity(self) -> int:
        return max(1, self.content_size.height // CARD_HEIGHT)

    def sync(self, board: BoardState) -> None:
        self.board = board
        issues = board.columns[self.column]
        color = COLUMN_COLORS[self.column]
        self.border_title = f"[{color}]{self.column.title}[/] ({len(issues)})"
        self.set_class(board.column == self.column, "focused")

        self.window_start = board.row_window_start(self.column, self.capacity)
        end = min(len(issues), self.window_start + self.capacity)
        hints = []
        if self.window_start > 0:
            hints.append(f"↑ {self.window_start} more")
        if end < len(issues):
            hints.append(f"↓ {len(issues) - end} more")
        self.border_subtitle = "  ".join(hints)
        self.refresh()

    def on_resize(self, event: events.Resize) -> None:
        if self.board is not None:
            self.sync(self.board)

    def render(self) -> Text:
        board = self.board
        if board is None:
            return Text("")
        issues = board.columns[self.column]
        if not issues:
            return Text.from_markup(f"[{COLORS['muted']}]Empty[/]")

        start = self.window_start
        end = min(len(issues), start + self.capacity)
        focused = board.column == self.column
        lines: list[str] = []
        for row in range(start, end):
            lines += render_card(issues[row], self.content_size.width, selected=focused and row == board.row)

        text = Text.from_markup("\n".join(lines), overflow="ellipsis")
        text.no_wrap = True
        return text

    def region_for_hit(self) -> Region | None:
        if self.board is None or not self.display:
            return None
        r = self.region
        return Region(
            key=int(self.column),
            rect=Rect(top=r.y, bottom=r.y + r.height, left=r.x, right=r.x + r.width),
            item_count=len(self.board.columns[self.column]),
            border_rows=1,
            row_height=CARD_HEIGHT,
            offset=self.window_start,
            clamp=True,
        )


class BoardView(Horizontal):
    """Board panel showing the visible window of columns."""

    DEFAULT_CSS = """
    BoardView {
        height: 1fr;
        width: 100%;
    }
    """

    def compose(self):
        for column in BoardColumn:
            yield BoardColumnWidget(column)

    def columns(self) -> list[BoardColumnWidget]:
        return list(self.query(BoardColumnWidget))

    def sync(self) -> None:
        board = self.app.state.board
        if self.size.width:
            board.set_width(self.size.width)
        visible = board.visible_columns()
        for widget in self.columns():
            widget.display = int(widget.column) in visible
            widget.sync(board)

    def on_resize(self, event: events.Resize) -> None:
        self.sync()

    def layout_regions(self) -> list[Region]:
        return [r for r in (w.region_for_hit() for w in self.columns()) if r is not None]

    def on_click(self, event: events.Click) -> None:
        hit = HitTester.resolve(event.screen_x, event.screen_y, self.layout_regions())
        self.app.handle_board_click(hit, time.monotonic())
        event.stop()

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        self.app.handle_scroll(1)
        event.stop()

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        self.app.handle_scroll(-1)
        event.stop()
