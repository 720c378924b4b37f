"""Stacked list panels showing one status bucket each."""

import time

from rich.markup import escape
from rich.text import Text
from textual import events
from textual.containers import Vertical
from textual.widget import Widget

from ..state.focus import FOCUS_ORDER, PanelFocus
from ..state.hit_test import HitTester, Rect, Region, allocate_panel_heights
from ..state.panel import PanelState
from ..state.tree import TreeNode
from ..themes.catppuccin import COLORS, priority_color

WHEEL_STEP = 3


def render_node(node: TreeNode, selected: bool = False) -> str:
    """Render one tree row as Rich markup."""
    issue = node.issue
    indent = "  " * node.depth
    if node.has_children:
        marker = "▸ " if node.collapsed else "▾ "
    else:
        marker = "  "
    color = priority_color(issue.priority)
    line = (
        f"{indent}{marker}[{color}]{issue.priority_label}[/] "
        f"[{COLORS['accent']}]{escape(issue.id)}[/] {escape(issue.title)}"
    )
    if node.collapsed and node.hidden_count:
        line += f" [{COLORS['muted']}](+{node.hidden_count} hidden)[/]"
    if issue.is_blocked:
        line += f" [{COLORS['blocked']}]⊘[/]"
    if selected:
        line = f"[on {COLORS['selected']}]{line}[/]"
    return line


class IssuePanel(Widget):
    """A bordered list of tree rows with a highlighted cursor row."""

    DEFAULT_CSS = """
    IssuePanel {
        width: 100%;
        padding: 0 1;
    }
    """

    def __init__(self, focus_key: PanelFocus) -> None:
        super().__init__(id=f"panel-{focus_key.value}", classes="panel")
        self.focus_key = focus_key
        self.panel_state: PanelState | None = None

    def sync(self, panel_state: PanelState) -> None:
        """Point the widget at panel_state and redraw."""
        self.panel_state = panel_state
        self.border_title = f"{panel_state.title} ({len(panel_state)})"
        self.set_class(panel_state.focused, "focused")
        self.set_class(panel_state.collapsed, "folded")
        self._keep_cursor_visible()
        self.refresh()

    def _keep_cursor_visible(self) -> None:
        if self.panel_state is not None and self.content_size.height > 0:
            self.panel_state.ensure_visible(self.visible_rows())

    def on_resize(self, event: events.Resize) -> None:
        self._keep_cursor_visible()
        self.refresh()

    @property
    def folded(self) -> bool:
        return self.panel_state is not None and self.panel_state.collapsed

    def visible_rows(self) -> int:
        return max(1, self.content_size.height)

    def render(self) -> Text:
        panel = self.panel_state
        if panel is None:
            return Text("")
        if panel.collapsed:
            return Text.from_markup(
                f"▸ {escape(panel.title)} ({len(panel)}) [{COLORS['muted']}]tab to expand[/]"
            )
        if panel.is_empty:
            return Text.from_markup(f"[{COLORS['muted']}]No issues[/]")

        rows = self.visible_rows()
        start = panel.offset
        lines = [
            render_node(node, selected=panel.focused and i == panel.cursor)
            for i, node in enumerate(panel.items[start:start + rows], start=start)
        ]
        text = Text.from_markup("\n".join(lines), overflow="ellipsis")
        text.no_wrap = True
        return text

    def region_for_hit(self) -> Region | None:
        """Describe this panel's on-screen geometry for hit testing."""
        panel = self.panel_state
        if panel is None or not self.display:
            return None
        r = self.region
        return Region(
            key=self.focus_key,
            rect=Rect(top=r.y, bottom=r.y + r.height, left=r.x, right=r.x + r.width),
            item_count=0 if panel.collapsed else len(panel),
            border_rows=0 if panel.collapsed else 1,
            offset=panel.offset,
        )


class PanelStack(Vertical):
    """The three list panels stacked vertically, plus mouse handling."""

    DEFAULT_CSS = """
    PanelStack {
        height: 1fr;
        width: 100%;
    }
    """

    def compose(self):
        for focus in FOCUS_ORDER:
            yield IssuePanel(focus)

    def panels(self) -> list[IssuePanel]:
        return list(self.query(IssuePanel))

    def sync(self) -> None:
        """Redraw panels from app state and re-split the height."""
        state = self.app.state
        for widget in self.panels():
            widget.sync(state.panels[widget.focus_key])
        self._apply_heights()

    def _apply_heights(self) -> None:
        state = self.app.state
        heights = allocate_panel_heights(
            self.size.height,
            state.counts(),
            state.panels.closed.collapsed,
        )
        for widget in self.panels():
            height = heights[widget.focus_key]
            widget.display = height > 0
            if height > 0:
                widget.styles.height = height

    def on_resize(self, event: events.Resize) -> None:
        self._apply_heights()

    def layout_regions(self) -> list[Region]:
        return [r for r in (w.region_for_hit() for w in self.panels()) if r is not None]

    def on_click(self, event: events.Click) -> None:
        hit = HitTester.resolve(event.screen_x, event.screen_y, self.layout_regions())
        self.app.handle_list_click(hit, time.monotonic())
        event.stop()

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        self.app.handle_scroll(WHEEL_STEP)
        event.stop()

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        self.app.handle_scroll(-WHEEL_STEP)
        event.stop()
