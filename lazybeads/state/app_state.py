"""Top-level interaction state and the single input dispatch point.

AppState owns the snapshot, filters, collapse set, panels, board and focus.
Widgets forward keys and resolved clicks here; pure state changes happen in
place and anything needing I/O or a screen comes back as an Action for the
app to carry out.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..config import CustomCommand
from ..data.models import Issue, IssueStatus, Snapshot
from ..keys import action_for, matches
from .board import BoardColumn, BoardState, ClickResult, ClickTracker
from .filter_sort import FilterMode, SortMode, toggle_filter_mode
from .focus import FocusController, PanelFocus
from .hit_test import Hit
from .tree import CollapseSet
from .views import Panels, recompute_views

NO_SELECTION = "No issue selected"


class ViewMode(Enum):
    LIST = "list"
    BOARD = "board"
    DETAIL = "detail"
    HELP = "help"
    SEARCH = "search"
    MODAL = "modal"


BASE_MODES = (ViewMode.LIST, ViewMode.BOARD)


class ActionKind(Enum):
    QUIT = "quit"
    REFRESH = "refresh"
    OPEN_DETAIL = "open_detail"
    EDIT_STATUS = "edit_status"
    EDIT_PRIORITY = "edit_priority"
    EDIT_TITLE = "edit_title"
    EDIT_TYPE = "edit_type"
    EDIT_DESCRIPTION = "edit_description"
    ADD_COMMENT = "add_comment"
    ADD_BLOCKER = "add_blocker"
    REMOVE_BLOCKER = "remove_blocker"
    CREATE = "create"
    DELETE = "delete"
    COPY_ID = "copy_id"
    START_SEARCH = "start_search"
    SHOW_HELP = "show_help"
    CUSTOM = "custom"
    WARN = "warn"


@dataclass(frozen=True)
class Action:
    """Something the app has to do in response to input."""

    kind: ActionKind
    issue: Issue | None = None
    command: CustomCommand | None = None
    message: str = ""


# Actions that operate on the selected issue
_ISSUE_ACTIONS = {
    "select": ActionKind.OPEN_DETAIL,
    "edit_status": ActionKind.EDIT_STATUS,
    "edit_priority": ActionKind.EDIT_PRIORITY,
    "edit_title": ActionKind.EDIT_TITLE,
    "edit_type": ActionKind.EDIT_TYPE,
    "edit_description": ActionKind.EDIT_DESCRIPTION,
    "add_comment": ActionKind.ADD_COMMENT,
    "add_blocker": ActionKind.ADD_BLOCKER,
    "remove_blocker": ActionKind.REMOVE_BLOCKER,
    "delete": ActionKind.DELETE,
    "copy_id": ActionKind.COPY_ID,
}

_PRESETS = {
    "filter_open": FilterMode.OPEN,
    "filter_closed": FilterMode.CLOSED,
    "filter_ready": FilterMode.READY,
}


class AppState:
    """Everything the UI renders, plus the rules for changing it."""

    def __init__(self, custom_commands: list[CustomCommand] | None = None) -> None:
        self.snapshot = Snapshot()
        self.query = ""
        self.filter_mode = FilterMode.ALL
        self.sort_mode = SortMode.DEFAULT
        self.collapsed = CollapseSet()
        self.panels = Panels()
        self.board = BoardState()
        self.focus = FocusController(self.panels)
        self.mode = ViewMode.LIST
        self.base_mode = ViewMode.LIST
        self.loading = False
        self.loaded = False
        self.error: str | None = None
        self.status_message = ""
        self.list_clicks = ClickTracker()
        self.custom_commands = list(custom_commands or [])
        self.focus.initial()

    # -- Data -------------------------------------------------------------

    def begin_refresh(self) -> bool:
        """Mark a refresh as started. Returns False if one is already running."""
        if self.loading:
            return False
        self.loading = True
        return True

    def end_refresh(self) -> None:
        self.loading = False

    def apply_snapshot(self, snapshot: Snapshot) -> None:
        """Install a freshly fetched snapshot and recompute every view."""
        first = not self.loaded
        self.snapshot = snapshot
        self.loaded = True
        self.loading = False
        self.error = None
        self.recompute()
        if first:
            self.focus.initial()

    def apply_fetch_error(self, message: str) -> None:
        """Record a failed refresh. The previous views stay as they are."""
        self.loading = False
        self.error = message

    def recompute(self) -> None:
        recompute_views(
            self.snapshot,
            self.query,
            self.filter_mode,
            self.sort_mode,
            self.collapsed,
            panels=self.panels,
            board=self.board,
        )
        self.focus.revalidate()

    # -- Filters, sort, collapse -------------------------------------------

    def set_query(self, query: str) -> None:
        if query == self.query:
            return
        self.query = query
        self.recompute()

    def set_filter_mode(self, mode: FilterMode) -> None:
        """Toggle a preset; selecting the active one goes back to ALL."""
        if mode == FilterMode.ALL:
            self.filter_mode = FilterMode.ALL
        else:
            self.filter_mode = toggle_filter_mode(self.filter_mode, mode)
        self.status_message = f"Filter: {self.filter_mode.label}"
        self.recompute()

    def cycle_sort(self) -> SortMode:
        self.sort_mode = self.sort_mode.next()
        self.status_message = f"Sort: {self.sort_mode.label}"
        self.recompute()
        return self.sort_mode

    def toggle_collapse(self) -> bool:
        """Collapse or expand the selected tree node.

        Returns:
            True if something was toggled. Nodes without children are left
            alone.
        """
        node = self.focus.panel.selected_item()
        if node is None or not node.has_children:
            return False
        self.collapsed.toggle(node.id)
        self.recompute()
        return True

    # -- Selection and views ----------------------------------------------

    def selected_issue(self) -> Issue | None:
        if self.base_mode == ViewMode.BOARD:
            return self.board.selected_issue()
        return self.focus.panel.selected_issue()

    def counts(self) -> dict[PanelFocus, int]:
        return {focus: len(self.panels[focus]) for focus in PanelFocus}

    def toggle_board(self) -> ViewMode:
        self.base_mode = ViewMode.LIST if self.base_mode == ViewMode.BOARD else ViewMode.BOARD
        self.mode = self.base_mode
        self.list_clicks.reset()
        self.board.clicks.reset()
        return self.mode

    def open_overlay(self, mode: ViewMode) -> None:
        """Enter a mode drawn on top of the list or board."""
        if mode in BASE_MODES:
            raise ValueError(f"{mode} is not an overlay mode")
        self.mode = mode

    def close_overlay(self) -> None:
        self.mode = self.base_mode

    def start_search(self) -> None:
        self.open_overlay(ViewMode.SEARCH)

    def end_search(self, keep: bool) -> None:
        """Leave search mode, clearing the query unless keep is set."""
        self.close_overlay()
        if not keep:
            self.set_query("")

    def blocker_candidates(self, issue: Issue) -> list[Issue]:
        """Unclosed issues that could be added as blockers of issue."""
        return [
            other for other in self.snapshot.issues
            if other.id != issue.id
            and other.status != IssueStatus.CLOSED
            and other.id not in issue.blocked_by
        ]

    def issue_action(self, name: str, issue: Issue) -> Action:
        """Build the Action for a named issue action such as ``add_blocker``.

        Blocker edits with nothing to choose from come back as warnings so
        no empty picker is ever shown.
        """
        kind = _ISSUE_ACTIONS[name]
        if kind == ActionKind.ADD_BLOCKER and not self.blocker_candidates(issue):
            return Action(ActionKind.WARN, message="No available issues to add as blocker")
        if kind == ActionKind.REMOVE_BLOCKER and not issue.blocked_by:
            return Action(ActionKind.WARN, message="No blockers to remove")
        return Action(kind, issue=issue)

    # -- Input --------------------------------------------------------------

    def _custom_command(self, key: str) -> Action | None:
        context = "board" if self.base_mode == ViewMode.BOARD else "list"
        for cmd in self.custom_commands:
            if cmd.key == key and cmd.applies_to(context):
                issue = self.selected_issue()
                if issue is None:
                    return Action(ActionKind.WARN, message=NO_SELECTION)
                return Action(ActionKind.CUSTOM, issue=issue, command=cmd)
        return None

    def handle_key(self, key: str) -> Action | None:
        """Dispatch one key press according to the current view mode."""
        if key == "ctrl+c":
            return Action(ActionKind.QUIT)
        if self.mode not in BASE_MODES:
            if matches(key, "cancel"):
                self.close_overlay()
            return None

        if self.mode == ViewMode.BOARD:
            if self.board.handle_key(key):
                return None
            if matches(key, "cancel"):
                self.toggle_board()
                return None
        else:
            if self.focus.panel.handle_key(key):
                return None
            if matches(key, "next_panel"):
                self.focus.cycle(1)
                return None
            if matches(key, "prev_panel"):
                self.focus.cycle(-1)
                return None
            if matches(key, "toggle_collapse"):
                self.toggle_collapse()
                return None

        action = action_for(key)
        if action in _ISSUE_ACTIONS:
            issue = self.selected_issue()
            if issue is None:
                return Action(ActionKind.WARN, message=NO_SELECTION)
            return self.issue_action(action, issue)
        if action == "add":
            return Action(ActionKind.CREATE)
        if action in _PRESETS:
            self.set_filter_mode(_PRESETS[action])
            return None
        if action == "filter_all":
            self.set_filter_mode(FilterMode.ALL)
            return None
        if action == "sort":
            self.cycle_sort()
            return None
        if action == "board":
            self.toggle_board()
            return None
        if action == "search":
            self.start_search()
            return Action(ActionKind.START_SEARCH)
        if action == "refresh":
            return Action(ActionKind.REFRESH)
        if action == "help":
            self.open_overlay(ViewMode.HELP)
            return Action(ActionKind.SHOW_HELP)
        if action == "quit":
            return Action(ActionKind.QUIT)
        return self._custom_command(key)

    def click_list(self, hit: Hit | None, now: float) -> Action | None:
        """Apply a resolved click in the panel stack.

        Clicking a panel focuses it; clicking a row selects it. A second
        click on the same row within the double-click window opens it.
        """
        if hit is None or self.mode != ViewMode.LIST:
            return None
        if hit.key != self.focus.current:
            self.focus.focus(hit.key)
        if hit.index is None:
            self.list_clicks.reset()
            return None
        self.focus.panel.select_index(hit.index)
        if self.list_clicks.register((hit.key, hit.index), now) == ClickResult.CONFIRM:
            issue = self.focus.panel.selected_issue()
            if issue is not None:
                return Action(ActionKind.OPEN_DETAIL, issue=issue)
        return None

    def click_board(self, hit: Hit | None, now: float) -> Action | None:
        """Apply a resolved click on the board."""
        if hit is None or self.mode != ViewMode.BOARD:
            return None
        result = self.board.click(int(hit.key), hit.index, now)
        if result == ClickResult.CONFIRM:
            issue = self.board.selected_issue()
            if issue is not None:
                return Action(ActionKind.OPEN_DETAIL, issue=issue)
        return None

    def scroll(self, amount: int) -> None:
        """Mouse wheel over the list or board."""
        if self.mode == ViewMode.BOARD:
            self.board.move_row(amount)
        elif self.mode == ViewMode.LIST:
            self.focus.panel.scroll_by(amount)

    @property
    def board_column(self) -> BoardColumn:
        return BoardColumn(self.board.column)
