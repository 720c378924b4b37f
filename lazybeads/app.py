"""Main Textual application for lazybeads."""

from functools import partial
from pathlib import Path
from typing import Callable

from textual import events
from textual.app import App, ComposeResult, SuspendNotSupported
from textual.binding import Binding
from textual.containers import Container
from textual.css.query import NoMatches
from textual.worker import Worker, WorkerState

from . import logging_bridge as log
from .config import Config, ConfigError, CustomCommand, run_custom_command
from .data.beads_client import BeadsClient, CreateOptions, UpdateOptions
from .data.models import Issue
from .data.poller import RefreshPoller
from .editor import EditorError, edit_text
from .state.app_state import Action, ActionKind, AppState, ViewMode
from .state.hit_test import Hit
from .themes.catppuccin import CATPPUCCIN_THEME
from .widgets.board_panel import BoardView
from .widgets.detail_modal import (
    PRIORITY_OPTIONS,
    STATUS_OPTIONS,
    TYPE_OPTIONS,
    ConfirmModal,
    CreateModal,
    DetailModal,
    HelpModal,
    InputModal,
    SelectModal,
    issue_options,
)
from .widgets.filter_sort_bar import FilterSortBar
from .widgets.header import LazyBeadsHeader, StatusBar
from .widgets.issue_panel import PanelStack

FETCH_WORKER = "fetch"
MUTATION_WORKER = "mutation"
STATUS_FLASH_SECONDS = 3.0


class MainView(Container):
    """Holds the list and board views and receives all keyboard input."""

    DEFAULT_CSS = """
    MainView {
        height: 1fr;
        width: 100%;
    }
    """

    can_focus = True

    def compose(self) -> ComposeResult:
        yield PanelStack(id="panel-stack")
        yield BoardView(id="board-view")

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self.app.handle_key(event.key)


class LazyBeadsApp(App):
    """Interactive viewer for a beads issue database."""

    TITLE = "lazybeads"
    CSS = CATPPUCCIN_THEME

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(self, client: BeadsClient, config: Config | None = None,
                 project_dir: Path | None = None) -> None:
        super().__init__()
        self.client = client
        self.config = config or Config()
        self.project_dir = project_dir or client.cwd or Path.cwd()
        self.state = AppState(custom_commands=self.config.custom_commands)
        self.poller = RefreshPoller(self.config.poll_interval)
        self._refresh_again = False
        self._status_timer = None
        self._flashed = ""

    def compose(self) -> ComposeResult:
        yield LazyBeadsHeader(self.project_dir)
        yield FilterSortBar(id="filter-bar")
        yield MainView(id="main")
        yield StatusBar()

    async def on_mount(self) -> None:
        """Start polling and load the first snapshot."""
        self.poller.on_tick(self._on_poll)
        self.poller.start()
        self.query_one(MainView).focus()
        self.request_refresh()
        self.sync_views()

    def on_unmount(self) -> None:
        self.poller.stop()

    async def _on_poll(self) -> None:
        self.request_refresh()

    # -- Refresh and mutations -------------------------------------------

    def request_refresh(self, force: bool = False) -> bool:
        """Start a background fetch unless one is already running.

        Args:
            force: Queue another fetch once the running one finishes instead
                of dropping the request.

        Returns:
            True if a fetch was started.
        """
        if not self.state.begin_refresh():
            if force:
                self._refresh_again = True
            return False
        log.log_debug("Refreshing issues")
        self.run_worker(
            self.client.fetch_all,
            name=FETCH_WORKER,
            group=FETCH_WORKER,
            thread=True,
            exit_on_error=False,
        )
        self._sync_header()
        return True

    def run_mutation(self, description: str, func: Callable[[], object]) -> None:
        """Run a bd write in a thread; refresh when it succeeds."""
        log.log(f"Mutation: {description}")
        self.run_worker(
            func,
            name=MUTATION_WORKER,
            group=MUTATION_WORKER,
            description=description,
            thread=True,
            exit_on_error=False,
        )

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        worker = event.worker
        if worker.name == FETCH_WORKER:
            self._on_fetch_state(worker, event.state)
        elif worker.name == MUTATION_WORKER:
            self._on_mutation_state(worker, event.state)

    def _on_fetch_state(self, worker: Worker, state: WorkerState) -> None:
        if state == WorkerState.SUCCESS:
            self.state.apply_snapshot(worker.result)
        elif state == WorkerState.ERROR:
            message = str(worker.error)
            log.log_error(f"Refresh failed: {message}")
            self.state.apply_fetch_error(message)
            self.notify(message, title="Refresh failed", severity="error", markup=False)
        elif state == WorkerState.CANCELLED:
            self.state.end_refresh()
        else:
            return
        self.sync_views()
        if self._refresh_again:
            self._refresh_again = False
            self.request_refresh()

    def _on_mutation_state(self, worker: Worker, state: WorkerState) -> None:
        if state == WorkerState.SUCCESS:
            self.flash(worker.description)
            self.request_refresh(force=True)
        elif state == WorkerState.ERROR:
            log.log_error(f"{worker.description} failed: {worker.error}")
            self.notify(str(worker.error), title=f"{worker.description} failed", severity="error", markup=False)

    # -- Input -----------------------------------------------------------

    def handle_key(self, key: str) -> None:
        action = self.state.handle_key(key)
        if action is not None:
            self.handle_action(action)
        self.sync_views()

    def _leave_search(self) -> None:
        if self.state.mode == ViewMode.SEARCH:
            self.state.end_search(keep=True)
            self.query_one(FilterSortBar).close_search(keep=True)
            self.query_one(MainView).focus()

    def handle_list_click(self, hit: Hit | None, now: float) -> None:
        self._leave_search()
        action = self.state.click_list(hit, now)
        if action is not None:
            self.handle_action(action)
        self.sync_views()

    def handle_board_click(self, hit: Hit | None, now: float) -> None:
        self._leave_search()
        action = self.state.click_board(hit, now)
        if action is not None:
            self.handle_action(action)
        self.sync_views()

    def handle_scroll(self, amount: int) -> None:
        self.state.scroll(amount)
        self.sync_views()

    def handle_action(self, action: Action) -> None:
        """Carry out an action produced by AppState."""
        kind = action.kind
        issue = action.issue
        if kind == ActionKind.QUIT:
            self.exit()
        elif kind == ActionKind.REFRESH:
            if self.request_refresh(force=True):
                self.flash("Refreshing...")
        elif kind == ActionKind.OPEN_DETAIL and issue is not None:
            self.open_detail(issue)
        elif kind == ActionKind.EDIT_STATUS and issue is not None:
            self._open_modal(
                SelectModal(f"Status of {issue.id}", STATUS_OPTIONS, issue.status.value),
                partial(self._apply_status, issue),
            )
        elif kind == ActionKind.EDIT_PRIORITY and issue is not None:
            self._open_modal(
                SelectModal(f"Priority of {issue.id}", PRIORITY_OPTIONS, str(issue.priority)),
                partial(self._apply_priority, issue),
            )
        elif kind == ActionKind.EDIT_TYPE and issue is not None:
            self._open_modal(
                SelectModal(f"Type of {issue.id}", TYPE_OPTIONS, issue.issue_type.value),
                partial(self._apply_type, issue),
            )
        elif kind == ActionKind.EDIT_TITLE and issue is not None:
            self._open_modal(
                InputModal(f"Title of {issue.id}", issue.title),
                partial(self._apply_title, issue),
            )
        elif kind == ActionKind.EDIT_DESCRIPTION and issue is not None:
            self.edit_description(issue)
        elif kind == ActionKind.ADD_COMMENT and issue is not None:
            self._open_modal(
                InputModal(f"Comment on {issue.id}", placeholder="Comment text"),
                partial(self._apply_comment, issue),
            )
        elif kind == ActionKind.ADD_BLOCKER and issue is not None:
            candidates = [other.id for other in self.state.blocker_candidates(issue)]
            self._open_modal(
                SelectModal(f"Add blocker to {issue.id}", issue_options(candidates, self.state.snapshot.by_id())),
                partial(self._apply_add_blocker, issue),
            )
        elif kind == ActionKind.REMOVE_BLOCKER and issue is not None:
            self._open_modal(
                SelectModal(f"Remove blocker from {issue.id}",
                            issue_options(issue.blocked_by, self.state.snapshot.by_id())),
                partial(self._apply_remove_blocker, issue),
            )
        elif kind == ActionKind.CREATE:
            self._open_modal(CreateModal(), self._apply_create)
        elif kind == ActionKind.DELETE and issue is not None:

            self._open_modal(
                ConfirmModal(f"Delete {issue.id}: {issue.title}?"),
                partial(self._apply_delete, issue),
            )
        elif kind == ActionKind.COPY_ID and issue is not None:
            self.copy_to_clipboard(issue.id)
            self.flash(f"Copied {issue.id}")
        elif kind == ActionKind.START_SEARCH:
            self.query_one(FilterSortBar).open_search(self.state.query)
        elif kind == ActionKind.SHOW_HELP:
            self.push_screen(HelpModal(self.config.custom_commands), callback=self._overlay_closed)
        elif kind == ActionKind.CUSTOM and action.command is not None and issue is not None:
            self.run_command_for(action.command, issue)
        elif kind == ActionKind.WARN:
            self.notify(action.message, severity="warning")

    def open_detail(self, issue: Issue) -> None:
        self.state.open_overlay(ViewMode.DETAIL)
        self.push_screen(
            DetailModal(issue, self.state.snapshot, self.client, self.config.custom_commands),
            callback=partial(self._detail_closed, issue),
        )

    def _detail_closed(self, issue: Issue, action: str | None) -> None:
        self._overlay_closed()
        if action is not None:
            self.handle_action(self.state.issue_action(action, issue))
            self.sync_views()


    def _open_modal(self, screen, callback) -> None:
        self.state.open_overlay(ViewMode.MODAL)
        self.push_screen(screen, callback=callback)

    def _overlay_closed(self, result=None) -> None:
        self.state.close_overlay()
        self.sync_views()

    def _apply_status(self, issue: Issue, value: str | None) -> None:
        self._overlay_closed()
        if value is None or value == issue.status.value:
            return
        client = self.client
        self.run_mutation(
            f"{issue.id} → {value}",
            lambda: client.update(issue.id, UpdateOptions(status=value)),
        )

    def _apply_priority(self, issue: Issue, value: str | None) -> None:
        self._overlay_closed()
        if value is None or value == str(issue.priority):
            return
        client = self.client
        self.run_mutation(
            f"{issue.id} → P{value}",
            lambda: client.update(issue.id, UpdateOptions(priority=int(value))),
        )

    def _apply_delete(self, issue: Issue, confirmed: bool | None) -> None:
        self._overlay_closed()
        if not confirmed:
            return
        client = self.client
        self.run_mutation(f"Deleted {issue.id}", lambda: client.delete(issue.id))

    def _apply_type(self, issue: Issue, value: str | None) -> None:
        self._overlay_closed()
        if value is None or value == issue.issue_type.value:
            return
        client = self.client
        self.run_mutation(
            f"{issue.id} type → {value}",
            lambda: client.update(issue.id, UpdateOptions(issue_type=value)),
        )

    def _apply_title(self, issue: Issue, value: str | None) -> None:
        self._overlay_closed()
        if not value or value == issue.title:
            return
        client = self.client
        self.run_mutation(
            f"Renamed {issue.id}",
            lambda: client.update(issue.id, UpdateOptions(title=value)),
        )

    def _apply_comment(self, issue: Issue, text: str | None) -> None:
        self._overlay_closed()
        if not text:
            return
        client = self.client
        self.run_mutation(f"Commented on {issue.id}", lambda: client.add_comment(issue.id, text))

    def _apply_add_blocker(self, issue: Issue, blocker: str | None) -> None:
        self._overlay_closed()
        if blocker is None:
            return
        client = self.client
        self.run_mutation(
            f"{blocker} now blocks {issue.id}",
            lambda: client.add_blocker(issue.id, blocker),
        )

    def _apply_remove_blocker(self, issue: Issue, blocker: str | None) -> None:
        self._overlay_closed()
        if blocker is None:
            return
        client = self.client
        self.run_mutation(
            f"{blocker} no longer blocks {issue.id}",
            lambda: client.remove_blocker(issue.id, blocker),
        )

    def _apply_create(self, opts: CreateOptions | None) -> None:
        self._overlay_closed()
        if opts is None:
            return
        client = self.client
        self.run_mutation(f"Created {opts.title}", lambda: client.create(opts))

    def edit_description(self, issue: Issue) -> None:
        """Hand the terminal to $EDITOR and save the description it returns."""
        try:
            with self.suspend():
                text = edit_text(issue.description)
        except SuspendNotSupported:
            self.notify("Cannot open an editor in this terminal", severity="warning")
            return
        except (EditorError, OSError) as e:
            log.log_error(f"Editing description of {issue.id} failed: {e}")
            self.notify(str(e), title="Editor failed", severity="error", markup=False)
            return
        text = text.rstrip("\n")
        if text == issue.description:
            self.flash("Description unchanged")
            return
        client = self.client
        self.run_mutation(
            f"Updated description of {issue.id}",
            lambda: client.update(issue.id, UpdateOptions(description=text)),
        )


    def run_command_for(self, cmd: CustomCommand, issue: Issue) -> None:
        """Launch a custom command for issue without blocking the UI."""
        try:
            run_custom_command(cmd, issue, cwd=self.client.cwd)
        except (ConfigError, OSError) as e:
            log.log_error(f"Custom command '{cmd.key}' failed: {e}")
            self.notify(str(e), title="Command failed", severity="error", markup=False)
            return
        self.flash(f"Ran {cmd.description or cmd.key}")

    # -- Filter bar --------------------------------------------------------

    def on_filter_sort_bar_query_changed(self, event: FilterSortBar.QueryChanged) -> None:
        self.state.set_query(event.query)
        self.sync_views()

    def on_filter_sort_bar_search_closed(self, event: FilterSortBar.SearchClosed) -> None:
        self.state.end_search(keep=event.keep)
        self.query_one(MainView).focus()
        self.sync_views()

    def on_filter_sort_bar_sort_clicked(self, event: FilterSortBar.SortClicked) -> None:
        self.state.cycle_sort()
        self.sync_views()

    def on_filter_sort_bar_filter_clicked(self, event: FilterSortBar.FilterClicked) -> None:
        self.state.set_filter_mode(event.mode)
        self.sync_views()

    def on_filter_sort_bar_search_clicked(self, event: FilterSortBar.SearchClicked) -> None:
        if self.state.mode in (ViewMode.LIST, ViewMode.BOARD):
            self.state.start_search()
            self.query_one(FilterSortBar).open_search(self.state.query)
            self.sync_views()

    # -- Rendering -----------------------------------------------------------

    def flash(self, message: str) -> None:
        """Show message in the status bar for a few seconds."""
        self.state.status_message = message
        self._flashed = message
        if self._status_timer is not None:
            self._status_timer.stop()
        self._status_timer = self.set_timer(STATUS_FLASH_SECONDS, self._clear_status)
        self._sync_status()

    def _clear_status(self) -> None:
        self.state.status_message = ""
        self._flashed = ""
        self._status_timer = None
        self._sync_status()

    def _sync_header(self) -> None:
        try:
            self.query_one(LazyBeadsHeader).update_state(self.state)
        except NoMatches:
            pass

    def _sync_status(self) -> None:
        try:
            self.query_one(StatusBar).update_state(self.state)
        except NoMatches:
            pass

    def sync_views(self) -> None:
        """Push AppState into every widget."""
        state = self.state
        if state.status_message and state.status_message != self._flashed:
            self.flash(state.status_message)
        try:
            in_board = state.base_mode == ViewMode.BOARD
            stack = self.query_one(PanelStack)
            board = self.query_one(BoardView)
            stack.display = not in_board
            board.display = in_board
            stack.sync()
            board.sync()
            self.query_one(FilterSortBar).update_state(state.filter_mode, state.sort_mode, state.query)
        except NoMatches:
            return
        self._sync_header()
        self._sync_status()
