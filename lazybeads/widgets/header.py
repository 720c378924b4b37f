"""Header and status bar widgets."""

from pathlib import Path

from rich.markup import escape
from textual.widgets import Static

from ..state.app_state import AppState, ViewMode
from ..state.focus import PanelFocus


class LazyBeadsHeader(Static):
    """One-line header showing the project, issue counts and refresh state."""

    DEFAULT_CSS = """
    LazyBeadsHeader {
        background: #181825;
        color: #cdd6f4;
        height: 1;
        dock: top;
        padding: 0 1;
    }
    """

    def __init__(self, project_dir: Path) -> None:
        super().__init__("")
        self.project_dir = project_dir
        self.total = 0
        self.ready = 0
        self.loading = False
        self.view = ViewMode.LIST

    def render(self) -> str:
        """Render header content."""
        loading = " [#f9e2af]⟳[/]" if self.loading else ""
        view = "Board" if self.view == ViewMode.BOARD else "List"
        return (
            f"[bold #cba6f7]LAZYBEADS[/] │ {escape(self.project_dir.name)} │ "
            f"{view} │ {self.total} issues │ [#a6e3a1]{self.ready} ready[/]{loading}"
        )

    def update_state(self, state: AppState) -> None:
        self.total = len(state.snapshot)
        self.ready = len(state.snapshot.ready_ids)
        self.loading = state.loading
        self.view = state.base_mode
        self.refresh()


class StatusBar(Static):
    """Bottom bar: counts, errors, transient messages and key hints."""

    DEFAULT_CSS = """
    StatusBar {
        background: #181825;
        color: #7f849c;
        dock: bottom;
        height: 1;
        padding: 0 1;
    }
    """

    LIST_HINTS = [
        ("j/k", "Move"),
        ("tab", "Panel"),
        ("enter", "Details"),
        ("a", "New"),
        ("/", "Search"),
        ("b", "Board"),
        ("?", "Help"),
        ("q", "Quit"),
    ]

    BOARD_HINTS = [
        ("h/l", "Column"),
        ("j/k", "Card"),
        ("enter", "Details"),
        ("b", "List"),
        ("?", "Help"),
        ("q", "Quit"),
    ]

    def __init__(self) -> None:
        super().__init__("")
        self.message = ""
        self.error: str | None = None
        self.counts: dict[PanelFocus, int] = {}
        self.view = ViewMode.LIST

    def render(self) -> str:
        """Render status bar content."""
        if self.error:
            left = f"[#f38ba8]✗ {escape(self.error)}[/]"
        elif self.message:
            left = f"[#cdd6f4]{escape(self.message)}[/]"
        else:
            left = (
                f"[#fab387]{self.counts.get(PanelFocus.IN_PROGRESS, 0)}[/] in progress · "
                f"[#89b4fa]{self.counts.get(PanelFocus.OPEN, 0)}[/] open · "
                f"[#7f849c]{self.counts.get(PanelFocus.CLOSED, 0)}[/] closed"
            )
        hints = self.BOARD_HINTS if self.view == ViewMode.BOARD else self.LIST_HINTS
        keys = "  ".join(f"[bold]{escape(key)}[/]:{action}" for key, action in hints)
        return f"{left}  │  {keys}"

    def update_state(self, state: AppState) -> None:
        self.message = state.status_message
        self.error = state.error
        self.counts = state.counts()
        self.view = state.base_mode
        self.refresh()
