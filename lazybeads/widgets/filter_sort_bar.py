"""Filter/sort bar with an inline search input."""

from __future__ import annotations

from rich.markup import escape
from textual import events
from textual.app import ComposeResult
from textual.css.query import NoMatches
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Input, Static

from ..state.filter_sort import FilterMode, SortMode


class _ClickableStatic(Static):
    """A Static widget that visually responds to mouse hover."""

    DEFAULT_CSS = """
    _ClickableStatic {
        width: auto;
        height: 1;
    }
    _ClickableStatic:hover {
        text-style: bold;
    }
    """


class _SortLabel(_ClickableStatic):
    """Clickable sort label - click to cycle sort mode."""

    def on_click(self, event: events.Click) -> None:
        event.stop()
        bar = self.parent
        if isinstance(bar, FilterSortBar):
            bar.post_message(FilterSortBar.SortClicked())


class _FilterChip(_ClickableStatic):
    """Clickable filter chip - click to toggle this preset."""

    def __init__(self, mode: FilterMode, content: str = "", **kwargs) -> None:
        super().__init__(content, **kwargs)
        self.mode = mode

    def on_click(self, event: events.Click) -> None:
        event.stop()
        bar = self.parent
        if isinstance(bar, FilterSortBar):
            bar.post_message(FilterSortBar.FilterClicked(self.mode))


class _SearchHint(_ClickableStatic):
    """Clickable search hint - click to open search input."""

    def on_click(self, event: events.Click) -> None:
        event.stop()
        bar = self.parent
        if isinstance(bar, FilterSortBar):
            bar.post_message(FilterSortBar.SearchClicked())


class FilterSortBar(Widget):
    """Shows the active preset, sort mode and search query.

    Keys are not bound here; the app drives open_search/close_search. While
    the search input is open:
        Enter - keep the query and return to the list
        Escape - clear the query and return to the list

    Emits QueryChanged on every edit and SearchClosed when the input closes.
    """

    DEFAULT_CSS = """
    FilterSortBar {
        height: 1;
        width: 100%;
        background: #181825;
        padding: 0 1;
        layout: horizontal;
    }

    FilterSortBar .fsb-sort-info {
        width: auto;
        height: 1;
        padding: 0 1 0 0;
        color: #a6adc8;
    }

    FilterSortBar .fsb-separator {
        width: auto;
        height: 1;
        padding: 0 1 0 0;
        color: #7f849c;
    }

    FilterSortBar .fsb-chip {
        width: auto;
        height: 1;
        padding: 0 1 0 0;
    }

    FilterSortBar Input {
        width: 40;
        height: 1;
        border: none !important;
        background: #313244;
        padding: 0 1;
        display: none;
    }

    FilterSortBar Input.visible {
        display: block;
    }

    FilterSortBar .fsb-search-hint {
        width: auto;
        height: 1;
        color: #585b70;
    }
    """

    CHIPS = [
        (FilterMode.ALL, "all [A]"),
        (FilterMode.OPEN, "open [o]"),
        (FilterMode.READY, "ready [r]"),
        (FilterMode.CLOSED, "closed [C]"),
    ]

    class QueryChanged(Message):
        def __init__(self, query: str) -> None:
            super().__init__()
            self.query = query

    class SearchClosed(Message):
        """The search input closed. keep is False when the query was cleared."""

        def __init__(self, keep: bool) -> None:
            super().__init__()
            self.keep = keep

    class SortClicked(Message):
        pass

    class FilterClicked(Message):
        def __init__(self, mode: FilterMode) -> None:
            super().__init__()
            self.mode = mode

    class SearchClicked(Message):
        pass

    def __init__(self, id: str | None = None) -> None:
        super().__init__(id=id)
        self._filter_mode = FilterMode.ALL
        self._sort_mode = SortMode.DEFAULT
        self._query = ""
        self._search_visible = False

    @property
    def search_visible(self) -> bool:
        return self._search_visible

    def compose(self) -> ComposeResult:
        yield _SortLabel(self._sort_text(), classes="fsb-sort-info", id="fsb-sort-label")
        yield Static("[#7f849c]│[/]", classes="fsb-separator")
        for mode, label in self.CHIPS:
            yield _FilterChip(mode, self._chip_text(mode, label), classes="fsb-chip", id=f"fsb-chip-{mode.value}")
        yield Static("[#7f849c]│[/]", classes="fsb-separator")
        yield _SearchHint(self._hint_text(), classes="fsb-search-hint", id="fsb-search-hint")
        yield Input(placeholder="Search title or ID...", id="fsb-search-input")

    def _sort_text(self) -> str:
        return f"[#7f849c]Sort:[/] [#89b4fa]{self._sort_mode.label}[/]"

    def _chip_text(self, mode: FilterMode, label: str) -> str:
        color = "#a6e3a1" if mode == self._filter_mode else "#585b70"
        return f"[{color}]{escape(label)}[/]"

    def _hint_text(self) -> str:
        if self._search_visible:
            return ""
        if self._query:
            return f"[#f9e2af]/{escape(self._query)}[/]"
        return "[#585b70]/search[/]"

    def update_state(self, filter_mode: FilterMode, sort_mode: SortMode, query: str) -> None:
        """Reflect the app's filter state."""
        self._filter_mode = filter_mode
        self._sort_mode = sort_mode
        self._query = query
        try:
            self.query_one("#fsb-sort-label", _SortLabel).update(self._sort_text())
            for mode, label in self.CHIPS:
                self.query_one(f"#fsb-chip-{mode.value}", _FilterChip).update(self._chip_text(mode, label))
            self.query_one("#fsb-search-hint", _SearchHint).update(self._hint_text())
        except NoMatches:
            pass

    def open_search(self, query: str = "") -> None:
        """Show the search input, seeded with query, and focus it."""
        try:
            search_input = self.query_one("#fsb-search-input", Input)
            self._search_visible = True
            search_input.value = query
            search_input.add_class("visible")
            self.query_one("#fsb-search-hint", _SearchHint).update("")
            search_input.focus()
        except NoMatches:
            pass

    def close_search(self, keep: bool) -> None:
        """Hide the search input. Without keep the input is cleared."""
        if not self._search_visible:
            return
        self._search_visible = False
        try:
            search_input = self.query_one("#fsb-search-input", Input)
            search_input.remove_class("visible")
            if not keep:
                search_input.value = ""
                self._query = ""
            self.query_one("#fsb-search-hint", _SearchHint).update(self._hint_text())
        except NoMatches:
            pass
        self.post_message(self.SearchClosed(keep))

    def on_input_changed(self, event: Input.Changed) -> None:
        """Handle search input changes."""
        if event.input.id == "fsb-search-input" and self._search_visible:
            self._query = event.value
            self.post_message(self.QueryChanged(event.value))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Enter keeps the query and leaves the input."""
        if event.input.id == "fsb-search-input":
            self.close_search(keep=True)

    def on_key(self, event: events.Key) -> None:
        """Handle escape to clear search."""
        if event.key == "escape" and self._search_visible:
            self.close_search(keep=False)
            event.stop()
