"""Tests for the main LazyBeadsApp using Textual's Pilot."""

from contextlib import nullcontext
from pathlib import Path

import pytest
from rich.text import Text
from textual.widgets import Input

from lazybeads.app import LazyBeadsApp, MainView
from lazybeads.config import Config
from lazybeads.state.app_state import ViewMode
from lazybeads.state.filter_sort import FilterMode
from lazybeads.state.focus import PanelFocus
from lazybeads.state.tree import TreeNode
from lazybeads.widgets.board_panel import BoardView, render_card
from lazybeads.widgets.detail_modal import (
    ConfirmModal,
    CreateModal,
    DetailModal,
    HelpModal,
    InputModal,
    SelectModal,
)
from lazybeads.widgets.filter_sort_bar import FilterSortBar
from lazybeads.widgets.header import LazyBeadsHeader, StatusBar
from lazybeads.widgets.issue_panel import IssuePanel, PanelStack, render_node

QUIET = Config(poll_interval=60)


async def settle(app, pilot) -> None:
    """Let background workers finish and their messages be handled."""
    await app.workers.wait_for_complete()
    await pilot.pause()


class TestRendering:
    def test_render_node_marks_collapsed(self, issue_factory):
        node = TreeNode(issue_factory("bd-1", "Epic"), depth=1, has_children=True, collapsed=True, hidden_count=3)
        line = render_node(node)
        assert line.startswith("  ▸ ")
        assert "(+3 hidden)" in line
        assert "bd-1" in line

    def test_render_node_blocked(self, issue_factory):
        line = render_node(TreeNode(issue_factory("bd-3", blocked_by=("bd-2",))))
        assert "⊘" in line

    def test_render_node_escapes_markup(self, issue_factory):
        line = render_node(TreeNode(issue_factory("bd-1", "[bold]not markup")))
        assert "\\[bold]" in line

    def test_render_card_height(self, issue_factory):
        assert len(render_card(issue_factory("bd-1"), 20)) == 3

    def test_selected_card_fills_width(self, issue_factory):
        lines = render_card(issue_factory("bd-1", "Short"), 20, selected=True)
        assert [len(Text.from_markup(line).plain) for line in lines] == [20, 20, 20]

    def test_long_card_title_truncated(self, issue_factory):
        lines = render_card(issue_factory("bd-1", "A title far too long for the card"), 12)
        title = Text.from_markup(lines[1]).plain
        assert len(title) == 12
        assert title.endswith("…")


    def test_header_renders_project(self, tmp_path: Path):
        header = LazyBeadsHeader(tmp_path / "my-project")
        content = header.render()
        assert "LAZYBEADS" in content
        assert "my-project" in content


class TestStartup:
    @pytest.mark.asyncio
    async def test_loads_snapshot(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            assert fake_client.fetches == 1
            assert app.state.loaded
            assert not app.state.loading
            assert app.state.focus.current == PanelFocus.IN_PROGRESS
            assert isinstance(app.focused, MainView)
            assert app.query_one(PanelStack).display
            assert not app.query_one(BoardView).display

    @pytest.mark.asyncio
    async def test_title(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test():
            assert app.title == "lazybeads"

    @pytest.mark.asyncio
    async def test_fetch_error_is_reported(self, fake_client):
        fake_client.fail_with = "bd list failed: no database"
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            assert app.state.error == "bd list failed: no database"
            assert not app.state.loading
            assert "no database" in app.query_one(StatusBar).render()

    @pytest.mark.asyncio
    async def test_refresh_key(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("R")
            await settle(app, pilot)
            assert fake_client.fetches == 2


class TestNavigation:
    @pytest.mark.asyncio
    async def test_keys_move_cursor_and_focus(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("j")
            assert app.state.selected_issue().id == "bd-4"
            await pilot.press("tab")
            assert app.state.focus.current == PanelFocus.OPEN
            assert isinstance(app.focused, MainView)

    @pytest.mark.asyncio
    async def test_board_toggle(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test(size=(160, 40)) as pilot:
            await settle(app, pilot)
            await pilot.press("b")
            assert app.state.mode == ViewMode.BOARD
            assert app.query_one(BoardView).display
            assert not app.query_one(PanelStack).display
            await pilot.press("b")
            assert app.state.mode == ViewMode.LIST

    @pytest.mark.asyncio
    async def test_preset_filter(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("C")
            assert app.state.filter_mode == FilterMode.CLOSED
            assert app.state.panels.open.is_empty


class TestOverlays:
    @pytest.mark.asyncio
    async def test_help_opens_and_closes(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("question_mark")
            assert isinstance(app.screen, HelpModal)
            assert app.state.mode == ViewMode.HELP
            await pilot.press("escape")
            assert not isinstance(app.screen, HelpModal)
            assert app.state.mode == ViewMode.LIST

    @pytest.mark.asyncio
    async def test_detail_opens_on_enter(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("enter")
            assert isinstance(app.screen, DetailModal)
            assert app.state.mode == ViewMode.DETAIL
            await settle(app, pilot)
            assert app.screen.comments == []
            await pilot.press("escape")
            assert app.state.mode == ViewMode.LIST

    @pytest.mark.asyncio
    async def test_status_change(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("s")
            assert isinstance(app.screen, SelectModal)
            # bd-1.2 is in progress; the next option is closed
            await pilot.press("down", "enter")
            await settle(app, pilot)
            await settle(app, pilot)
            assert app.state.mode == ViewMode.LIST
            issue_id, opts = fake_client.updates[0]
            assert issue_id == "bd-1.2"
            assert opts.status == "closed"
            assert fake_client.fetches >= 2

    @pytest.mark.asyncio
    async def test_priority_cancel(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("p")
            assert isinstance(app.screen, SelectModal)
            await pilot.press("escape")
            await settle(app, pilot)
            assert fake_client.updates == []
            assert app.state.mode == ViewMode.LIST

    @pytest.mark.asyncio
    async def test_delete_confirmed(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("x")
            assert isinstance(app.screen, ConfirmModal)
            await pilot.press("y")
            await settle(app, pilot)
            assert fake_client.deleted == ["bd-1.2"]

    @pytest.mark.asyncio
    async def test_delete_declined(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("x")
            await pilot.press("n")
            await settle(app, pilot)
            assert fake_client.deleted == []


class TestSearch:
    @pytest.mark.asyncio
    async def test_live_filter_and_keep(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("slash")
            await pilot.pause()
            bar = app.query_one(FilterSortBar)
            assert bar.search_visible
            assert app.state.mode == ViewMode.SEARCH
            await pilot.press("l", "o", "g", "i", "n")
            await pilot.pause()
            assert app.state.query == "login"
            assert [n.id for n in app.state.panels.open.items] == ["bd-1.1", "bd-1.1.1"]
            await pilot.press("enter")
            await pilot.pause()
            assert not bar.search_visible
            assert app.state.mode == ViewMode.LIST
            assert app.state.query == "login"
            assert isinstance(app.focused, MainView)

    @pytest.mark.asyncio
    async def test_escape_clears(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("slash")
            await pilot.pause()
            await pilot.press("d", "o", "c", "s")
            await pilot.pause()
            assert app.state.query == "docs"
            await pilot.press("escape")
            await pilot.pause()
            assert app.state.query == ""
            assert app.state.mode == ViewMode.LIST


class TestQuit:
    @pytest.mark.asyncio
    async def test_q_exits(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("q")
        assert app.return_code == 0


class TestPanelRendering:
    @pytest.mark.asyncio
    async def test_render_leaves_offset_alone(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("tab", "G")
            panel_state = app.state.panels.open
            assert panel_state.cursor == len(panel_state) - 1
            panel_state.offset = 0
            app.query_one("#panel-open", IssuePanel).render()
            assert panel_state.offset == 0


class TestEditing:
    @pytest.mark.asyncio
    async def test_create_issue(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("a")
            await pilot.pause()
            assert isinstance(app.screen, CreateModal)
            app.screen.query_one("#create-title", Input).value = "Export CSV"
            app.screen.query_one("#create-description", Input).value = "From the list view"
            await pilot.press("ctrl+s")
            await settle(app, pilot)
            assert app.state.mode == ViewMode.LIST
            opts = fake_client.created[0]
            assert opts.title == "Export CSV"
            assert opts.description == "From the list view"
            assert opts.issue_type == "task"
            assert opts.priority == 2
            assert fake_client.fetches >= 2

    @pytest.mark.asyncio
    async def test_create_requires_title(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("c")
            await pilot.pause()
            await pilot.press("enter")
            await pilot.pause()
            assert isinstance(app.screen, CreateModal)
            await pilot.press("escape")
            await settle(app, pilot)
            assert fake_client.created == []
            assert app.state.mode == ViewMode.LIST

    @pytest.mark.asyncio
    async def test_edit_title(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("t")
            await pilot.pause()
            assert isinstance(app.screen, InputModal)
            field = app.screen.query_one(Input)
            assert field.value == "Session tokens"
            field.value = "Session token rotation"
            await pilot.press("enter")
            await settle(app, pilot)
            issue_id, opts = fake_client.updates[0]
            assert issue_id == "bd-1.2"
            assert opts.title == "Session token rotation"

    @pytest.mark.asyncio
    async def test_unchanged_title_is_not_saved(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("t")
            await pilot.pause()
            await pilot.press("enter")
            await settle(app, pilot)
            assert fake_client.updates == []

    @pytest.mark.asyncio
    async def test_edit_type(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("T")
            assert isinstance(app.screen, SelectModal)
            # task is highlighted; bug follows it
            await pilot.press("down", "enter")
            await settle(app, pilot)
            issue_id, opts = fake_client.updates[0]
            assert issue_id == "bd-1.2"
            assert opts.issue_type == "bug"

    @pytest.mark.asyncio
    async def test_add_comment(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("m")
            await pilot.pause()
            assert isinstance(app.screen, InputModal)
            app.screen.query_one(Input).value = "Ship it"
            await pilot.press("enter")
            await settle(app, pilot)
            assert fake_client.comments_added == [("bd-1.2", "Ship it")]

    @pytest.mark.asyncio
    async def test_add_blocker(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("B")
            assert isinstance(app.screen, SelectModal)
            await pilot.press("enter")
            await settle(app, pilot)
            assert fake_client.blockers_added == [("bd-1.2", "bd-1")]

    @pytest.mark.asyncio
    async def test_remove_blocker(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("tab")
            ids = [node.id for node in app.state.panels.open.items]
            app.state.focus.panel.select_index(ids.index("bd-3"))
            await pilot.press("U")
            assert isinstance(app.screen, SelectModal)
            await pilot.press("enter")
            await settle(app, pilot)
            assert fake_client.blockers_removed == [("bd-3", "bd-2")]

    @pytest.mark.asyncio
    async def test_comment_from_detail(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("enter")
            assert isinstance(app.screen, DetailModal)
            await pilot.press("m")
            await pilot.pause()
            assert isinstance(app.screen, InputModal)
            assert app.state.mode == ViewMode.MODAL
            app.screen.query_one(Input).value = "From details"
            await pilot.press("enter")
            await settle(app, pilot)
            assert fake_client.comments_added == [("bd-1.2", "From details")]
            assert app.state.mode == ViewMode.LIST

    @pytest.mark.asyncio
    async def test_edit_description(self, fake_client, monkeypatch):
        monkeypatch.setattr("lazybeads.app.edit_text", lambda text: "Rotate every hour\n")
        app = LazyBeadsApp(fake_client, QUIET)
        monkeypatch.setattr(app, "suspend", nullcontext)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("d")
            await settle(app, pilot)
            issue_id, opts = fake_client.updates[0]
            assert issue_id == "bd-1.2"
            assert opts.description == "Rotate every hour"

    @pytest.mark.asyncio
    async def test_edit_description_unsupported_terminal(self, fake_client):
        app = LazyBeadsApp(fake_client, QUIET)
        async with app.run_test() as pilot:
            await settle(app, pilot)
            await pilot.press("e")
            await settle(app, pilot)
            assert fake_client.updates == []
            assert app.state.mode == ViewMode.LIST
