"""Tests for panel focus cycling."""

import pytest

from lazybeads.state.focus import FocusController, PanelFocus
from lazybeads.state.tree import TreeNode
from lazybeads.state.views import Panels


@pytest.fixture
def fill(issue_factory):
    def fill(panels, **counts):
        for name, count in counts.items():
            panels[PanelFocus(name)].set_items(
                [TreeNode(issue_factory(f"{name}-{i}")) for i in range(count)]
            )
        return panels
    return fill


class TestInitial:
    def test_first_non_empty(self, fill):
        panels = fill(Panels(), in_progress=0, open=2, closed=1)
        controller = FocusController(panels)
        assert controller.initial() == PanelFocus.OPEN
        assert panels.open.focused
        assert not panels.in_progress.focused

    def test_defaults_to_in_progress(self):
        controller = FocusController(Panels())
        assert controller.initial() == PanelFocus.IN_PROGRESS


class TestCycle:
    def test_skips_empty_in_progress(self, fill):
        panels = fill(Panels(), in_progress=0, open=2, closed=1)
        controller = FocusController(panels)
        controller.initial()
        assert controller.cycle(1) == PanelFocus.CLOSED
        assert controller.cycle(1) == PanelFocus.OPEN
        assert controller.cycle(-1) == PanelFocus.CLOSED

    def test_wraps_through_all(self, fill):
        panels = fill(Panels(), in_progress=1, open=1, closed=1)
        controller = FocusController(panels)
        controller.initial()
        seen = [controller.cycle(1) for _ in range(3)]
        assert seen == [PanelFocus.OPEN, PanelFocus.CLOSED, PanelFocus.IN_PROGRESS]

    def test_stays_put_when_all_empty(self):
        controller = FocusController(Panels())
        controller.initial()
        assert controller.cycle(1) == PanelFocus.IN_PROGRESS

    def test_candidates_recomputed(self, fill):
        panels = fill(Panels(), in_progress=1, open=1, closed=0)
        controller = FocusController(panels)
        controller.initial()
        assert controller.cycle(1) == PanelFocus.OPEN
        fill(panels, closed=2)
        assert controller.cycle(1) == PanelFocus.CLOSED


class TestFocusSideEffects:
    def test_closed_panel_expands_and_folds(self, fill):
        panels = fill(Panels(), in_progress=1, open=1, closed=1)
        controller = FocusController(panels)
        controller.initial()
        assert panels.closed.collapsed
        controller.focus(PanelFocus.CLOSED)
        assert not panels.closed.collapsed
        controller.focus(PanelFocus.OPEN)
        assert panels.closed.collapsed

    def test_revalidate_leaves_emptied_panel(self, fill):
        panels = fill(Panels(), in_progress=1, open=1)
        controller = FocusController(panels)
        controller.initial()
        fill(panels, in_progress=0)
        assert controller.revalidate() == PanelFocus.OPEN
        assert controller.panel is panels.open
