"""Presentation and interaction state, independent of the widget layer."""

from .app_state import Action, ActionKind, AppState, ViewMode
from .board import BoardColumn, BoardState, ClickResult, ClickTracker, categorize
from .filter_sort import FilterMode, SortMode
from .focus import FocusController, PanelFocus
from .hit_test import Hit, HitTester, Rect, Region
from .panel import PanelState
from .tree import CollapseSet, TreeNode, build_tree, count_descendants
from .views import Panels, recompute_views

__all__ = [
    "Action",
    "ActionKind",
    "AppState",
    "BoardColumn",
    "BoardState",
    "ClickResult",
    "ClickTracker",
    "CollapseSet",
    "FilterMode",
    "FocusController",
    "Hit",
    "HitTester",
    "PanelFocus",
    "PanelState",
    "Panels",
    "Rect",
    "Region",
    "SortMode",
    "TreeNode",
    "ViewMode",
    "build_tree",
    "categorize",
    "count_descendants",
    "recompute_views",
]
