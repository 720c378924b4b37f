"""Widgets for lazybeads."""

from .board_panel import BoardColumnWidget, BoardView
from .detail_modal import ConfirmModal, CreateModal, DetailModal, HelpModal, InputModal, SelectModal
from .filter_sort_bar import FilterSortBar
from .header import LazyBeadsHeader, StatusBar
from .issue_panel import IssuePanel, PanelStack

__all__ = [
    "BoardColumnWidget",
    "BoardView",
    "ConfirmModal",
    "CreateModal",
    "DetailModal",
    "FilterSortBar",
    "HelpModal",
    "InputModal",
    "IssuePanel",
    "LazyBeadsHeader",
    "PanelStack",
    "SelectModal",
    "StatusBar",
]
