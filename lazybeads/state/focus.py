"""Which list panel receives keyboard input."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .views import Panels


class PanelFocus(Enum):
    IN_PROGRESS = "in_progress"
    OPEN = "open"
    CLOSED = "closed"


FOCUS_ORDER = [PanelFocus.IN_PROGRESS, PanelFocus.OPEN, PanelFocus.CLOSED]


class FocusController:
    """Owns the focused panel and runs panel focus side effects.

    Panels with no items can't take focus. The skip list is recomputed on
    every call since it depends on the current data.
    """

    def __init__(self, panels: "Panels") -> None:
        self.panels = panels
        self.current = PanelFocus.IN_PROGRESS

    def _non_empty(self, target: PanelFocus) -> bool:
        return len(self.panels[target]) > 0

    def candidates(self) -> list[PanelFocus]:
        return [p for p in FOCUS_ORDER if self._non_empty(p)]

    def focus(self, target: PanelFocus) -> None:
        """Move focus to target. Leaving the closed panel folds it."""
        for name in FOCUS_ORDER:
            self.panels[name].set_focus(name == target)
        self.current = target

    def initial(self) -> PanelFocus:
        """Focus the first non-empty panel, defaulting to in-progress."""
        candidates = self.candidates()
        self.focus(candidates[0] if candidates else PanelFocus.IN_PROGRESS)
        return self.current

    def cycle(self, direction: int) -> PanelFocus:
        """Focus the next (direction 1) or previous (-1) non-empty panel, wrapping."""
        start = FOCUS_ORDER.index(self.current)
        step = 1 if direction >= 0 else -1
        for i in range(1, len(FOCUS_ORDER) + 1):
            target = FOCUS_ORDER[(start + step * i) % len(FOCUS_ORDER)]
            if self._non_empty(target):
                self.focus(target)
                break
        return self.current

    def revalidate(self) -> PanelFocus:
        """Move focus off the current panel if it has become empty."""
        if not self._non_empty(self.current):
            candidates = self.candidates()
            if candidates:
                self.focus(candidates[0])
                return self.current
        self.focus(self.current)
        return self.current

    @property
    def panel(self):
        """The focused PanelState."""
        return self.panels[self.current]
