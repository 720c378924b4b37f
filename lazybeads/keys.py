"""Default key bindings.

Keys are Textual key names. Printable keys that Textual names differently
(``?`` is ``question_mark``) are listed under both spellings so the table
can be matched against either ``event.key`` or ``event.character``.
"""

from __future__ import annotations

KEYMAP: dict[str, tuple[str, ...]] = {
    # Navigation
    "up": ("k", "up"),
    "down": ("j", "down"),
    "top": ("g", "home"),
    "bottom": ("G", "end"),
    "page_up": ("ctrl+u", "pageup"),
    "page_down": ("ctrl+d", "pagedown"),
    "next_panel": ("tab",),
    "prev_panel": ("shift+tab",),
    "prev_column": ("h", "left"),
    "next_column": ("l", "right"),
    "toggle_collapse": ("space",),
    # Actions
    "select": ("enter",),
    "add": ("a", "c"),
    "delete": ("x",),
    "refresh": ("R",),
    "edit_status": ("s",),
    "edit_priority": ("p",),
    "edit_title": ("t",),
    "edit_type": ("T",),
    "edit_description": ("d", "e"),
    "add_comment": ("m",),
    "add_blocker": ("B",),
    "remove_blocker": ("U",),
    "copy_id": ("y",),
    # Filtering
    "search": ("slash", "/"),
    "filter_open": ("o",),
    "filter_closed": ("C",),
    "filter_ready": ("r",),
    "filter_all": ("A",),
    "sort": ("S",),
    # Views
    "board": ("b",),
    "help": ("question_mark", "?"),
    "cancel": ("escape",),
    "quit": ("q", "ctrl+c"),
}

# Issue actions that stay available while the detail modal is open
DETAIL_ACTIONS = (
    "edit_title",
    "edit_status",
    "edit_priority",
    "edit_type",
    "edit_description",
    "add_comment",
    "add_blocker",
    "remove_blocker",
)

HELP_SECTIONS: list[tuple[str, list[tuple[str, str]]]] = [
    ("Navigation", [
        ("j/k ↑/↓", "Move cursor"),
        ("g/G", "Top / bottom"),
        ("ctrl+u/ctrl+d", "Page up / down"),
        ("tab/shift+tab", "Next / previous panel"),
        ("h/l ←/→", "Previous / next board column"),
        ("space", "Collapse / expand children"),
    ]),
    ("Issues", [
        ("enter", "Show details"),
        ("a/c", "New issue"),
        ("t", "Edit title"),
        ("s", "Change status"),
        ("p", "Change priority"),
        ("T", "Change type"),
        ("d/e", "Edit description in $EDITOR"),
        ("m", "Add comment"),
        ("B/U", "Add / remove blocker"),
        ("x", "Delete"),
        ("y", "Copy ID"),
        ("R", "Refresh"),
    ]),
    ("Filter & sort", [
        ("/", "Search title and ID"),
        ("o", "Open only"),
        ("C", "Closed only"),
        ("r", "Ready only"),
        ("A", "All issues"),
        ("S", "Cycle sort mode"),
    ]),
    ("Views", [
        ("b", "Toggle board"),
        ("?", "This help"),
        ("esc", "Back"),
        ("q", "Quit"),
    ]),
]


def matches(key: str, action: str, keymap: dict[str, tuple[str, ...]] = KEYMAP) -> bool:
    """Return True if key is bound to action."""
    return key in keymap.get(action, ())


def action_for(key: str, actions: tuple[str, ...] | None = None,
               keymap: dict[str, tuple[str, ...]] = KEYMAP) -> str | None:
    """Return the first action bound to key, optionally restricted to actions."""
    for action in actions or tuple(keymap):
        if key in keymap.get(action, ()):
            return action
    return None
