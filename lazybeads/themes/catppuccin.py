"""Catppuccin Mocha color scheme for lazybeads."""

# Catppuccin Mocha Palette
CATPPUCCIN = {
    "rosewater": "#f5e0dc",
    "mauve": "#cba6f7",
    "red": "#f38ba8",
    "peach": "#fab387",
    "yellow": "#f9e2af",
    "green": "#a6e3a1",
    "teal": "#94e2d5",
    "sky": "#89dceb",
    "blue": "#89b4fa",
    "lavender": "#b4befe",
    # Surface & background
    "text": "#cdd6f4",
    "subtext0": "#a6adc8",
    "overlay1": "#7f849c",
    "overlay0": "#6c7086",
    "surface2": "#585b70",
    "surface1": "#45475a",
    "surface0": "#313244",
    "base": "#1e1e2e",
    "mantle": "#181825",
    "crust": "#11111b",
}

COLORS = {
    # Issue status
    "open": CATPPUCCIN["blue"],
    "in_progress": CATPPUCCIN["peach"],
    "closed": CATPPUCCIN["overlay1"],
    # Board columns
    "blocked": CATPPUCCIN["red"],
    "ready": CATPPUCCIN["green"],
    "done": CATPPUCCIN["overlay1"],
    # Priority P0..P4
    "p0": CATPPUCCIN["red"],
    "p1": CATPPUCCIN["peach"],
    "p2": CATPPUCCIN["yellow"],
    "p3": CATPPUCCIN["blue"],
    "p4": CATPPUCCIN["overlay1"],
    # UI elements
    "header_bg": CATPPUCCIN["mantle"],
    "panel_bg": CATPPUCCIN["base"],
    "border": CATPPUCCIN["surface1"],
    "border_focus": CATPPUCCIN["mauve"],
    "text": CATPPUCCIN["text"],
    "muted": CATPPUCCIN["overlay1"],
    "accent": CATPPUCCIN["mauve"],
    "selected": CATPPUCCIN["surface1"],
    "error": CATPPUCCIN["red"],
    "warn": CATPPUCCIN["yellow"],
}


def priority_color(priority: int) -> str:
    return COLORS.get(f"p{priority}", COLORS["muted"])


# Textual CSS theme
CATPPUCCIN_THEME = f"""
Screen {{
    background: {CATPPUCCIN["base"]};
}}

.panel {{
    background: {CATPPUCCIN["base"]};
    border: round {CATPPUCCIN["surface1"]};
    border-title-color: {CATPPUCCIN["subtext0"]};
    border-subtitle-color: {CATPPUCCIN["overlay1"]};
}}

.panel.focused {{
    border: round {CATPPUCCIN["mauve"]};
    border-title-color: {CATPPUCCIN["mauve"]};
    border-title-style: bold;
}}

.panel.folded {{
    border: none;
    height: 1;
    padding: 0 1;
    color: {CATPPUCCIN["overlay1"]};
}}

OptionList {{
    background: {CATPPUCCIN["mantle"]};
    padding: 0;
}}

OptionList > .option-list--option {{
    padding: 0 1;
}}

OptionList > .option-list--option-highlighted {{
    background: {CATPPUCCIN["surface1"]};
}}

Input {{
    background: {CATPPUCCIN["surface0"]};
    color: {CATPPUCCIN["text"]};
}}

Toast {{
    background: {CATPPUCCIN["mantle"]};
}}
"""
