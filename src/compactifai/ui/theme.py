"""Rich theme for the compactifai CLI."""

from __future__ import annotations

from rich.theme import Theme

THEME = Theme(
    {
        "accent": "bright_blue",
        "border": "bright_black",
        "step": "bold bright_blue",
        "subtitle": "dim",
        "info": "dim",
        "success": "green3",
        "error": "bold red3",
        "label": "dim",
        "value": "white",
        "model": "cyan",
    }
)
