"""Sidebar color palettes.

The sidebar paints on a light background; an unfocused terminal switches to
the dimmed palette so the user can tell at a glance which pane has input.
"""

from __future__ import annotations

from dataclasses import dataclass

from . import ansi


@dataclass(frozen=True)
class SidebarTheme:
    """Semantic ANSI palette used by the frame renderer."""

    name: str
    background: str
    text: str
    muted: str
    heading: str
    active: str
    hint: str
    context_ok: str
    context_warn: str
    context_critical: str
    reset: str = ansi.RESET


FOCUSED_THEME = SidebarTheme(
    name="focused",
    background=ansi.bg_rgb(255, 255, 255),
    text=ansi.BLACK,
    muted=ansi.GRAY,
    heading=ansi.BOLD,
    active=ansi.GREEN,
    hint=ansi.GRAY,
    context_ok=ansi.GREEN,
    context_warn=ansi.YELLOW,
    context_critical=ansi.RED,
)

DIMMED_THEME = SidebarTheme(
    name="dimmed",
    background=ansi.bg_rgb(245, 245, 245),
    text=ansi.BLACK,
    muted=ansi.BLACK,
    heading="",
    active=ansi.GREEN,
    hint=ansi.GRAY,
    context_ok=ansi.GREEN,
    context_warn=ansi.YELLOW,
    context_critical=ansi.RED,
)


def theme_for_focus(focused: bool) -> SidebarTheme:
    return FOCUSED_THEME if focused else DIMMED_THEME
