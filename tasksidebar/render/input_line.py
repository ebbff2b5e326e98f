"""Narrow repaint path for the add/edit input line.

Keystrokes while editing only touch the wrapped input rows and the cursor,
so the rest of the frame stays exactly as the last full paint left it.
"""

from __future__ import annotations

from collections.abc import Callable

from .. import ansi
from ..input.line_edit import cursor_row_col
from ..ui_theme import SidebarTheme

LEFT_MARGIN = 2
PREFIX_WIDTH = 6
CONTENT_MARGIN = 8
INPUT_MARGIN = 10
CONTINUATION_PREFIX = " " * PREFIX_WIDTH


def content_width(width: int) -> int:
    return max(1, width - CONTENT_MARGIN)


def input_wrap_width(width: int) -> int:
    return max(1, width - INPUT_MARGIN)


def input_rows(text: str, wrap_width: int) -> list[str]:
    """Split ``text`` into the visual rows the edit buffer moves across.

    A buffer that exactly fills its last row gets an empty trailing row so the
    end-of-buffer cursor always has a row to sit on.
    """
    rows = ansi.wrap_text(text, wrap_width)
    if text and ansi.display_width(rows[-1]) >= max(1, wrap_width):
        rows.append("")
    return rows


def cursor_cell(input_row: int, text: str, cursor: int, wrap_width: int) -> tuple[int, int]:
    """Return the 1-based screen ``(row, col)`` for a logical cursor offset."""
    line, col = cursor_row_col(text, cursor, wrap_width)
    return input_row + line, LEFT_MARGIN + PREFIX_WIDTH + col + 1


def format_input_row(theme: SidebarTheme, prefix: str, chunk: str, wrap_width: int) -> str:
    padding = " " * max(0, wrap_width - ansi.display_width(chunk))
    return (
        f"{theme.background}{' ' * LEFT_MARGIN}{theme.text}{prefix}{chunk}{padding}"
        f"{theme.reset}{theme.background}{ansi.CLEAR_TO_END}{theme.reset}"
    )


def format_input_rows(theme: SidebarTheme, first_prefix: str, text: str, wrap_width: int) -> list[str]:
    return [
        format_input_row(theme, first_prefix if idx == 0 else CONTINUATION_PREFIX, chunk, wrap_width)
        for idx, chunk in enumerate(input_rows(text, wrap_width))
    ]


def paint_input_text(
    write: Callable[[str], None],
    theme: SidebarTheme,
    *,
    input_row: int,
    first_prefix: str,
    text: str,
    cursor: int,
    width: int,
    previous_rows: int,
) -> int:
    """Repaint the wrapped input rows and place the cursor; return rows painted.

    Rows left over from a previously longer buffer are blanked.
    """
    wrap_width = input_wrap_width(width)
    rows = format_input_rows(theme, first_prefix, text, wrap_width)
    out: list[str] = []
    for idx, row in enumerate(rows):
        out.append(ansi.cursor_to(input_row + idx, 1))
        out.append(row)
    blank = f"{theme.background}{' ' * max(1, width)}{theme.reset}"
    for idx in range(len(rows), previous_rows):
        out.append(ansi.cursor_to(input_row + idx, 1))
        out.append(blank)
    row, col = cursor_cell(input_row, text, cursor, wrap_width)
    out.append(ansi.cursor_to(row, col))
    write(ansi.synchronized("".join(out)))
    return len(rows)


def paint_cursor(write: Callable[[str], None], *, input_row: int, text: str, cursor: int, width: int) -> None:
    row, col = cursor_cell(input_row, text, cursor, input_wrap_width(width))
    write(ansi.synchronized(ansi.cursor_to(row, col)))
