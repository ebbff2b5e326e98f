"""Full-frame and input-line renderers."""

from __future__ import annotations

from .frame import Frame, build_frame, filler_rows, footer_rows, paint_frame
from .input_line import cursor_cell, input_wrap_width, paint_cursor, paint_input_text

__all__ = [
    "Frame",
    "build_frame",
    "cursor_cell",
    "filler_rows",
    "footer_rows",
    "input_wrap_width",
    "paint_cursor",
    "paint_frame",
    "paint_input_text",
]
