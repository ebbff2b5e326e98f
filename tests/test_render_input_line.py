"""Input-line geometry and narrow repaint tests."""

from __future__ import annotations

import unittest

from helpers import OutputSink

from tasksidebar import ansi
from tasksidebar.render.input_line import (
    content_width,
    cursor_cell,
    format_input_row,
    input_rows,
    input_wrap_width,
    paint_cursor,
    paint_input_text,
)
from tasksidebar.ui_theme import FOCUSED_THEME


class InputGeometryTests(unittest.TestCase):
    def test_widths_reserve_margins(self) -> None:
        self.assertEqual(content_width(50), 42)
        self.assertEqual(input_wrap_width(50), 40)
        self.assertEqual(input_wrap_width(5), 1)

    def test_cursor_cell_maps_offset_to_row_and_column(self) -> None:
        text = "x" * 90
        self.assertEqual(cursor_cell(12, text, 0, 40), (12, 9))
        self.assertEqual(cursor_cell(12, text, 39, 40), (12, 48))
        self.assertEqual(cursor_cell(12, text, 40, 40), (13, 9))
        self.assertEqual(cursor_cell(12, text, 85, 40), (14, 14))

    def test_wide_characters_take_two_columns(self) -> None:
        self.assertEqual(cursor_cell(7, "日本語", 3, 20), (7, 15))
        self.assertEqual(cursor_cell(7, "a日本", 2, 20), (7, 12))

    def test_wide_character_that_would_straddle_the_edge_wraps(self) -> None:
        self.assertEqual(input_rows("abc日x", 4), ["abc", "日x"])
        self.assertEqual(cursor_cell(1, "abc日x", 3, 4), (2, 9))
        self.assertEqual(input_rows("日本", 4), ["日本", ""])

    def test_wide_row_fits_the_terminal_width(self) -> None:
        row = format_input_row(FOCUSED_THEME, "  [ ] ", "日本語", input_wrap_width(30))
        visible = ansi.strip_ansi(row)
        self.assertEqual(ansi.display_width(visible), 28)

    def test_exactly_full_row_gets_trailing_row_for_cursor(self) -> None:
        self.assertEqual(input_rows("", 4), [""])
        self.assertEqual(input_rows("abc", 4), ["abc"])
        self.assertEqual(input_rows("abcd", 4), ["abcd", ""])
        self.assertEqual(input_rows("abcdefghi", 4), ["abcd", "efgh", "i"])


class InputPaintTests(unittest.TestCase):
    def test_paint_input_text_is_one_synchronized_write(self) -> None:
        sink = OutputSink()
        rows = paint_input_text(
            sink,
            FOCUSED_THEME,
            input_row=10,
            first_prefix="  [ ] ",
            text="hello",
            cursor=5,
            width=50,
            previous_rows=1,
        )
        self.assertEqual(rows, 1)
        self.assertEqual(len(sink.chunks), 1)
        out = sink.text
        self.assertTrue(out.startswith(ansi.BEGIN_SYNC))
        self.assertTrue(out.endswith(ansi.cursor_to(10, 14) + ansi.END_SYNC))
        self.assertIn("  [ ] hello", ansi.strip_ansi(out))

    def test_shrinking_buffer_blanks_leftover_rows(self) -> None:
        sink = OutputSink()
        rows = paint_input_text(
            sink,
            FOCUSED_THEME,
            input_row=10,
            first_prefix="  [ ] ",
            text="short",
            cursor=5,
            width=20,
            previous_rows=3,
        )
        self.assertEqual(rows, 1)
        self.assertIn(ansi.cursor_to(11, 1), sink.text)
        self.assertIn(ansi.cursor_to(12, 1), sink.text)
        self.assertNotIn(ansi.cursor_to(13, 1), sink.text)

    def test_paint_cursor_only_moves_cursor(self) -> None:
        sink = OutputSink()
        paint_cursor(sink, input_row=7, text="hello", cursor=3, width=50)
        self.assertEqual(sink.text, ansi.synchronized(ansi.cursor_to(7, 12)))


if __name__ == "__main__":
    unittest.main()
