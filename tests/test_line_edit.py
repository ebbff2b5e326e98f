"""Tests for input-line buffer operations and the key binding table."""

from __future__ import annotations

import unittest

from tasksidebar.input.decoder import KeyEvent
from tasksidebar.input.key_registry import KeyBinding, KeyBindingTable, event_token
from tasksidebar.input.line_edit import EditBuffer, next_word_start, previous_word_start


class WordBoundaryTests(unittest.TestCase):
    def test_previous_word_start_skips_spaces_then_word(self) -> None:
        self.assertEqual(previous_word_start("fix the bug", 11), 8)
        self.assertEqual(previous_word_start("fix the bug", 8), 4)
        self.assertEqual(previous_word_start("fix the  ", 9), 4)
        self.assertEqual(previous_word_start("fix", 0), 0)

    def test_next_word_start_skips_word_then_spaces(self) -> None:
        self.assertEqual(next_word_start("fix the bug", 0), 4)
        self.assertEqual(next_word_start("fix the bug", 5), 8)
        self.assertEqual(next_word_start("fix", 3), 3)


class EditBufferTests(unittest.TestCase):
    def test_cursor_is_clamped_on_construction(self) -> None:
        self.assertEqual(EditBuffer("abc", 10).cursor, 3)
        self.assertEqual(EditBuffer("abc", -2).cursor, 0)

    def test_insert_and_backspace_track_cursor(self) -> None:
        buffer = EditBuffer("ac", 1).insert("b")
        self.assertEqual((buffer.text, buffer.cursor), ("abc", 2))
        buffer = buffer.backspace()
        self.assertEqual((buffer.text, buffer.cursor), ("ac", 1))
        self.assertEqual(EditBuffer("ac", 0).backspace(), EditBuffer("ac", 0))

    def test_left_right_stop_at_bounds(self) -> None:
        self.assertEqual(EditBuffer("ab", 0).move_left().cursor, 0)
        self.assertEqual(EditBuffer("ab", 2).move_right().cursor, 2)

    def test_visual_line_start_and_end_use_wrap_width(self) -> None:
        buffer = EditBuffer("abcdefghij", 6)
        self.assertEqual(buffer.line_start(4).cursor, 4)
        self.assertEqual(buffer.line_end(4).cursor, 8)
        self.assertEqual(EditBuffer("abcdefghij", 9).line_end(4).cursor, 10)

    def test_up_is_noop_on_first_row_and_down_clamps_to_end(self) -> None:
        self.assertEqual(EditBuffer("abcdefghij", 3).move_up(4).cursor, 3)
        self.assertEqual(EditBuffer("abcdefghij", 6).move_up(4).cursor, 2)
        self.assertEqual(EditBuffer("abcdefghij", 3).move_down(4).cursor, 7)
        self.assertEqual(EditBuffer("abcdefghij", 8).move_down(4).cursor, 10)

    def test_visual_rows_follow_display_columns(self) -> None:
        text = "日本語abcd"
        self.assertEqual(EditBuffer(text, 4).line_start(4).cursor, 2)
        self.assertEqual(EditBuffer(text, 4).line_end(4).cursor, 5)
        self.assertEqual(EditBuffer(text, 3).move_up(4).cursor, 1)
        self.assertEqual(EditBuffer(text, 6).move_up(4).cursor, 2)
        self.assertEqual(EditBuffer(text, 1).move_down(4).cursor, 3)

    def test_kill_operations(self) -> None:
        self.assertEqual(EditBuffer("hello world", 6).kill_to_start(), EditBuffer("world", 0))
        self.assertEqual(EditBuffer("hello world", 5).kill_to_end(), EditBuffer("hello", 5))
        self.assertEqual(EditBuffer("hello world", 11).kill_word(), EditBuffer("hello ", 6))

    def test_word_motion(self) -> None:
        self.assertEqual(EditBuffer("fix the bug", 11).word_left().cursor, 8)
        self.assertEqual(EditBuffer("fix the bug", 0).word_right().cursor, 4)


class KeyBindingTableTests(unittest.TestCase):
    def test_text_events_bind_by_character(self) -> None:
        self.assertEqual(event_token(KeyEvent("TEXT", "a")), "a")
        self.assertEqual(event_token(KeyEvent("UP")), "UP")

    def test_dispatch_returns_none_when_unbound(self) -> None:
        calls: list[str] = []
        table = KeyBindingTable().bind(KeyBinding(("UP", "k"), lambda event: calls.append(event.key) or False))

        self.assertTrue(table.bound(KeyEvent("TEXT", "k")))
        self.assertFalse(table.dispatch(KeyEvent("UP")))
        self.assertIsNone(table.dispatch(KeyEvent("DOWN")))
        self.assertEqual(calls, ["UP"])


if __name__ == "__main__":
    unittest.main()
