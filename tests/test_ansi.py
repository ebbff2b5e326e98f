"""Tests for escape constants and text measurement helpers."""

from __future__ import annotations

import unittest

from tasksidebar import ansi


class AnsiHelpersTests(unittest.TestCase):
    def test_cursor_to_clamps_to_one_based_origin(self) -> None:
        self.assertEqual(ansi.cursor_to(3, 9), "\x1b[3;9H")
        self.assertEqual(ansi.cursor_to(0, -4), "\x1b[1;1H")

    def test_synchronized_wraps_payload_in_mode_2026(self) -> None:
        self.assertEqual(ansi.synchronized("x"), "\x1b[?2026hx\x1b[?2026l")

    def test_display_width_ignores_escapes_and_counts_wide_chars(self) -> None:
        self.assertEqual(ansi.display_width("\x1b[1mab\x1b[0m"), 2)
        self.assertEqual(ansi.display_width("日本"), 4)
        self.assertEqual(ansi.display_width("é"), 1)

    def test_clip_text_stops_before_wide_char_overflow(self) -> None:
        self.assertEqual(ansi.clip_text("abcdef", 3), "abc")
        self.assertEqual(ansi.clip_text("a日b", 2), "a")
        self.assertEqual(ansi.clip_text("abc", 0), "")

    def test_wrap_text_chunks_ascii_by_width(self) -> None:
        self.assertEqual(ansi.wrap_text("", 4), [""])
        self.assertEqual(ansi.wrap_text("abcd", 4), ["abcd"])
        self.assertEqual(ansi.wrap_text("abcdefghij", 4), ["abcd", "efgh", "ij"])

    def test_wrap_text_moves_straddling_wide_character_to_next_row(self) -> None:
        self.assertEqual(ansi.wrap_offsets("abc日x", 4), [0, 3])
        self.assertEqual(ansi.wrap_text("abc日x", 4), ["abc", "日x"])
        self.assertEqual(ansi.wrap_text("日本語", 4), ["日本", "語"])

    def test_word_wrap_breaks_on_spaces_and_splits_long_words(self) -> None:
        self.assertEqual(ansi.word_wrap("fix the login bug", 8), ["fix the", "login", "bug"])
        self.assertEqual(ansi.word_wrap("abcdefghij", 4), ["abcd", "efgh", "ij"])


if __name__ == "__main__":
    unittest.main()
