"""Regression tests for raw-byte decoding.

Covers escape timing, split sequences, UTF-8 reassembly, CRLF folding, and
bracketed paste. These protect interactive input handling in raw mode.
"""

from __future__ import annotations

import unittest

from tasksidebar.input.decoder import InputDecoder, KeyEvent


def _keys(events: list[KeyEvent]) -> list[str]:
    return [event.key for event in events]


class InputDecoderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.decoder = InputDecoder()

    def test_printable_ascii_becomes_text_events(self) -> None:
        events = self.decoder.feed(b"ab")
        self.assertEqual(events, [KeyEvent("TEXT", "a"), KeyEvent("TEXT", "b")])

    def test_control_bytes_map_to_named_keys(self) -> None:
        events = self.decoder.feed(b"\x01\x05\x0b\x15\x17\x7f\x08\x09\x03")
        self.assertEqual(
            _keys(events),
            ["CTRL_A", "CTRL_E", "CTRL_K", "CTRL_U", "CTRL_W", "BACKSPACE", "BACKSPACE", "TAB", "CTRL_C"],
        )

    def test_crlf_is_a_single_enter(self) -> None:
        self.assertEqual(_keys(self.decoder.feed(b"\r\n")), ["ENTER"])
        self.assertEqual(_keys(self.decoder.feed(b"\r")), ["ENTER"])
        self.assertEqual(_keys(self.decoder.feed(b"\n")), [])
        self.assertEqual(_keys(self.decoder.feed(b"\n")), ["ENTER"])

    def test_lone_escape_waits_for_flush(self) -> None:
        self.assertEqual(self.decoder.feed(b"\x1b"), [])
        self.assertTrue(self.decoder.has_pending())
        self.assertEqual(_keys(self.decoder.flush()), ["ESC"])
        self.assertFalse(self.decoder.has_pending())

    def test_arrow_sequence_split_across_reads(self) -> None:
        self.assertEqual(self.decoder.feed(b"\x1b["), [])
        self.assertEqual(_keys(self.decoder.feed(b"A")), ["UP"])

    def test_ss3_and_csi_arrows_agree(self) -> None:
        self.assertEqual(_keys(self.decoder.feed(b"\x1bOB\x1b[B")), ["DOWN", "DOWN"])

    def test_word_motion_encodings(self) -> None:
        events = self.decoder.feed(b"\x1b[1;3D\x1b[1;9C\x1bb\x1bf\x1b\x1b[D\x1b\x1b[C")
        self.assertEqual(
            _keys(events),
            ["WORD_LEFT", "WORD_RIGHT", "WORD_LEFT", "WORD_RIGHT", "WORD_LEFT", "WORD_RIGHT"],
        )

    def test_ctrl_enter_encodings(self) -> None:
        self.assertEqual(_keys(self.decoder.feed(b"\x1b[13;5u")), ["CTRL_ENTER"])
        self.assertEqual(_keys(self.decoder.feed(b"\x1b\r\n")), ["CTRL_ENTER"])

    def test_focus_reports(self) -> None:
        self.assertEqual(_keys(self.decoder.feed(b"\x1b[I\x1b[O")), ["FOCUS_IN", "FOCUS_OUT"])

    def test_unknown_csi_is_dropped_without_leaking_bytes(self) -> None:
        events = self.decoder.feed(b"\x1b[5~x")
        self.assertEqual(events, [KeyEvent("TEXT", "x")])

    def test_unbound_alt_letter_is_dropped(self) -> None:
        self.assertEqual(self.decoder.feed(b"\x1bzq"), [KeyEvent("TEXT", "q")])

    def test_escape_followed_by_control_byte_is_escape(self) -> None:
        self.assertEqual(_keys(self.decoder.feed(b"\x1b\x01")), ["ESC", "CTRL_A"])

    def test_utf8_character_split_across_reads(self) -> None:
        encoded = "é".encode("utf-8")
        self.assertEqual(self.decoder.feed(encoded[:1]), [])
        self.assertEqual(self.decoder.feed(encoded[1:]), [KeyEvent("TEXT", "é")])

    def test_bracketed_paste_is_one_event_with_normalized_newlines(self) -> None:
        events = self.decoder.feed(b"\x1b[200~one\r\ntwo\rthree\x1b[201~")
        self.assertEqual(events, [KeyEvent("PASTE", "one\ntwo\nthree")])

    def test_paste_end_marker_split_across_reads(self) -> None:
        self.assertEqual(self.decoder.feed(b"\x1b[200~abc\x1b[20"), [])
        self.assertTrue(self.decoder.in_paste)
        self.assertFalse(self.decoder.has_pending())
        self.assertEqual(self.decoder.feed(b"1~"), [KeyEvent("PASTE", "abc")])
        self.assertFalse(self.decoder.in_paste)

    def test_paste_start_marker_split_across_reads(self) -> None:
        self.assertEqual(self.decoder.feed(b"\x1b[20"), [])
        self.assertTrue(self.decoder.has_pending())
        self.assertEqual(self.decoder.feed(b"0~a\nb\x1b[201~"), [KeyEvent("PASTE", "a\nb")])
        self.assertFalse(self.decoder.in_paste)

    def test_paste_content_is_not_decoded_as_keys(self) -> None:
        events = self.decoder.feed(b"\x1b[200~\x1b[A\x03\x1b[201~z")
        self.assertEqual(events, [KeyEvent("PASTE", "\x1b[A\x03"), KeyEvent("TEXT", "z")])

    def test_flush_drops_incomplete_csi(self) -> None:
        self.decoder.feed(b"\x1b[1;")
        self.assertEqual(self.decoder.flush(), [])
        self.assertFalse(self.decoder.has_pending())

    def test_double_escape_flushes_as_two_escapes(self) -> None:
        self.assertEqual(self.decoder.feed(b"\x1b\x1b"), [])
        self.assertEqual(_keys(self.decoder.flush()), ["ESC", "ESC"])


if __name__ == "__main__":
    unittest.main()
