"""Incremental terminal input decoding.

Turns raw stdin chunks into normalized key tokens. Escape sequences,
multi-byte UTF-8 characters, and bracketed-paste markers may be split across
reads; incomplete tails are buffered until more bytes arrive or ``flush`` is
called after the escape timeout.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

ESC_SEQUENCE_TIMEOUT_MS = 25
MAX_CSI_LENGTH = 32

_ESC = 0x1B
_PASTE_START = b"\x1b[200~"
_PASTE_END = b"\x1b[201~"

_CONTROL_KEYS: dict[int, str] = {
    0x01: "CTRL_A",
    0x03: "CTRL_C",
    0x05: "CTRL_E",
    0x08: "BACKSPACE",
    0x09: "TAB",
    0x0B: "CTRL_K",
    0x15: "CTRL_U",
    0x17: "CTRL_W",
    0x7F: "BACKSPACE",
}

_CSI_KEYS: dict[bytes, str] = {
    b"\x1b[A": "UP",
    b"\x1b[B": "DOWN",
    b"\x1b[C": "RIGHT",
    b"\x1b[D": "LEFT",
    b"\x1b[1;3C": "WORD_RIGHT",
    b"\x1b[1;3D": "WORD_LEFT",
    b"\x1b[1;9C": "WORD_RIGHT",
    b"\x1b[1;9D": "WORD_LEFT",
    b"\x1b[13;5u": "CTRL_ENTER",
    b"\x1b[I": "FOCUS_IN",
    b"\x1b[O": "FOCUS_OUT",
}

_SS3_KEYS: dict[int, str] = {
    ord("A"): "UP",
    ord("B"): "DOWN",
    ord("C"): "RIGHT",
    ord("D"): "LEFT",
}

_ALT_KEYS: dict[int, str] = {
    ord("b"): "WORD_LEFT",
    ord("B"): "WORD_LEFT",
    ord("f"): "WORD_RIGHT",
    ord("F"): "WORD_RIGHT",
    ord("\r"): "CTRL_ENTER",
    ord("\n"): "CTRL_ENTER",
}


@dataclass(frozen=True)
class KeyEvent:
    """One logical key. ``text`` carries the character for ``TEXT`` and the body for ``PASTE``."""

    key: str
    text: str = ""


def _utf8_length(lead: int) -> int:
    if 0xC2 <= lead <= 0xDF:
        return 2
    if 0xE0 <= lead <= 0xEF:
        return 3
    if 0xF0 <= lead <= 0xF4:
        return 4
    return 0


def _partial_marker_suffix(data: bytes, marker: bytes) -> int:
    """Return the length of the longest suffix of ``data`` that starts ``marker``."""
    for size in range(min(len(data), len(marker) - 1), 0, -1):
        if data.endswith(marker[:size]):
            return size
    return 0


def _normalize_paste(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").replace("\r\n", "\n").replace("\r", "\n")


class InputDecoder:
    """Stateful byte-to-event decoder shared by both sidebar modes."""

    def __init__(self) -> None:
        self._buffer = b""
        self._in_paste = False
        self._paste = bytearray()
        self._skip_lf = False

    @property
    def in_paste(self) -> bool:
        return self._in_paste

    def has_pending(self) -> bool:
        """Whether an incomplete sequence is waiting for more bytes or a flush."""
        return bool(self._buffer) and not self._in_paste

    def feed(self, chunk: bytes) -> list[KeyEvent]:
        self._buffer += chunk
        return self._drain()

    def flush(self) -> list[KeyEvent]:
        """Resolve buffered bytes once the escape timeout has elapsed.

        A lone ESC (or a run of them) becomes ``ESC`` events; any other
        incomplete sequence is dropped. An open paste is left untouched.
        """
        events: list[KeyEvent] = []
        while self._buffer and not self._in_paste:
            if self._buffer[0] == _ESC and (len(self._buffer) == 1 or self._buffer[1] == _ESC):
                events.append(KeyEvent("ESC"))
                self._buffer = self._buffer[1:]
                self._skip_lf = False
                events.extend(self._drain())
                continue
            logger.debug("dropping incomplete input {!r}", self._buffer)
            self._buffer = b""
        return events

    def _drain(self) -> list[KeyEvent]:
        events: list[KeyEvent] = []
        buf = self._buffer
        i = 0
        while i < len(buf):
            if self._in_paste:
                end = buf.find(_PASTE_END, i)
                if end == -1:
                    keep = _partial_marker_suffix(buf[i:], _PASTE_END)
                    self._paste.extend(buf[i : len(buf) - keep])
                    i = len(buf) - keep
                    break
                self._paste.extend(buf[i:end])
                i = end + len(_PASTE_END)
                events.append(KeyEvent("PASTE", _normalize_paste(bytes(self._paste))))
                self._paste = bytearray()
                self._in_paste = False
                continue

            byte = buf[i]
            if byte == _ESC:
                consumed, event = self._parse_escape(buf, i)
                if consumed == 0:
                    break
                i += consumed
                if event is not None:
                    events.append(event)
                continue

            skip_lf = self._skip_lf
            self._skip_lf = False
            if byte == 0x0D:
                events.append(KeyEvent("ENTER"))
                self._skip_lf = True
                i += 1
            elif byte == 0x0A:
                if not skip_lf:
                    events.append(KeyEvent("ENTER"))
                i += 1
            elif byte in _CONTROL_KEYS:
                events.append(KeyEvent(_CONTROL_KEYS[byte]))
                i += 1
            elif byte < 0x20:
                logger.debug("dropping control byte {:#04x}", byte)
                i += 1
            elif byte < 0x80:
                events.append(KeyEvent("TEXT", chr(byte)))
                i += 1
            else:
                size = _utf8_length(byte)
                if size == 0:
                    logger.debug("dropping stray byte {:#04x}", byte)
                    i += 1
                    continue
                if i + size > len(buf):
                    break
                try:
                    ch = buf[i : i + size].decode("utf-8")
                except UnicodeDecodeError:
                    logger.debug("dropping invalid utf-8 lead {:#04x}", byte)
                    i += 1
                    continue
                if ch.isprintable():
                    events.append(KeyEvent("TEXT", ch))
                i += size
        self._buffer = buf[i:]
        return events

    def _parse_escape(self, buf: bytes, start: int) -> tuple[int, KeyEvent | None]:
        """Decode the sequence at ``buf[start]``; ``(0, None)`` means incomplete."""
        remaining = len(buf) - start
        if remaining < 2:
            return 0, None
        self._skip_lf = False
        nxt = buf[start + 1]

        if nxt == ord("["):
            end = start + 2
            while end < len(buf):
                byte = buf[end]
                if 0x40 <= byte <= 0x7E:
                    break
                if not 0x20 <= byte <= 0x3F:
                    logger.debug("dropping malformed CSI {!r}", buf[start:end])
                    return end - start, None
                end += 1
            else:
                if remaining > MAX_CSI_LENGTH:
                    logger.debug("dropping oversized CSI {!r}", buf[start:])
                    return remaining, None
                return 0, None
            seq = buf[start : end + 1]
            if seq == _PASTE_START:
                self._in_paste = True
                self._paste = bytearray()
                return len(seq), None
            key = _CSI_KEYS.get(seq)
            if key is None:
                logger.debug("dropping unknown CSI {!r}", seq)
                return len(seq), None
            return len(seq), KeyEvent(key)

        if nxt == ord("O"):
            if remaining < 3:
                return 0, None
            key = _SS3_KEYS.get(buf[start + 2])
            return 3, KeyEvent(key) if key is not None else None

        if nxt == _ESC:
            # ESC ESC [ C / D is the word-jump encoding some terminals send for Alt+arrows.
            if remaining < 3:
                return 0, None
            if buf[start + 2] == ord("["):
                if remaining < 4:
                    return 0, None
                if buf[start + 3] == ord("C"):
                    return 4, KeyEvent("WORD_RIGHT")
                if buf[start + 3] == ord("D"):
                    return 4, KeyEvent("WORD_LEFT")
            return 1, KeyEvent("ESC")

        if nxt in _ALT_KEYS:
            if nxt == 0x0D:
                self._skip_lf = True
            return 2, KeyEvent(_ALT_KEYS[nxt])
        if 0x20 <= nxt <= 0x7F:
            logger.debug("dropping unbound alt sequence {!r}", buf[start : start + 2])
            return 2, None
        return 1, KeyEvent("ESC")
