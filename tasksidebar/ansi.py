"""Escape-sequence constants and text measurement helpers.

Everything here is pure: CSI/DEC control strings for cursor, screen, and
mode toggles, plus width-aware clipping and wrapping used by the renderers.
"""

from __future__ import annotations

import re
import unicodedata

ESC = "\x1b"
CSI = f"{ESC}["

CLEAR_SCREEN = f"{CSI}2J"
CURSOR_HOME = f"{CSI}H"
CLEAR_TO_END = f"{CSI}K"
HIDE_CURSOR = f"{CSI}?25l"
SHOW_CURSOR = f"{CSI}?25h"

# DEC private mode 2026: terminal buffers output until the end marker.
BEGIN_SYNC = f"{CSI}?2026h"
END_SYNC = f"{CSI}?2026l"

ENTER_ALT_SCREEN = f"{CSI}?1049h"
EXIT_ALT_SCREEN = f"{CSI}?1049l"
ENABLE_FOCUS_REPORTING = f"{CSI}?1004h"
DISABLE_FOCUS_REPORTING = f"{CSI}?1004l"
ENABLE_BRACKETED_PASTE = f"{CSI}?2004h"
DISABLE_BRACKETED_PASTE = f"{CSI}?2004l"

RESET = f"{CSI}0m"
BOLD = f"{CSI}1m"
BLACK = f"{CSI}30m"
RED = f"{CSI}31m"
GREEN = f"{CSI}32m"
YELLOW = f"{CSI}33m"
GRAY = f"{CSI}90m"

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")


def cursor_to(row: int, col: int) -> str:
    """Return a CUP sequence for 1-based ``row``/``col`` (clamped to 1)."""
    return f"{CSI}{max(1, row)};{max(1, col)}H"


def sgr(*params: int | str) -> str:
    return f"{CSI}{';'.join(str(p) for p in params)}m"


def bg_rgb(red: int, green: int, blue: int) -> str:
    return sgr(48, 2, red, green, blue)


def synchronized(payload: str) -> str:
    """Bracket ``payload`` so supporting terminals apply it as one frame."""
    return f"{BEGIN_SYNC}{payload}{END_SYNC}"


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def char_display_width(ch: str) -> int:
    """Return terminal column width for one character.

    Combining marks consume no columns and East Asian wide/fullwidth
    characters consume two.
    """
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    return sum(char_display_width(ch) for ch in strip_ansi(text))


def clip_text(text: str, max_cols: int) -> str:
    """Trim plain ``text`` to at most ``max_cols`` display columns."""
    if max_cols <= 0 or not text:
        return ""
    out: list[str] = []
    col = 0
    for ch in text:
        w = char_display_width(ch)
        if col + w > max_cols:
            break
        out.append(ch)
        col += w
    return "".join(out)


def wrap_offsets(text: str, width: int) -> list[int]:
    """Return the start offset of each row when ``text`` fills ``width`` columns.

    A character that does not fit in what is left of a row starts the next
    one. Always returns at least ``[0]``.
    """
    width = max(1, width)
    starts = [0]
    col = 0
    for idx, ch in enumerate(text):
        w = char_display_width(ch)
        if col and col + w > width:
            starts.append(idx)
            col = 0
        col += w
    return starts


def wrap_text(text: str, width: int) -> list[str]:
    """Split ``text`` into rows of at most ``width`` display columns.

    Rows break between characters, never on words, so a wide character that
    would straddle the edge moves to the next row. Always returns at least
    one (possibly empty) line.
    """
    starts = wrap_offsets(text, width)
    ends = starts[1:] + [len(text)]
    return [text[start:end] for start, end in zip(starts, ends)]


def word_wrap(text: str, width: int) -> list[str]:
    """Wrap ``text`` on spaces, hard-splitting words longer than ``width``."""
    width = max(1, width)
    lines: list[str] = []
    current = ""
    for word in text.split(" "):
        while len(word) > width:
            if current:
                lines.append(current)
                current = ""
            lines.append(word[:width])
            word = word[width:]
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= width:
            current = candidate
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines
