"""Edit-buffer operations for the add/edit input line.

Every operation returns a new ``EditBuffer`` whose cursor is clamped into
``0..len(text)``. Visual-line operations take the wrap width used by the
input renderer so that Ctrl-A/E and Up/Down agree with what is on screen.
Rows are measured in display columns, so a wide character takes two.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass

from .. import ansi


def _clamp(cursor: int, text: str) -> int:
    return max(0, min(cursor, len(text)))


def row_starts(text: str, wrap_width: int) -> list[int]:
    """Start offset of every visual row of the input line.

    A buffer whose last row is full gets an extra empty row at ``len(text)``
    so the end-of-buffer cursor always has a cell to sit on.
    """
    starts = ansi.wrap_offsets(text, wrap_width)
    if text and ansi.display_width(text[starts[-1] :]) >= max(1, wrap_width):
        starts.append(len(text))
    return starts


def cursor_row_col(text: str, cursor: int, wrap_width: int) -> tuple[int, int]:
    """Return the 0-based visual ``(row, column)`` of ``cursor``."""
    cursor = _clamp(cursor, text)
    starts = row_starts(text, wrap_width)
    row = bisect_right(starts, cursor) - 1
    return row, ansi.display_width(text[starts[row] : cursor])


def _offset_at_column(text: str, start: int, limit: int, col: int) -> int:
    pos = start
    used = 0
    while pos < limit:
        w = ansi.char_display_width(text[pos])
        if used + w > col:
            break
        used += w
        pos += 1
    return pos


def previous_word_start(text: str, cursor: int) -> int:
    """Skip spaces left of ``cursor``, then the word before them."""
    pos = _clamp(cursor, text)
    while pos > 0 and text[pos - 1] == " ":
        pos -= 1
    while pos > 0 and text[pos - 1] != " ":
        pos -= 1
    return pos


def next_word_start(text: str, cursor: int) -> int:
    """Skip the word under ``cursor``, then the spaces after it."""
    pos = _clamp(cursor, text)
    while pos < len(text) and text[pos] != " ":
        pos += 1
    while pos < len(text) and text[pos] == " ":
        pos += 1
    return pos


@dataclass(frozen=True)
class EditBuffer:
    text: str = ""
    cursor: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "cursor", _clamp(self.cursor, self.text))

    @classmethod
    def at_end(cls, text: str) -> EditBuffer:
        return cls(text, len(text))

    def insert(self, value: str) -> EditBuffer:
        if not value:
            return self
        return EditBuffer(self.text[: self.cursor] + value + self.text[self.cursor :], self.cursor + len(value))

    def backspace(self) -> EditBuffer:
        if self.cursor == 0:
            return self
        return EditBuffer(self.text[: self.cursor - 1] + self.text[self.cursor :], self.cursor - 1)

    def move_left(self) -> EditBuffer:
        return EditBuffer(self.text, self.cursor - 1)

    def move_right(self) -> EditBuffer:
        return EditBuffer(self.text, self.cursor + 1)

    def word_left(self) -> EditBuffer:
        return EditBuffer(self.text, previous_word_start(self.text, self.cursor))

    def word_right(self) -> EditBuffer:
        return EditBuffer(self.text, next_word_start(self.text, self.cursor))

    def line_start(self, wrap_width: int) -> EditBuffer:
        starts = row_starts(self.text, wrap_width)
        row, _col = cursor_row_col(self.text, self.cursor, wrap_width)
        return EditBuffer(self.text, starts[row])

    def line_end(self, wrap_width: int) -> EditBuffer:
        starts = row_starts(self.text, wrap_width)
        row, _col = cursor_row_col(self.text, self.cursor, wrap_width)
        end = starts[row + 1] if row + 1 < len(starts) else len(self.text)
        return EditBuffer(self.text, end)

    def move_up(self, wrap_width: int) -> EditBuffer:
        row, col = cursor_row_col(self.text, self.cursor, wrap_width)
        if row == 0:
            return self
        starts = row_starts(self.text, wrap_width)
        return EditBuffer(self.text, _offset_at_column(self.text, starts[row - 1], starts[row] - 1, col))

    def move_down(self, wrap_width: int) -> EditBuffer:
        """Move one visual row down, or to the end when no full row remains."""
        starts = row_starts(self.text, wrap_width)
        row, col = cursor_row_col(self.text, self.cursor, wrap_width)
        if row + 1 >= len(starts):
            return EditBuffer(self.text, len(self.text))
        below = row + 1
        limit = starts[below + 1] - 1 if below + 1 < len(starts) else len(self.text)
        return EditBuffer(self.text, _offset_at_column(self.text, starts[below], limit, col))

    def kill_to_start(self) -> EditBuffer:
        return EditBuffer(self.text[self.cursor :], 0)

    def kill_to_end(self) -> EditBuffer:
        return EditBuffer(self.text[: self.cursor], self.cursor)

    def kill_word(self) -> EditBuffer:
        start = previous_word_start(self.text, self.cursor)
        return EditBuffer(self.text[:start] + self.text[self.cursor :], start)
