"""Terminal control helpers for the sidebar session.

Owns raw-mode lifecycle, alternate-screen switching, focus reporting, and
bracketed paste. All screen output funnels through ``write``.
"""

from __future__ import annotations

import contextlib
import os
import termios
import tty

from . import ansi
from .errors import TerminalInitError

ENTER_SEQUENCE = (
    ansi.ENTER_ALT_SCREEN
    + ansi.ENABLE_FOCUS_REPORTING
    + ansi.ENABLE_BRACKETED_PASTE
    + ansi.HIDE_CURSOR
    + ansi.CLEAR_SCREEN
    + ansi.CURSOR_HOME
)
EXIT_SEQUENCE = (
    ansi.DISABLE_FOCUS_REPORTING
    + ansi.DISABLE_BRACKETED_PASTE
    + ansi.SHOW_CURSOR
    + ansi.RESET
    + ansi.EXIT_ALT_SCREEN
)


class TerminalController:
    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        try:
            self._saved_tty_state = termios.tcgetattr(stdin_fd)
        except (termios.error, OSError) as exc:
            raise TerminalInitError(str(exc)) from exc
        self._tui_enabled = False

    def write(self, text: str) -> None:
        data = text.encode("utf-8", errors="replace")
        while data:
            written = os.write(self.stdout_fd, data)
            data = data[written:]

    def enable_tui_mode(self) -> None:
        try:
            tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        except (termios.error, OSError) as exc:
            raise TerminalInitError(str(exc)) from exc
        self.write(ENTER_SEQUENCE)
        self._tui_enabled = True

    def disable_tui_mode(self) -> None:
        if not self._tui_enabled:
            return
        self._tui_enabled = False
        self.write(EXIT_SEQUENCE)
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    @contextlib.contextmanager
    def raw_mode(self):
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()
