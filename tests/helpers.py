"""Shared fakes for sidebar tests."""

from __future__ import annotations

from collections.abc import Iterable

from tasksidebar.panes.base import PaneBackend


class FakeBackend(PaneBackend):
    """Records sends and answers idle checks from a script."""

    name = "fake"

    def __init__(self, idle_answers: Iterable[bool | None] = (), *, send_ok: bool = True) -> None:
        self.sent: list[str] = []
        self.focus_calls = 0
        self.spawned: list[str] = []
        self.send_ok = send_ok
        self._idle_answers = list(idle_answers)

    def send_text(self, text: str) -> bool:
        self.sent.append(text)
        return self.send_ok

    def capture_recent_output(self, line_count: int) -> str | None:
        return None

    def is_idle_at_prompt(self) -> bool | None:
        if not self._idle_answers:
            return None
        return self._idle_answers.pop(0)

    def focus_other_pane(self) -> bool:
        self.focus_calls += 1
        return True

    def spawn_sidebar(self, command: str) -> str | None:
        self.spawned.append(command)
        return "%9"


class OutputSink:
    """Collects everything written to the terminal."""

    def __init__(self) -> None:
        self.chunks: list[str] = []

    def __call__(self, text: str) -> None:
        self.chunks.append(text)

    @property
    def text(self) -> str:
        return "".join(self.chunks)

    def clear(self) -> None:
        self.chunks.clear()
