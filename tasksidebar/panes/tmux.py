"""tmux pane backend.

The sidebar pane id is remembered in a small persisted record so that
``spawn`` can reuse the same split across restarts; the assistant pane is the
first pane in the window that is not the sidebar.
"""

from __future__ import annotations

import time
from collections.abc import Mapping

from loguru import logger

from ..store import PaneIdRecord
from .base import DEFAULT_TIMEOUT_SECONDS, PaneBackend, run_command

SIDEBAR_WIDTH_COLUMNS = 50
PASTE_BUFFER_NAME = "tasksidebar"
REUSE_SETTLE_SECONDS = 0.15


def is_in_tmux(env: Mapping[str, str]) -> bool:
    return bool(env.get("TMUX"))


class TmuxBackend(PaneBackend):
    name = "tmux"

    def __init__(
        self,
        record: PaneIdRecord,
        env: Mapping[str, str],
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.record = record
        self.env = env
        self.timeout_seconds = timeout_seconds

    def _tmux(self, *args: str, input_text: str | None = None) -> str | None:
        return run_command(["tmux", *args], self.timeout_seconds, input_text=input_text)

    def sidebar_pane_id(self) -> str | None:
        """Own pane when running inside tmux, else the stored spawn record."""
        return self.env.get("TMUX_PANE") or self.record.read()

    def assistant_pane_id(self) -> str | None:
        sidebar = self.sidebar_pane_id()
        if not sidebar:
            return None
        output = self._tmux("list-panes", "-t", sidebar, "-F", "#{pane_id}")
        if output is None:
            return None
        for pane in output.split():
            if pane != sidebar:
                return pane
        return None

    def send_text(self, text: str) -> bool:
        pane = self.assistant_pane_id()
        if pane is None:
            return False
        if "\n" in text:
            # Bracketed paste: embedded newlines must not submit early.
            if self._tmux("load-buffer", "-b", PASTE_BUFFER_NAME, "-", input_text=text) is None:
                return False
            if self._tmux("paste-buffer", "-p", "-d", "-b", PASTE_BUFFER_NAME, "-t", pane) is None:
                return False
        elif self._tmux("send-keys", "-t", pane, "-l", text) is None:
            return False
        return self._tmux("send-keys", "-t", pane, "Enter") is not None

    def capture_recent_output(self, line_count: int) -> str | None:
        pane = self.assistant_pane_id()
        if pane is None:
            return None
        return self._tmux("capture-pane", "-t", pane, "-p", "-S", f"-{max(1, line_count)}")

    def focus_other_pane(self) -> bool:
        pane = self.assistant_pane_id()
        if pane is None:
            return False
        return self._tmux("select-pane", "-t", pane) is not None

    # -------------------- spawn --------------------
    def is_pane_valid(self, pane_id: str) -> bool:
        output = self._tmux("display-message", "-t", pane_id, "-p", "#{pane_id}")
        return output is not None and output.strip() == pane_id

    def spawn_sidebar(self, command: str) -> str | None:
        """Create or reuse the sidebar split and run ``command`` in it."""
        existing = self.record.read()
        if existing and self.is_pane_valid(existing):
            logger.info("reusing sidebar pane {}", existing)
            self._tmux("send-keys", "-t", existing, "C-c")
            time.sleep(REUSE_SETTLE_SECONDS)
            self._tmux("send-keys", "-t", existing, f"clear && {command}", "Enter")
            return existing
        if existing:
            logger.info("clearing stale sidebar pane {}", existing)
            self.record.clear()
        output = self._tmux(
            "split-window", "-h", "-l", str(SIDEBAR_WIDTH_COLUMNS), "-d", "-P", "-F", "#{pane_id}"
        )
        if output is None:
            return None
        pane_id = output.strip()
        self.record.write(pane_id)
        self._tmux("send-keys", "-t", pane_id, command, "Enter")
        logger.info("created sidebar pane {}", pane_id)
        return pane_id

    def describe(self) -> dict[str, str]:
        return {
            "backend": self.name,
            "own_pane": self.env.get("TMUX_PANE", "none"),
        }
