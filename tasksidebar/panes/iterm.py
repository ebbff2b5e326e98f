"""iTerm2 pane backend driven through osascript.

Sessions are addressed by index within the current tab: the assistant runs
in session 1 and the sidebar split occupies session 2.
"""

from __future__ import annotations

from collections.abc import Mapping

from loguru import logger

from .base import DEFAULT_TIMEOUT_SECONDS, PaneBackend, run_command

ASSISTANT_SESSION_INDEX = 1
SIDEBAR_SESSION_INDEX = 2


def is_in_iterm(env: Mapping[str, str]) -> bool:
    return env.get("TERM_PROGRAM") == "iTerm.app"


def applescript_quote(text: str) -> str:
    """Escape ``text`` for use inside an AppleScript double-quoted literal."""
    return text.replace("\\", "\\\\").replace('"', '\\"')


class ITermBackend(PaneBackend):
    name = "iterm"

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        session_index: int = ASSISTANT_SESSION_INDEX,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.session_index = session_index

    def _osascript(self, script: str) -> str | None:
        return run_command(["osascript", "-e", script], self.timeout_seconds)

    def _tell_session(self, body: str) -> str | None:
        return self._osascript(
            'tell application "iTerm2"\n'
            f"  tell session {self.session_index} of current tab of current window\n"
            f"    {body}\n"
            "  end tell\n"
            "end tell"
        )

    def send_text(self, text: str) -> bool:
        return self._tell_session(f'write text "{applescript_quote(text)}"') is not None

    def capture_recent_output(self, line_count: int) -> str | None:
        contents = self._tell_session("return contents")
        if contents is None:
            return None
        lines = contents.rstrip("\n").split("\n")
        return "\n".join(lines[-max(1, line_count) :])

    def focus_other_pane(self) -> bool:
        return self._tell_session("select") is not None

    def spawn_sidebar(self, command: str) -> str | None:
        """Split the current session vertically and run ``command`` on the right."""
        output = self._osascript(
            'tell application "iTerm2"\n'
            "  tell current session of current tab of current window\n"
            "    set newSession to (split vertically with default profile)\n"
            "  end tell\n"
            "  tell newSession\n"
            f'    write text "{applescript_quote(command)}"\n'
            "    return unique id\n"
            "  end tell\n"
            "end tell"
        )
        if output is None:
            return None
        session_id = output.strip()
        logger.info("spawned iTerm2 sidebar session {}", session_id)
        return session_id

    def describe(self) -> dict[str, str]:
        return {
            "backend": self.name,
            "assistant_session": str(self.session_index),
            "sidebar_session": str(SIDEBAR_SESSION_INDEX),
        }
