"""Pane backend contract and shared helpers.

A backend knows how to push text into the assistant's pane, capture its
recent output, and move focus there. Idle detection is the same line-pattern
check for every backend.
"""

from __future__ import annotations

import re
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Sequence

from loguru import logger

PROMPT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^❯\s*$"),
    re.compile(r"^>\s*$"),
)
PROMPT_SCAN_LINES = 5
DEFAULT_TIMEOUT_SECONDS = 3.0


def output_is_idle_at_prompt(output: str, scan_lines: int = PROMPT_SCAN_LINES) -> bool:
    """Return whether one of the last ``scan_lines`` lines is a bare prompt glyph."""
    lines = output.strip().split("\n")
    for line in reversed(lines[-max(1, scan_lines) :]):
        if any(pattern.match(line) for pattern in PROMPT_PATTERNS):
            return True
    return False


def run_command(
    args: Sequence[str],
    timeout_seconds: float,
    input_text: str | None = None,
) -> str | None:
    """Run ``args`` and return stdout, or ``None`` on any failure or timeout."""
    try:
        proc = subprocess.run(
            list(args),
            input=input_text,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout_seconds,
        )
    except subprocess.TimeoutExpired:
        logger.warning("{} timed out after {}s", args[0], timeout_seconds)
        return None
    except (OSError, subprocess.SubprocessError) as exc:
        logger.warning("{} failed to start: {}", args[0], exc)
        return None
    if proc.returncode != 0:
        logger.debug("{} exited {}: {}", args[0], proc.returncode, proc.stderr.strip())
        return None
    return proc.stdout


class PaneBackend(ABC):
    """Capability injected into the state machine for talking to the assistant."""

    name = "abstract"

    @abstractmethod
    def send_text(self, text: str) -> bool:
        """Type ``text`` into the assistant pane and submit it."""

    @abstractmethod
    def capture_recent_output(self, line_count: int) -> str | None:
        """Return the last ``line_count`` lines of the assistant pane."""

    @abstractmethod
    def focus_other_pane(self) -> bool:
        """Move terminal focus to the assistant pane."""

    @abstractmethod
    def spawn_sidebar(self, command: str) -> str | None:
        """Open (or reuse) a split running ``command``; return its pane id."""

    def is_idle_at_prompt(self) -> bool | None:
        """Return idle/busy, or ``None`` when the pane could not be captured."""
        output = self.capture_recent_output(PROMPT_SCAN_LINES)
        if output is None:
            return None
        return output_is_idle_at_prompt(output)

    def describe(self) -> dict[str, str]:
        return {"backend": self.name}
