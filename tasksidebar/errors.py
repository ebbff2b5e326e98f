"""Exception types raised across sidebar layers.

Only terminal initialisation failures are fatal; the rest are surfaced to
callers that decide whether to degrade or exit.
"""

from __future__ import annotations


class SidebarError(Exception):
    """Base class for tasksidebar errors."""


class TerminalInitError(SidebarError):
    """The controlling terminal cannot be switched into raw mode."""


class BackendUnavailableError(SidebarError):
    """No supported pane backend (tmux or iTerm2) was detected."""


class IPCError(SidebarError):
    """Sending to or listening on the sidebar socket failed."""
