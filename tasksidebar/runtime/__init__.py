"""Runtime orchestration: state machine, polling timers, and the event loop."""

from __future__ import annotations

from .controller import SidebarController
from .timers import PollingScheduler, PollingTimer

__all__ = [
    "PollingScheduler",
    "PollingTimer",
    "SidebarController",
]
