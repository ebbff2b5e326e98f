"""Main interactive event loop for the sidebar.

One ``select`` call multiplexes stdin, the IPC socket, and the polling
deadlines. This loop is wiring only; behavior lives in the callbacks.
"""

from __future__ import annotations

import os
import select
import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..input.decoder import ESC_SEQUENCE_TIMEOUT_MS, InputDecoder, KeyEvent
from ..ipc import IPCServer
from .timers import PollingScheduler

READ_SIZE = 4096


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    escape_timeout_seconds: float = ESC_SEQUENCE_TIMEOUT_MS / 1000.0
    max_wait_seconds: float = 0.12


@dataclass(frozen=True)
class RuntimeLoopCallbacks:
    """Injected operations used by ``run_main_loop``."""

    handle_event: Callable[[KeyEvent], bool]
    handle_resize: Callable[[int, int], None]
    handle_ipc_message: Callable[[dict[str, object]], None]
    render_if_dirty: Callable[[], bool]
    expire_status: Callable[[], None]


def run_main_loop(
    stdin_fd: int,
    decoder: InputDecoder,
    scheduler: PollingScheduler,
    callbacks: RuntimeLoopCallbacks,
    timing: RuntimeLoopTiming = RuntimeLoopTiming(),
    ipc: IPCServer | None = None,
    *,
    terminal_size: Callable[..., os.terminal_size] = shutil.get_terminal_size,
    select_fn: Callable[..., tuple[list, list, list]] = select.select,
    read_fn: Callable[[int, int], bytes] = os.read,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """Run until a key handler asks to quit or stdin reaches EOF.

    Each iteration re-reads the terminal size, paints if state is dirty,
    waits for input or the next deadline, then dispatches what arrived.
    """
    ops = callbacks
    pending_since: float | None = None

    while True:
        size = terminal_size((80, 24))
        ops.handle_resize(size.columns, size.lines)
        ops.expire_status()
        ops.render_if_dirty()

        timeout = timing.max_wait_seconds
        until_timer = scheduler.seconds_until_next()
        if until_timer is not None:
            timeout = min(timeout, until_timer)
        if decoder.has_pending():
            timeout = min(timeout, timing.escape_timeout_seconds)

        read_fds = [stdin_fd, *(ipc.fds() if ipc is not None else [])]
        try:
            ready, _, _ = select_fn(read_fds, [], [], max(0.0, timeout))
        except InterruptedError:
            continue
        now = clock()

        events: list[KeyEvent] = []
        if stdin_fd in ready:
            chunk = read_fn(stdin_fd, READ_SIZE)
            if not chunk:
                return
            events = decoder.feed(chunk)
            pending_since = now if decoder.has_pending() else None
        elif decoder.has_pending():
            if pending_since is None:
                pending_since = now
            elif now - pending_since >= timing.escape_timeout_seconds:
                events = decoder.flush()
                pending_since = None

        for event in events:
            if ops.handle_event(event):
                return

        if ipc is not None:
            for message in ipc.handle_ready([fd for fd in ready if fd != stdin_fd]):
                ops.handle_ipc_message(message)

        scheduler.run_due(now)
