"""Runtime composition layer for the sidebar.

Builds initial state, wires the controller, timers, IPC server, and terminal
together, and runs the loop. Teardown always restores the terminal.
"""

from __future__ import annotations

import os
import shutil
import signal
from collections.abc import Callable, Mapping
from pathlib import Path

from loguru import logger

from ..config import SidebarConfig
from ..errors import IPCError
from ..input.decoder import InputDecoder
from ..ipc import IPCServer
from ..panes import PaneBackend, detect_backend
from ..project import git_branch, project_label
from ..state import AppState
from ..store import SidebarStore
from ..terminal import TerminalController
from .controller import SidebarController
from .loop import RuntimeLoopCallbacks, RuntimeLoopTiming, run_main_loop
from .timers import PollingScheduler, PollingTimer

EXIT_SIGNALS = (signal.SIGTERM, signal.SIGHUP)


def _raise_system_exit(signum: int, _frame) -> None:
    raise SystemExit(128 + signum)


def build_initial_state(store: SidebarStore, cwd: Path, width: int, height: int) -> AppState:
    state = AppState(width=width, height=height)
    state.header_repo = project_label(cwd)
    state.header_branch = git_branch(cwd)
    state.apply_snapshot(store.load_snapshot())
    return state


def build_scheduler(controller: SidebarController, config: SidebarConfig) -> PollingScheduler:
    return PollingScheduler(
        [
            PollingTimer("data-refresh", config.data_refresh_seconds, controller.refresh_data),
            PollingTimer("completion-check", config.completion_check_seconds, controller.check_completion),
        ]
    )


def run_sidebar(
    config: SidebarConfig,
    cwd: Path,
    env: Mapping[str, str],
    *,
    stdin_fd: int = 0,
    stdout_fd: int = 1,
    socket_path: Path | None = None,
    backend: PaneBackend | None = None,
    on_close: Callable[[], None] | None = None,
) -> None:
    """Run the sidebar in the current terminal until the user quits.

    Raises ``TerminalInitError`` when stdin cannot be put into raw mode.
    """
    store = SidebarStore(config.data_dir, cwd, done_limit=config.done_limit)
    terminal = TerminalController(stdin_fd, stdout_fd)
    if backend is None:
        backend = detect_backend(env, store.pane_record(), config.pane_timeout_seconds)

    size = shutil.get_terminal_size((80, 24))
    state = build_initial_state(store, cwd, size.columns, size.lines)
    controller = SidebarController(state, store, backend, config, terminal.write)
    scheduler = build_scheduler(controller, config)
    controller.scheduler = scheduler

    ipc = IPCServer(socket_path or store.socket_path)
    try:
        ipc.start()
    except IPCError as exc:
        logger.warning("update channel disabled: {}", exc)
        ipc = None

    previous_handlers = {sig: signal.signal(sig, _raise_system_exit) for sig in EXIT_SIGNALS}
    logger.info("sidebar started for {} (backend={})", cwd, backend.name if backend else "none")
    try:
        with terminal.raw_mode():
            scheduler.start()
            run_main_loop(
                stdin_fd,
                InputDecoder(),
                scheduler,
                RuntimeLoopCallbacks(
                    handle_event=controller.handle_event,
                    handle_resize=controller.handle_resize,
                    handle_ipc_message=controller.handle_ipc_message,
                    render_if_dirty=controller.render_if_dirty,
                    expire_status=controller.expire_status,
                ),
                RuntimeLoopTiming(),
                ipc,
            )
    finally:
        scheduler.stop()
        if ipc is not None:
            ipc.close()
        for sig, handler in previous_handlers.items():
            signal.signal(sig, handler)
        logger.info("sidebar stopped (pid {})", os.getpid())
        if on_close is not None:
            on_close()
