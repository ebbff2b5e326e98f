"""Command-line front door for tasksidebar.

Parses subcommands, loads config, and configures logging. Then dispatches into
the interactive sidebar runtime or one of the short hook/helper commands.
"""

from __future__ import annotations

import argparse
import json
import os
import shlex
import sys
from pathlib import Path

from loguru import logger

from .config import SidebarConfig, load_sidebar_config
from .errors import BackendUnavailableError, IPCError, TerminalInitError
from .hooks import ingest_statusline, sync_todos
from .ipc import send_message
from .logs import configure_logging
from .panes import PaneBackend, detect_backend, env_info
from .store import SidebarStore

DEFAULT_COMMAND = "show"
SHORT_COMMANDS = ("spawn", "update", "env", "sync-todos", "statusline", "clarify")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tasksidebar",
        description="Task queue sidebar that feeds tasks to a coding assistant pane.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to config.json.")
    commands = parser.add_subparsers(dest="command")

    show = commands.add_parser("show", help="Render the sidebar in the current terminal.")
    show.add_argument("-s", "--socket", type=Path, default=None, help="Unix socket path for updates.")

    spawn = commands.add_parser("spawn", help="Open a split pane running the sidebar.")
    spawn.add_argument("--tmux", action="store_true", help="Use tmux even inside iTerm2.")

    update = commands.add_parser("update", help="Send a message to the running sidebar.")
    update.add_argument("-s", "--socket", type=Path, default=None, help="Unix socket path.")
    update.add_argument("-t", "--type", dest="message_type", default="update", help="Message type.")
    update.add_argument("-d", "--data", default=None, help="Message data (JSON).")

    commands.add_parser("env", help="Show environment diagnostics.")
    commands.add_parser("sync-todos", help="PostToolUse hook: mirror the assistant todo list from stdin.")
    commands.add_parser("statusline", help="Statusline hook: record metrics from stdin and print a summary.")

    clarify = commands.add_parser("clarify", help="Mark a queued task as clarified.")
    clarify.add_argument("task_id", help="Queued task id.")
    clarify.add_argument("--plan", required=True, help="Path of the written plan file.")
    return parser


def _store(config: SidebarConfig) -> SidebarStore:
    return SidebarStore(config.data_dir, Path.cwd(), done_limit=config.done_limit)


def sidebar_command() -> str:
    """Shell command that launches ``show`` with this interpreter."""
    return shlex.join([sys.executable, "-m", "tasksidebar", DEFAULT_COMMAND])


def cmd_show(args: argparse.Namespace, config: SidebarConfig) -> int:
    from .runtime.app import run_sidebar

    try:
        run_sidebar(config, Path.cwd(), os.environ, socket_path=args.socket)
    except TerminalInitError as exc:
        raise SystemExit(f"tasksidebar: cannot put terminal into raw mode: {exc}") from exc
    return 0


def require_backend(config: SidebarConfig, *, prefer_tmux: bool = False) -> PaneBackend:
    backend = detect_backend(
        os.environ, _store(config).pane_record(), config.pane_timeout_seconds, prefer_tmux=prefer_tmux
    )
    if backend is None:
        raise BackendUnavailableError("not running in tmux or iTerm2")
    return backend


def cmd_spawn(args: argparse.Namespace, config: SidebarConfig) -> int:
    try:
        backend = require_backend(config, prefer_tmux=args.tmux)
    except BackendUnavailableError as exc:
        print(f"Error: {exc}.", file=sys.stderr)
        print("Run inside iTerm2, or start a tmux session first.", file=sys.stderr)
        return 1
    pane_id = backend.spawn_sidebar(sidebar_command())
    if pane_id is None:
        print(f"Failed to spawn {backend.name} sidebar", file=sys.stderr)
        return 1
    print(f"Sidebar spawned in {backend.name} pane: {pane_id}")
    return 0


def cmd_update(args: argparse.Namespace, config: SidebarConfig) -> int:
    data = None
    if args.data is not None:
        try:
            data = json.loads(args.data)
        except ValueError:
            print("Invalid JSON data", file=sys.stderr)
            return 1
    socket_path = args.socket or _store(config).socket_path
    try:
        send_message(socket_path, args.message_type, data)
    except IPCError as exc:
        print(f"Failed to send message: {exc}", file=sys.stderr)
        return 1
    print("Message sent")
    return 0


def cmd_env(args: argparse.Namespace, config: SidebarConfig) -> int:
    store = _store(config)
    info = env_info(os.environ, store.pane_record())
    info["socket"] = str(store.socket_path)
    info["data_dir"] = str(config.data_dir)
    print("Environment:")
    for key, value in info.items():
        print(f"  {key}: {value}")
    return 0


def cmd_sync_todos(args: argparse.Namespace, config: SidebarConfig) -> int:
    sync_todos(sys.stdin.read(), _store(config))
    return 0


def cmd_statusline(args: argparse.Namespace, config: SidebarConfig) -> int:
    print(ingest_statusline(sys.stdin.read(), _store(config)))
    return 0


def cmd_clarify(args: argparse.Namespace, config: SidebarConfig) -> int:
    if not _store(config).mark_clarified(args.task_id, args.plan):
        print(f"Task not found: {args.task_id}", file=sys.stderr)
        return 1
    print(f"Task {args.task_id} marked as clarified")
    return 0


COMMANDS = {
    "show": cmd_show,
    "spawn": cmd_spawn,
    "update": cmd_update,
    "env": cmd_env,
    "sync-todos": cmd_sync_todos,
    "statusline": cmd_statusline,
    "clarify": cmd_clarify,
}


def main(argv: list[str] | None = None) -> int:
    """Parse CLI arguments and run the selected subcommand.

    ``show`` is the default when no subcommand is given. Returns the process
    exit status; a terminal that cannot enter raw mode exits via ``SystemExit``.
    """
    args = build_parser().parse_args(argv)
    command = args.command or DEFAULT_COMMAND
    if args.command is None:
        args.socket = None
    config = load_sidebar_config(args.config)
    configure_logging(config.log_level, to_stderr=command in SHORT_COMMANDS)
    logger.debug("running command {}", command)
    return COMMANDS[command](args, config)


if __name__ == "__main__":
    raise SystemExit(main())
