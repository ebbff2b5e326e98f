"""Assistant hook handlers behind ``sync-todos`` and ``statusline``.

Both read one JSON payload and update the shared documents the sidebar polls.
Hooks must never break the assistant, so bad payloads are logged and ignored.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

from .models import AssistantTodo, StatuslineSnapshot, utc_now_iso
from .project import git_branch
from .store import SidebarStore

TODO_TOOL_NAME = "TodoWrite"
DEFAULT_CONTEXT_SIZE = 200_000
UNKNOWN_MODEL = "Unknown"


def _parse_payload(payload_text: str, source: str) -> dict[str, Any] | None:
    if not payload_text.strip():
        return None
    try:
        payload = json.loads(payload_text)
    except ValueError as exc:
        logger.warning("{}: ignoring malformed payload: {}", source, exc)
        return None
    if not isinstance(payload, dict):
        logger.warning("{}: payload is not a JSON object", source)
        return None
    return payload


def _section(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, dict) else {}


def _number(section: dict[str, Any], key: str, default: float = 0) -> float:
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return value


def sync_todos(payload_text: str, store: SidebarStore) -> bool:
    """Mirror a ``TodoWrite`` tool call into the todo document.

    Returns whether the mirror was written. Other tools are ignored.
    """
    payload = _parse_payload(payload_text, "sync-todos")
    if payload is None or payload.get("tool_name") != TODO_TOOL_NAME:
        return False
    raw_todos = _section(payload, "tool_input").get("todos")
    if not isinstance(raw_todos, list):
        return False
    todos = [todo for todo in (AssistantTodo.from_dict(item) for item in raw_todos) if todo is not None]
    store.write_todos(todos)
    logger.debug("mirrored {} assistant todos", len(todos))
    return True


def statusline_snapshot(payload: dict[str, Any]) -> StatuslineSnapshot:
    """Derive context, cost, and workspace metrics from a statusline payload."""
    window = _section(payload, "context_window")
    usage = _section(window, "current_usage")
    size = int(_number(window, "context_window_size", DEFAULT_CONTEXT_SIZE))
    tokens = int(
        _number(usage, "input_tokens")
        + _number(usage, "cache_creation_input_tokens")
        + _number(usage, "cache_read_input_tokens")
        + _number(usage, "output_tokens")
    )
    percent = tokens * 100 // size if size > 0 else 0

    cost = _section(payload, "cost")
    model_name = _section(payload, "model").get("display_name")

    repo = ""
    branch = ""
    project_dir = _section(payload, "workspace").get("project_dir")
    if isinstance(project_dir, str) and project_dir and Path(project_dir).is_dir():
        project_path = Path(project_dir)
        repo = project_path.name
        branch = git_branch(project_path)

    return StatuslineSnapshot(
        context_percent=percent,
        context_tokens=tokens,
        context_size=size,
        cost_usd=float(_number(cost, "total_cost_usd")),
        duration_min=int(_number(cost, "total_duration_ms")) // 60000,
        model=model_name if isinstance(model_name, str) and model_name else UNKNOWN_MODEL,
        branch=branch,
        repo=repo,
        updated_at=utc_now_iso(),
    )


def format_status(snapshot: StatuslineSnapshot) -> str:
    return f"{snapshot.model} | ctx {snapshot.context_percent}% | ${snapshot.cost_usd:.2f} | {snapshot.duration_min}m"


def ingest_statusline(payload_text: str, store: SidebarStore) -> str:
    """Persist the statusline snapshot and return the line to print.

    A missing or malformed payload prints an empty line and writes nothing.
    """
    payload = _parse_payload(payload_text, "statusline")
    if payload is None:
        return ""
    snapshot = statusline_snapshot(payload)
    store.write_statusline(snapshot)
    return format_status(snapshot)
