"""Task records persisted by the sidebar.

Field names on disk are camelCase and Python attributes are snake_case.
Every ``from_dict`` returns ``None`` for an entry with missing or mistyped
required fields.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable

TODO_STATUSES = ("pending", "in_progress", "completed")


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string with a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def timestamp_sort_key(value: str) -> float:
    """Convert an ISO timestamp into a sortable float; unparseable sorts last."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return math.inf
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def _str_field(raw: dict[str, Any], key: str) -> str | None:
    value = raw.get(key)
    return value if isinstance(value, str) else None


@dataclass
class QueuedTask:
    id: str
    content: str
    created_at: str
    priority: int | None = None
    recommended: bool = False
    clarified: bool = False
    plan_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "content": self.content,
            "createdAt": self.created_at,
        }
        if self.priority is not None:
            data["priority"] = self.priority
        if self.recommended:
            data["recommended"] = True
        if self.clarified:
            data["clarified"] = True
        if self.plan_path:
            data["planPath"] = self.plan_path
        return data

    @classmethod
    def from_dict(cls, raw: object) -> QueuedTask | None:
        if not isinstance(raw, dict):
            return None
        task_id = _str_field(raw, "id")
        content = _str_field(raw, "content")
        if not task_id or content is None:
            return None
        priority = raw.get("priority")
        if isinstance(priority, bool) or not isinstance(priority, (int, float)):
            priority = None
        return cls(
            id=task_id,
            content=content,
            created_at=_str_field(raw, "createdAt") or "",
            priority=int(priority) if priority is not None else None,
            recommended=raw.get("recommended") is True,
            clarified=raw.get("clarified") is True,
            plan_path=_str_field(raw, "planPath") or None,
        )


@dataclass
class ActiveTask:
    id: str
    content: str
    sent_at: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "content": self.content, "sentAt": self.sent_at}

    @classmethod
    def from_dict(cls, raw: object) -> ActiveTask | None:
        if not isinstance(raw, dict):
            return None
        task_id = _str_field(raw, "id")
        content = _str_field(raw, "content")
        if not task_id or content is None:
            return None
        return cls(id=task_id, content=content, sent_at=_str_field(raw, "sentAt") or "")


@dataclass
class DoneTask:
    id: str
    content: str
    completed_at: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "content": self.content, "completedAt": self.completed_at}

    @classmethod
    def from_dict(cls, raw: object) -> DoneTask | None:
        if not isinstance(raw, dict):
            return None
        task_id = _str_field(raw, "id")
        content = _str_field(raw, "content")
        if not task_id or content is None:
            return None
        return cls(id=task_id, content=content, completed_at=_str_field(raw, "completedAt") or "")


@dataclass
class AssistantTodo:
    """One entry of the assistant's own todo list (read-only mirror)."""

    content: str
    status: str

    def to_dict(self) -> dict[str, Any]:
        return {"content": self.content, "status": self.status}

    @classmethod
    def from_dict(cls, raw: object) -> AssistantTodo | None:
        if not isinstance(raw, dict):
            return None
        content = _str_field(raw, "content")
        status = _str_field(raw, "status")
        if content is None or status not in TODO_STATUSES:
            return None
        return cls(content=content, status=status)


@dataclass
class StatuslineSnapshot:
    context_percent: int = 0
    context_tokens: int = 0
    context_size: int = 0
    cost_usd: float = 0.0
    duration_min: int = 0
    model: str = ""
    branch: str = ""
    repo: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "contextPercent": self.context_percent,
            "contextTokens": self.context_tokens,
            "contextSize": self.context_size,
            "costUsd": self.cost_usd,
            "durationMin": self.duration_min,
            "model": self.model,
            "branch": self.branch,
            "repo": self.repo,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, raw: object) -> StatuslineSnapshot | None:
        if not isinstance(raw, dict):
            return None

        def number(key: str) -> float:
            value = raw.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return 0
            return value

        return cls(
            context_percent=int(number("contextPercent")),
            context_tokens=int(number("contextTokens")),
            context_size=int(number("contextSize")),
            cost_usd=float(number("costUsd")),
            duration_min=int(number("durationMin")),
            model=_str_field(raw, "model") or "",
            branch=_str_field(raw, "branch") or "",
            repo=_str_field(raw, "repo") or "",
            updated_at=_str_field(raw, "updatedAt") or "",
        )


def queue_sort_key(task: QueuedTask) -> tuple[int, int, float]:
    """Sort prioritized tasks first (lowest value first), then by creation time.

    Equal keys keep their stored order, so a bulk paste stays in paste order.
    """
    if task.priority is not None:
        return (0, task.priority, timestamp_sort_key(task.created_at))
    return (1, 0, timestamp_sort_key(task.created_at))


def sort_queue(tasks: Iterable[QueuedTask]) -> list[QueuedTask]:
    return sorted(tasks, key=queue_sort_key)
