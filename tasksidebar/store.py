"""Persistence gateway for sidebar documents.

Per-project JSON documents (queue, active task, review list) and an
append-only history log live under ``<root>/projects/<hash>/``; the assistant
todo mirror, statusline snapshot, pane record, and IPC socket are global.

Reads never raise: missing or corrupt documents read as empty defaults.
Writes go through a temp file plus ``os.replace`` so readers only ever see
whole documents.
"""

from __future__ import annotations

import json
import os
import tempfile
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from .models import (
    ActiveTask,
    AssistantTodo,
    DoneTask,
    QueuedTask,
    StatuslineSnapshot,
    utc_now_iso,
)
from .project import project_hash

TASKS_FILE = "tasks.json"
ACTIVE_FILE = "active.json"
DONE_FILE = "done.json"
HISTORY_FILE = "history.log"
MAPPING_FILE = "mapping.json"
TODOS_FILE = "claude-todos.json"
STATUSLINE_FILE = "statusline.json"
PANE_RECORD_FILE = "tmux-pane-id"
SOCKET_FILE = "sidebar.sock"
DEFAULT_DONE_LIMIT = 20


def read_json_document(path: Path, default: Any) -> Any:
    """Load JSON from ``path``; return ``default`` when missing or corrupt."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return default
    except OSError as exc:
        logger.warning("cannot read {}: {}", path, exc)
        return default
    try:
        return json.loads(raw)
    except ValueError as exc:
        logger.warning("corrupt document {} replaced by default: {}", path, exc)
        return default


def write_json_document(path: Path, data: Any) -> None:
    """Atomically replace ``path`` with pretty-printed JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


def _parse_list(raw: object, factory) -> list:
    if not isinstance(raw, list):
        return []
    out = []
    for item in raw:
        parsed = factory(item)
        if parsed is not None:
            out.append(parsed)
    return out


@dataclass
class StoreSnapshot:
    """Consistent view of every collection the sidebar displays."""

    queue: list[QueuedTask] = field(default_factory=list)
    active: ActiveTask | None = None
    done: list[DoneTask] = field(default_factory=list)
    todos: list[AssistantTodo] = field(default_factory=list)
    statusline: StatuslineSnapshot | None = None

    def serialized(self) -> dict[str, str]:
        """Per-collection JSON strings used for change detection."""
        return {
            "queue": json.dumps([task.to_dict() for task in self.queue], sort_keys=True),
            "active": json.dumps(self.active.to_dict() if self.active else None, sort_keys=True),
            "done": json.dumps([task.to_dict() for task in self.done], sort_keys=True),
            "todos": json.dumps([todo.to_dict() for todo in self.todos], sort_keys=True),
            "statusline": json.dumps(self.statusline.to_dict() if self.statusline else None, sort_keys=True),
        }


class PaneIdRecord:
    """Small persisted record holding the sidebar's tmux pane id."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def read(self) -> str | None:
        try:
            value = self.path.read_text(encoding="utf-8").strip()
        except OSError:
            return None
        return value or None

    def write(self, pane_id: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(pane_id, encoding="utf-8")

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("cannot remove pane record {}: {}", self.path, exc)


class SidebarStore:
    """Project-scoped document store used by the sidebar and its CLI hooks."""

    def __init__(self, root: Path, cwd: Path, done_limit: int = DEFAULT_DONE_LIMIT) -> None:
        self.root = root
        self.cwd = cwd
        self.project_key = project_hash(cwd)
        self.project_dir = root / "projects" / self.project_key
        self.done_limit = max(1, done_limit)
        self._mapping_recorded = False

    # -------------------- paths --------------------
    @property
    def socket_path(self) -> Path:
        return self.root / SOCKET_FILE

    @property
    def history_path(self) -> Path:
        return self.project_dir / HISTORY_FILE

    def pane_record(self) -> PaneIdRecord:
        return PaneIdRecord(self.root / PANE_RECORD_FILE)

    def _project_file(self, name: str) -> Path:
        return self.project_dir / name

    def _write_project(self, name: str, data: Any) -> None:
        self._record_project_mapping()
        write_json_document(self._project_file(name), data)

    def _record_project_mapping(self) -> None:
        """Keep ``projects/mapping.json`` pointing each hash at its directory."""
        if self._mapping_recorded:
            return
        mapping_path = self.root / "projects" / MAPPING_FILE
        mapping = read_json_document(mapping_path, {})
        if not isinstance(mapping, dict):
            mapping = {}
        if mapping.get(self.project_key) != str(self.cwd):
            mapping[self.project_key] = str(self.cwd)
            write_json_document(mapping_path, mapping)
        self._mapping_recorded = True

    # -------------------- queue --------------------
    def get_queue(self) -> list[QueuedTask]:
        return _parse_list(read_json_document(self._project_file(TASKS_FILE), []), QueuedTask.from_dict)

    def set_queue(self, tasks: list[QueuedTask]) -> None:
        self._write_project(TASKS_FILE, [task.to_dict() for task in tasks])

    def add_task(self, content: str) -> QueuedTask:
        tasks = self.get_queue()
        task = QueuedTask(id=str(uuid.uuid4()), content=content, created_at=utc_now_iso())
        tasks.append(task)
        self.set_queue(tasks)
        logger.info("queued task {}", task.id)
        return task

    def add_tasks(self, contents: list[str]) -> list[QueuedTask]:
        """Queue several tasks with one write (bulk paste)."""
        tasks = self.get_queue()
        added = [QueuedTask(id=str(uuid.uuid4()), content=content, created_at=utc_now_iso()) for content in contents]
        tasks.extend(added)
        self.set_queue(tasks)
        logger.info("queued {} tasks from paste", len(added))
        return added

    def update_task(self, task_id: str, content: str) -> bool:
        tasks = self.get_queue()
        for task in tasks:
            if task.id == task_id:
                task.content = content
                self.set_queue(tasks)
                return True
        return False

    def remove_task(self, task_id: str) -> bool:
        tasks = self.get_queue()
        remaining = [task for task in tasks if task.id != task_id]
        if len(remaining) == len(tasks):
            return False
        self.set_queue(remaining)
        return True

    def mark_clarified(self, task_id: str, plan_path: str | None) -> bool:
        tasks = self.get_queue()
        for task in tasks:
            if task.id == task_id:
                task.clarified = True
                task.plan_path = plan_path or task.plan_path
                self.set_queue(tasks)
                return True
        return False

    # -------------------- active --------------------
    def get_active(self) -> ActiveTask | None:
        return ActiveTask.from_dict(read_json_document(self._project_file(ACTIVE_FILE), None))

    def set_active(self, active: ActiveTask | None) -> None:
        self._write_project(ACTIVE_FILE, active.to_dict() if active else None)

    def activate_task(self, task_id: str) -> ActiveTask | None:
        """Move a queued task into the active slot.

        ``active.json`` is written before the task leaves ``tasks.json``;
        ``load_snapshot`` hides queue entries that are already active, so
        readers never observe the task in both places or in neither.
        """
        tasks = self.get_queue()
        task = next((t for t in tasks if t.id == task_id), None)
        if task is None:
            return None
        active = ActiveTask(id=task.id, content=task.content, sent_at=utc_now_iso())
        self.set_active(active)
        self.set_queue([t for t in tasks if t.id != task_id])
        logger.info("activated task {}", task_id)
        return active

    def clear_active_task(self) -> ActiveTask | None:
        """Drop the active task straight into the history log."""
        active = self.get_active()
        if active is None:
            return None
        self.append_history(active.content)
        self.set_active(None)
        logger.info("cleared active task {}", active.id)
        return active

    def complete_active_task(self) -> DoneTask | None:
        """Log the active task to history and push it onto the review list."""
        active = self.get_active()
        if active is None:
            return None
        self.append_history(active.content)
        done = DoneTask(id=active.id, content=active.content, completed_at=utc_now_iso())
        entries = [entry for entry in self.get_done() if entry.id != done.id]
        self.set_done([done, *entries])
        self.set_active(None)
        logger.info("completed task {}", active.id)
        return done

    # -------------------- done / review --------------------
    def get_done(self) -> list[DoneTask]:
        return _parse_list(read_json_document(self._project_file(DONE_FILE), []), DoneTask.from_dict)

    def set_done(self, entries: list[DoneTask]) -> None:
        self._write_project(DONE_FILE, [entry.to_dict() for entry in entries[: self.done_limit]])

    def remove_from_done(self, task_id: str) -> bool:
        entries = self.get_done()
        remaining = [entry for entry in entries if entry.id != task_id]
        if len(remaining) == len(entries):
            return False
        self.set_done(remaining)
        return True

    def return_to_active(self, task_id: str) -> ActiveTask | None:
        """Reverse a premature completion: review entry becomes active again."""
        entry = next((e for e in self.get_done() if e.id == task_id), None)
        if entry is None:
            return None
        active = ActiveTask(id=entry.id, content=entry.content, sent_at=utc_now_iso())
        self.set_active(active)
        self.remove_from_done(task_id)
        logger.info("returned task {} to active", task_id)
        return active

    # -------------------- history --------------------
    def append_history(self, content: str) -> None:
        self.project_dir.mkdir(parents=True, exist_ok=True)
        line = content.replace("\n", " ")
        with self.history_path.open("a", encoding="utf-8") as handle:
            handle.write(f"{utc_now_iso()} | {line}\n")

    # -------------------- global mirrors --------------------
    def get_todos(self) -> list[AssistantTodo]:
        raw = read_json_document(self.root / TODOS_FILE, None)
        if not isinstance(raw, dict):
            return []
        return _parse_list(raw.get("todos"), AssistantTodo.from_dict)

    def write_todos(self, todos: list[AssistantTodo]) -> None:
        write_json_document(
            self.root / TODOS_FILE,
            {"todos": [todo.to_dict() for todo in todos], "updatedAt": utc_now_iso()},
        )

    def get_statusline(self) -> StatuslineSnapshot | None:
        return StatuslineSnapshot.from_dict(read_json_document(self.root / STATUSLINE_FILE, None))

    def write_statusline(self, snapshot: StatuslineSnapshot) -> None:
        write_json_document(self.root / STATUSLINE_FILE, snapshot.to_dict())

    # -------------------- snapshot --------------------
    def load_snapshot(self) -> StoreSnapshot:
        """Read every collection and resolve transient overlaps.

        Multi-file moves are written destination-first, so an id may briefly
        appear in two documents. Precedence is active, then done, then queue.
        """
        active = self.get_active()
        done = self.get_done()
        if active is not None:
            done = [entry for entry in done if entry.id != active.id]
        taken = {entry.id for entry in done}
        if active is not None:
            taken.add(active.id)
        queue = [task for task in self.get_queue() if task.id not in taken]
        return StoreSnapshot(
            queue=queue,
            active=active,
            done=done,
            todos=self.get_todos(),
            statusline=self.get_statusline(),
        )
