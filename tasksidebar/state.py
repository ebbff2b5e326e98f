"""Mutable runtime state shared by the controller, key handlers and renderer.

``AppState`` mirrors the persisted collections plus selection, focus, edit
buffer and the geometry of the last painted frame.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .input.line_edit import EditBuffer
from .models import ActiveTask, AssistantTodo, DoneTask, QueuedTask, StatuslineSnapshot, sort_queue
from .store import StoreSnapshot

REVIEW_VISIBLE_ROWS = 5


@dataclass
class InputEditState:
    mode: str = "none"
    editing_task_id: str | None = None
    buffer: EditBuffer = field(default_factory=EditBuffer)

    @property
    def active(self) -> bool:
        return self.mode != "none"


@dataclass
class AppState:
    queue: list[QueuedTask] = field(default_factory=list)
    active: ActiveTask | None = None
    done: list[DoneTask] = field(default_factory=list)
    todos: list[AssistantTodo] = field(default_factory=list)
    statusline: StatuslineSnapshot | None = None
    serialized: dict[str, str] = field(default_factory=dict)
    selected_section: str = "queue"
    selected_index: int = 0
    done_selected_index: int = 0
    focus_block: str = "queue"
    terminal_focused: bool = True
    width: int = 80
    height: int = 24
    edit: InputEditState = field(default_factory=InputEditState)
    dirty: bool = True
    resize_pending: bool = False
    status_message: str = ""
    status_message_until: float = 0.0
    idle_observations: int = 0
    header_repo: str = ""
    header_branch: str = ""
    input_row: int = 0
    input_rows_painted: int = 1
    input_prefix: str = ""

    @property
    def editing(self) -> bool:
        return self.edit.active

    def apply_snapshot(self, snapshot: StoreSnapshot) -> bool:
        """Replace collections when any serialized form changed; return whether it did."""
        serialized = snapshot.serialized()
        if serialized == self.serialized:
            return False
        if snapshot.active is None or self.active is None or snapshot.active.id != self.active.id:
            self.idle_observations = 0
        self.queue = sort_queue(snapshot.queue)
        self.active = snapshot.active
        self.done = list(snapshot.done)
        self.todos = list(snapshot.todos)
        self.statusline = snapshot.statusline
        self.serialized = serialized
        self.clamp_selection()
        return True

    def visible_done(self) -> list[DoneTask]:
        return self.done[:REVIEW_VISIBLE_ROWS]

    def selected_task(self) -> QueuedTask | None:
        if self.selected_section != "queue" or not self.queue:
            return None
        if 0 <= self.selected_index < len(self.queue):
            return self.queue[self.selected_index]
        return None

    def selected_done(self) -> DoneTask | None:
        if self.selected_section != "done":
            return None
        visible = self.visible_done()
        if 0 <= self.done_selected_index < len(visible):
            return visible[self.done_selected_index]
        return None

    def clamp_selection(self) -> None:
        """Keep both indices in range and leave an empty Review section."""
        self.selected_index = max(0, min(self.selected_index, len(self.queue) - 1))
        visible = len(self.visible_done())
        self.done_selected_index = max(0, min(self.done_selected_index, visible - 1))
        if self.selected_section == "done" and visible == 0:
            self.selected_section = "queue"
