"""Sidebar state machine.

``SidebarController`` applies decoded key events and timer ticks to
``AppState``, performs the store/pane side effects they imply, and decides
between a full repaint (deferred through ``state.dirty``) and the narrow
input-line repaint used while editing.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from loguru import logger

from ..config import SidebarConfig
from ..input.decoder import KeyEvent
from ..input.key_edit import EditKeyContext, handle_edit_key
from ..input.key_normal import NormalKeyContext, handle_normal_key
from ..input.line_edit import EditBuffer
from ..panes.base import PaneBackend
from ..prompts import build_clarify_prompt
from ..render.frame import build_frame, paint_frame
from ..render.input_line import input_wrap_width, paint_cursor, paint_input_text
from ..state import AppState, InputEditState
from ..store import SidebarStore
from ..todo_match import best_completed_match
from ..ui_theme import SidebarTheme, theme_for_focus
from .timers import PollingScheduler

STATUS_MESSAGE_SECONDS = 3.0
MSG_NO_BACKEND = "No tmux or iTerm2 pane found; task kept in queue"
MSG_SEND_FAILED = "Could not reach the assistant pane; task kept in queue"
MSG_ALREADY_ACTIVE = "A task is already in progress (d on In Progress to clear)"


class SidebarController:
    def __init__(
        self,
        state: AppState,
        store: SidebarStore,
        backend: PaneBackend | None,
        config: SidebarConfig,
        write: Callable[[str], None],
        *,
        clock: Callable[[], float] = time.monotonic,
        command_name: str = "tasksidebar",
    ) -> None:
        self.state = state
        self.store = store
        self.backend = backend
        self.config = config
        self.write = write
        self.scheduler: PollingScheduler | None = None
        self._clock = clock
        self._command_name = command_name
        self._painted_theme: SidebarTheme = theme_for_focus(state.terminal_focused)
        self._matched_todos: set[str] = set()
        self.normal_keys = NormalKeyContext(
            state=state,
            start_add=self.start_add,
            start_edit=self.start_edit,
            dispatch_selected=self.dispatch_selected,
            clarify_selected=self.clarify_selected,
            delete_selected=self.delete_selected,
            clear_active=self.clear_active,
            return_selected_to_active=self.return_selected_to_active,
            repaint=self.request_repaint,
        )
        self.edit_keys = EditKeyContext(
            state=state,
            wrap_width=lambda: input_wrap_width(self.state.width),
            submit=self.submit_edit,
            cancel=self.cancel_edit,
            paste=self.paste,
            repaint_input=self.repaint_input,
            move_cursor=self.repaint_cursor,
        )

    # -------------------- painting --------------------
    def request_repaint(self) -> None:
        self.state.dirty = True

    def render(self) -> None:
        """Paint a full frame now and remember where the input line landed."""
        state = self.state
        theme = theme_for_focus(state.terminal_focused)
        frame = build_frame(state, theme)
        paint_frame(self.write, frame)
        self._painted_theme = theme
        state.input_row = frame.input_row
        state.input_rows_painted = max(1, frame.input_rows)
        state.input_prefix = frame.input_prefix
        state.dirty = False

    def render_if_dirty(self) -> bool:
        if not self.state.dirty:
            return False
        self.render()
        return True

    def repaint_input(self) -> None:
        state = self.state
        if state.dirty or state.input_row <= 0:
            self.render()
            return
        state.input_rows_painted = paint_input_text(
            self.write,
            self._painted_theme,
            input_row=state.input_row,
            first_prefix=state.input_prefix,
            text=state.edit.buffer.text,
            cursor=state.edit.buffer.cursor,
            width=state.width,
            previous_rows=state.input_rows_painted,
        )

    def repaint_cursor(self) -> None:
        state = self.state
        if state.dirty or state.input_row <= 0:
            self.render()
            return
        buffer = state.edit.buffer
        paint_cursor(self.write, input_row=state.input_row, text=buffer.text, cursor=buffer.cursor, width=state.width)

    # -------------------- status line --------------------
    def set_status(self, message: str, seconds: float = STATUS_MESSAGE_SECONDS) -> None:
        self.state.status_message = message
        self.state.status_message_until = self._clock() + seconds
        self.request_repaint()

    def expire_status(self, now: float | None = None) -> None:
        state = self.state
        current = self._clock() if now is None else now
        if state.status_message and current >= state.status_message_until:
            state.status_message = ""
            state.status_message_until = 0.0
            if not state.editing:
                self.request_repaint()

    # -------------------- events --------------------
    def handle_event(self, event: KeyEvent) -> bool:
        """Apply one key event; return ``True`` when the sidebar should quit."""
        if event.key in {"FOCUS_IN", "FOCUS_OUT"}:
            self.set_terminal_focus(event.key == "FOCUS_IN")
            return False
        if self.state.editing:
            handle_edit_key(event, self.edit_keys)
            return False
        if event.key == "PASTE":
            logger.debug("ignoring paste outside input mode ({} chars)", len(event.text))
            return False
        return handle_normal_key(event, self.normal_keys)

    def set_terminal_focus(self, focused: bool) -> None:
        state = self.state
        if state.terminal_focused == focused:
            return
        state.terminal_focused = focused
        if not state.editing:
            self.request_repaint()

    def handle_resize(self, width: int, height: int) -> None:
        state = self.state
        if (width, height) == (state.width, state.height):
            return
        state.width = width
        state.height = height
        if state.editing:
            state.resize_pending = True
            return
        self.request_repaint()

    def handle_ipc_message(self, message: dict[str, object]) -> None:
        logger.debug("ipc message type={}", message.get("type"))
        if not self.state.editing:
            self.refresh_data()

    # -------------------- timers --------------------
    def _pause_timers(self) -> None:
        if self.scheduler is not None:
            self.scheduler.pause()

    def _resume_timers(self) -> None:
        if self.scheduler is not None:
            self.scheduler.resume()

    def reload(self) -> bool:
        return self.state.apply_snapshot(self.store.load_snapshot())

    def refresh_data(self) -> None:
        """Data-refresh tick: reload every collection and repaint on change."""
        if self.state.editing:
            return
        if self.reload():
            self.request_repaint()
        self.match_todos()

    def match_todos(self) -> None:
        state = self.state
        if state.active is None:
            return
        todo = best_completed_match(
            state.active.content,
            (t for t in state.todos if t.content not in self._matched_todos),
            self.config.todo_match_threshold,
        )
        if todo is None:
            return
        self._matched_todos.add(todo.content)
        logger.info("assistant todo {!r} matches active task {}", todo.content, state.active.id)
        self.complete_active()

    def check_completion(self) -> None:
        """Completion tick: count consecutive idle observations of the assistant pane."""
        state = self.state
        if state.active is None:
            state.idle_observations = 0
            return
        if self.backend is None:
            return
        idle = self.backend.is_idle_at_prompt()
        if idle is None:
            logger.debug("pane capture failed; completion check skipped")
            return
        if not idle:
            state.idle_observations = 0
            return
        state.idle_observations += 1
        logger.debug("assistant idle ({}/{})", state.idle_observations, self.config.completion_confirmations)
        if state.idle_observations >= self.config.completion_confirmations:
            self.complete_active()

    def complete_active(self) -> None:
        done = self.store.complete_active_task()
        self.state.idle_observations = 0
        if done is not None:
            logger.info("task {} moved to review", done.id)
        self.reload()
        self.request_repaint()

    # -------------------- editing --------------------
    def start_add(self) -> None:
        state = self.state
        self._pause_timers()
        state.selected_section = "queue"
        state.edit = InputEditState(mode="add")
        state.input_rows_painted = 1
        self.request_repaint()

    def start_edit(self) -> None:
        state = self.state
        task = state.selected_task()
        if task is None:
            return
        self._pause_timers()
        state.edit = InputEditState(mode="edit", editing_task_id=task.id, buffer=EditBuffer.at_end(task.content))
        self.request_repaint()

    def submit_edit(self) -> None:
        state = self.state
        text = state.edit.buffer.text.strip()
        if text:
            if state.edit.mode == "add":
                self.store.add_task(text)
            elif state.edit.mode == "edit" and state.edit.editing_task_id:
                self.store.update_task(state.edit.editing_task_id, text)
        self.exit_edit()

    def cancel_edit(self) -> None:
        self.exit_edit()

    def exit_edit(self) -> None:
        state = self.state
        state.edit = InputEditState()
        state.resize_pending = False
        state.input_rows_painted = 1
        self.reload()
        self._resume_timers()
        self.request_repaint()

    def paste(self, content: str) -> None:
        state = self.state
        if state.edit.mode == "add":
            lines = [line.strip() for line in content.split("\n") if line.strip()]
            if not lines:
                return
            if len(lines) > 1:
                self.store.add_tasks(lines)
                self.exit_edit()
                return
            inserted = lines[0]
        else:
            inserted = content.replace("\n", " ").strip()
            if not inserted:
                return
        state.edit.buffer = state.edit.buffer.insert(inserted)
        self.repaint_input()

    # -------------------- queue / review actions --------------------
    def _room_for_dispatch(self) -> bool:
        """Check ``dispatch_policy`` when a task is already active."""
        if self.state.active is None or self.config.dispatch_policy == "replace":
            return True
        self.set_status(MSG_ALREADY_ACTIVE)
        return False

    def _replace_active(self) -> None:
        if self.state.active is None:
            return
        cleared = self.store.clear_active_task()
        if cleared is not None:
            logger.info("replaced active task {}", cleared.id)

    def dispatch_selected(self) -> None:
        state = self.state
        task = state.selected_task()
        if task is None:
            return
        if self.backend is None:
            logger.warning("dispatch of {} skipped: no pane backend", task.id)
            self.set_status(MSG_NO_BACKEND)
            return
        if not self._room_for_dispatch():
            return
        if not self.backend.send_text(task.content):
            logger.warning("dispatch of {} failed: send_text returned false", task.id)
            self.set_status(MSG_SEND_FAILED)
            return
        self._replace_active()
        self.store.activate_task(task.id)
        logger.info("dispatched task {}", task.id)
        state.idle_observations = 0
        self.reload()
        state.selected_index = max(0, state.selected_index - 1)
        state.clamp_selection()
        self.render()
        if not self.backend.focus_other_pane():
            logger.debug("focus of assistant pane failed")

    def clarify_selected(self) -> None:
        task = self.state.selected_task()
        if task is None:
            return
        if self.backend is None:
            logger.warning("clarify of {} skipped: no pane backend", task.id)
            self.set_status(MSG_NO_BACKEND)
            return
        if not self.backend.send_text(build_clarify_prompt(task, self._command_name)):
            self.set_status(MSG_SEND_FAILED)
            return
        logger.info("sent clarify prompt for task {}", task.id)
        self.request_repaint()
        self.backend.focus_other_pane()

    def delete_selected(self) -> None:
        state = self.state
        if state.selected_section == "queue":
            task = state.selected_task()
            if task is None:
                return
            self.store.remove_task(task.id)
            self.reload()
            state.selected_index = max(0, state.selected_index - 1)
            state.clamp_selection()
            self.request_repaint()
            return
        entry = state.selected_done()
        if entry is None:
            return
        self.store.remove_from_done(entry.id)
        self._after_review_change()

    def return_selected_to_active(self) -> None:
        entry = self.state.selected_done()
        if entry is None:
            return
        if not self._room_for_dispatch():
            return
        self._replace_active()
        self.store.return_to_active(entry.id)
        self.state.idle_observations = 0
        self._after_review_change()

    def _after_review_change(self) -> None:
        state = self.state
        self.reload()
        if not state.done:
            state.selected_section = "queue"
            state.selected_index = max(0, len(state.queue) - 1)
        state.clamp_selection()
        self.request_repaint()

    def clear_active(self) -> None:
        state = self.state
        if state.active is None:
            return
        self.store.clear_active_task()
        state.idle_observations = 0
        state.focus_block = "queue"
        self.reload()
        self.request_repaint()
