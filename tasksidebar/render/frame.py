"""Full-frame composition for the sidebar.

``build_frame`` turns ``AppState`` into a list of ready-to-paint rows plus the
cursor placement; ``paint_frame`` emits the whole frame as one synchronized
write. Nothing here mutates state.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .. import ansi
from ..models import QueuedTask, StatuslineSnapshot
from ..state import AppState
from ..ui_theme import SidebarTheme, theme_for_focus
from .input_line import (
    CONTINUATION_PREFIX,
    LEFT_MARGIN,
    content_width,
    cursor_cell,
    format_input_rows,
    input_wrap_width,
)

HEADER_SEPARATOR = " · "
CONTEXT_BAR_WIDTH = 10
STATUS_WARN_PERCENT = 60
STATUS_CRITICAL_PERCENT = 80

ADD_PREFIX = "  [ ] "
ACTIVE_MARKER = "▸   "
ACTIVE_SELECTED_MARKER = "[>] "
TODO_IN_PROGRESS_MARKER = "●   "
TODO_PENDING_MARKER = "○   "
REVIEW_MARKER = " ?  "
REVIEW_SELECTED_MARKER = "[?] "

HINT_EDITING = "↵: submit | Esc: cancel"
HINT_ACTIVE_BLOCK = "Tab: to-dos | d: clear active | Esc: quit"
HINT_REVIEW = "d: done | r: return to progress | ↑↓: navigate"
HINT_QUEUE = "a: add | e: edit | d: del | ↵: send | c: clarify"


@dataclass(frozen=True)
class Frame:
    lines: list[str]
    input_row: int
    filler_rows: int
    cursor: tuple[int, int] | None
    input_rows: int = 0
    input_prefix: str = ""


def footer_rows(statusline: StatuslineSnapshot | None) -> int:
    """Help hint, spacer, optional metrics line, and bottom padding."""
    return 4 if statusline is not None else 3


def filler_rows(height: int, content_rows: int, statusline: StatuslineSnapshot | None) -> int:
    return max(0, height - content_rows - footer_rows(statusline))


def header_text(state: AppState) -> str:
    """``repo · branch`` from the statusline, falling back to startup probes."""
    statusline = state.statusline
    repo = (statusline.repo if statusline else "") or state.header_repo
    branch = (statusline.branch if statusline else "") or state.header_branch
    if repo and branch:
        return f"{repo}{HEADER_SEPARATOR}{branch}"
    return repo or branch


def footer_hint(state: AppState) -> str:
    if state.status_message:
        return state.status_message
    if state.editing:
        return HINT_EDITING
    if state.focus_block == "active":
        return HINT_ACTIVE_BLOCK
    if state.selected_section == "done":
        return HINT_REVIEW
    return HINT_QUEUE


def context_bar(percent: int) -> str:
    clamped = max(0, min(100, percent))
    filled = round(clamped / 100 * CONTEXT_BAR_WIDTH)
    return "█" * filled + "░" * (CONTEXT_BAR_WIDTH - filled)


def metrics_line(theme: SidebarTheme, statusline: StatuslineSnapshot) -> str:
    percent = statusline.context_percent
    if percent >= STATUS_CRITICAL_PERCENT:
        color = theme.context_critical
    elif percent >= STATUS_WARN_PERCENT:
        color = theme.context_warn
    else:
        color = theme.context_ok
    return (
        f"{color}{context_bar(percent)}{theme.reset}{theme.background} {theme.text}{percent}%"
        f"  ${statusline.cost_usd:.2f}  {statusline.duration_min}m"
    )


class _FrameBuilder:
    def __init__(self, state: AppState, theme: SidebarTheme) -> None:
        self.state = state
        self.theme = theme
        self.width = max(1, state.width)
        self.content_width = content_width(self.width)
        self.wrap_width = input_wrap_width(self.width)
        self.lines: list[str] = []
        self.input_row = 0
        self.input_rows = 0
        self.input_prefix = ""
        self.queue_start = 0
        self.anchor: tuple[int, int] | None = None

    def blank(self) -> None:
        self.lines.append(f"{self.theme.background}{' ' * self.width}{self.theme.reset}")

    def row(self, body: str) -> None:
        theme = self.theme
        self.lines.append(
            f"{theme.background}{' ' * LEFT_MARGIN}{body}{theme.reset}{theme.background}{ansi.CLEAR_TO_END}{theme.reset}"
        )

    def heading(self, title: str) -> None:
        self.row(f"{self.theme.heading}{self.theme.text}{title}")

    def clip(self, text: str, cols: int) -> str:
        return ansi.clip_text(text.replace("\n", " "), cols)

    def add_input(self, first_prefix: str, text: str) -> None:
        self.input_row = len(self.lines) + 1
        self.input_prefix = first_prefix
        rows = format_input_rows(self.theme, first_prefix, text, self.wrap_width)
        self.input_rows = len(rows)
        self.anchor = (len(self.lines), len(self.lines) + len(rows) - 1)
        self.lines.extend(rows)

    # -------------------- sections --------------------
    def header(self) -> None:
        self.blank()
        self.row(f"{self.theme.text}{self.clip(header_text(self.state), self.width - LEFT_MARGIN)}")
        self.blank()

    def in_progress(self) -> None:
        state = self.state
        theme = self.theme
        self.heading("In Progress")
        if state.active is not None:
            selected = state.focus_block == "active" and state.terminal_focused
            marker = ACTIVE_SELECTED_MARKER if selected else ACTIVE_MARKER
            self.row(f"{theme.active}{marker}{self.clip(state.active.content, self.content_width)}")
        for todo in state.todos:
            if todo.status == "completed":
                continue
            if todo.status == "in_progress":
                self.row(f"{theme.active}{TODO_IN_PROGRESS_MARKER}{self.clip(todo.content, self.content_width)}")
            else:
                self.row(f"{theme.text}{TODO_PENDING_MARKER}{self.clip(todo.content, self.content_width)}")
        self.blank()

    def review(self) -> None:
        state = self.state
        theme = self.theme
        if not state.done:
            return
        self.heading(f"Review ({len(state.done)})")
        for idx, entry in enumerate(state.visible_done()):
            selected = (
                state.selected_section == "done"
                and state.focus_block == "queue"
                and idx == state.done_selected_index
                and state.terminal_focused
            )
            marker = REVIEW_SELECTED_MARKER if selected else REVIEW_MARKER
            color = theme.text if selected else theme.muted
            self.row(f"{color}{marker}{self.clip(entry.content, self.content_width)}")
        self.blank()

    def queue_task(self, idx: int, task: QueuedTask) -> None:
        state = self.state
        theme = self.theme
        selected = (
            state.selected_section == "queue"
            and state.focus_block == "queue"
            and idx == state.selected_index
        )
        focused_selection = selected and state.terminal_focused
        star = "★ " if task.recommended else "  "
        bracket = "[>] " if focused_selection else "[ ] "
        color = theme.text if task.clarified else theme.muted
        editing = state.edit.mode == "edit" and state.edit.editing_task_id == task.id
        if editing:
            self.add_input(f"{star}{bracket}", state.edit.buffer.text)
            return
        first_row = len(self.lines)
        content = task.content.replace("\n", " ")
        if focused_selection and ansi.display_width(content) > self.wrap_width:
            for line_idx, chunk in enumerate(ansi.word_wrap(content, self.wrap_width)):
                prefix = f"{star}{bracket}" if line_idx == 0 else CONTINUATION_PREFIX
                self.row(f"{color}{prefix}{self.clip(chunk, self.wrap_width)}")
        else:
            self.row(f"{color}{star}{bracket}{self.clip(content, self.wrap_width)}")
        if focused_selection and task.plan_path:
            self.row(f"{theme.muted}{CONTINUATION_PREFIX}{self.clip(f'→ {task.plan_path}', self.wrap_width)}")
        if selected and self.anchor is None:
            self.anchor = (first_row, len(self.lines) - 1)

    def queue(self) -> None:
        state = self.state
        count = f" ({len(state.queue)})" if state.queue else ""
        self.heading(f"To-dos{count}")
        self.queue_start = len(self.lines)
        for idx, task in enumerate(state.queue):
            self.queue_task(idx, task)
        if state.edit.mode == "add":
            self.add_input(ADD_PREFIX, state.edit.buffer.text)
        elif state.terminal_focused:
            self.row(f"{self.theme.hint}{ADD_PREFIX}press a to add")

    def footer(self) -> None:
        state = self.state
        self.row(f"{self.theme.muted}{self.clip(footer_hint(state), self.width - LEFT_MARGIN)}")
        self.blank()
        if state.statusline is not None:
            self.row(metrics_line(self.theme, state.statusline))
        self.blank()

    def clip_queue(self) -> None:
        """Scroll the To-dos rows so the frame fits, keeping the anchor on screen."""
        budget = max(0, self.state.height - footer_rows(self.state.statusline))
        overflow = len(self.lines) - budget
        if overflow <= 0:
            return
        body = self.lines[self.queue_start :]
        keep = max(0, len(body) - overflow)
        top = 0
        if self.anchor is not None:
            first, last = (row - self.queue_start for row in self.anchor)
            top = min(max(0, last - keep + 1), first)
        self.lines = self.lines[: self.queue_start] + body[top : top + keep]
        del self.lines[budget:]
        if self.input_row:
            self.input_row -= top
            if not self.queue_start < self.input_row <= len(self.lines):
                self.input_row = 0
                self.input_rows = 0

    def build(self) -> Frame:
        self.header()
        self.in_progress()
        self.review()
        self.queue()
        self.clip_queue()
        fill = filler_rows(self.state.height, len(self.lines), self.state.statusline)
        for _ in range(fill):
            self.blank()
        self.footer()
        cursor = None
        if self.state.editing and self.input_row > 0:
            buffer = self.state.edit.buffer
            cursor = cursor_cell(self.input_row, buffer.text, buffer.cursor, self.wrap_width)
        return Frame(
            lines=self.lines,
            input_row=self.input_row,
            filler_rows=fill,
            cursor=cursor,
            input_rows=self.input_rows,
            input_prefix=self.input_prefix,
        )


def build_frame(state: AppState, theme: SidebarTheme | None = None) -> Frame:
    """Compose every visible row for ``state``."""
    return _FrameBuilder(state, theme or theme_for_focus(state.terminal_focused)).build()


def paint_frame(write: Callable[[str], None], frame: Frame) -> None:
    """Emit ``frame`` as a single synchronized write."""
    out = [ansi.CURSOR_HOME, "\r\n".join(frame.lines)]
    if frame.cursor is not None:
        out.append(ansi.cursor_to(*frame.cursor))
        out.append(ansi.SHOW_CURSOR)
    else:
        out.append(ansi.HIDE_CURSOR)
    write(ansi.synchronized("".join(out)))
