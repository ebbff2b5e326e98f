"""Normal-mode keyboard handling.

Selection movement is handled here directly; anything that touches the store
or the pane backend goes through callables bound by the controller.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..state import AppState
from .decoder import KeyEvent
from .key_registry import KeyBinding, KeyBindingTable


@dataclass(frozen=True)
class NormalKeyContext:
    """State and bound operations required for normal-mode key handling."""

    state: AppState
    start_add: Callable[[], None]
    start_edit: Callable[[], None]
    dispatch_selected: Callable[[], None]
    clarify_selected: Callable[[], None]
    delete_selected: Callable[[], None]
    clear_active: Callable[[], None]
    return_selected_to_active: Callable[[], None]
    repaint: Callable[[], None]


def move_selection(state: AppState, direction: int) -> bool:
    """Step through Queue then Review as one circular list; return whether it moved."""
    queue_len = len(state.queue)
    done_len = len(state.visible_done())
    if queue_len == 0 and done_len == 0:
        return False
    before = (state.selected_section, state.selected_index, state.done_selected_index)

    if state.selected_section == "queue":
        if queue_len == 0:
            state.selected_section = "done"
            state.done_selected_index = 0 if direction > 0 else done_len - 1
        elif direction < 0 and state.selected_index > 0:
            state.selected_index -= 1
        elif direction > 0 and state.selected_index < queue_len - 1:
            state.selected_index += 1
        elif done_len > 0:
            state.selected_section = "done"
            state.done_selected_index = done_len - 1 if direction < 0 else 0
        else:
            state.selected_index = queue_len - 1 if direction < 0 else 0
    else:
        if direction < 0 and state.done_selected_index > 0:
            state.done_selected_index -= 1
        elif direction > 0 and state.done_selected_index < done_len - 1:
            state.done_selected_index += 1
        elif queue_len > 0:
            state.selected_section = "queue"
            state.selected_index = queue_len - 1 if direction < 0 else 0
        else:
            state.done_selected_index = done_len - 1 if direction < 0 else 0

    return (state.selected_section, state.selected_index, state.done_selected_index) != before


def jump_to_queue_position(state: AppState, position: int) -> bool:
    """Select the 1-based ``position`` in the sorted Queue; no-op when out of range."""
    index = position - 1
    if not 0 <= index < len(state.queue):
        return False
    state.selected_section = "queue"
    state.selected_index = index
    return True


def handle_normal_key(event: KeyEvent, context: NormalKeyContext) -> bool:
    """Handle one normal-mode key and return ``True`` when the app should quit."""
    state = context.state

    if event.key in {"ESC", "CTRL_C"}:
        return True

    if event.key == "TAB":
        state.focus_block = "active" if state.focus_block == "queue" else "queue"
        context.repaint()
        return False

    if state.focus_block == "active":
        if event.key == "TEXT" and event.text == "d" and state.active is not None:
            context.clear_active()
        return False

    def navigate(direction: int) -> Callable[[KeyEvent], bool]:
        def action(_event: KeyEvent) -> bool:
            if move_selection(state, direction):
                context.repaint()
            return False

        return action

    def jump(event: KeyEvent) -> bool:
        if jump_to_queue_position(state, int(event.text)):
            context.repaint()
        return False

    def on_queue(operation: Callable[[], None]) -> Callable[[KeyEvent], bool]:
        def action(_event: KeyEvent) -> bool:
            if state.selected_task() is not None:
                operation()
            return False

        return action

    def add(_event: KeyEvent) -> bool:
        context.start_add()
        return False

    def delete(_event: KeyEvent) -> bool:
        if state.selected_section == "queue":
            if state.selected_task() is not None:
                context.delete_selected()
        elif state.selected_done() is not None:
            context.delete_selected()
        return False

    def return_to_active(_event: KeyEvent) -> bool:
        if state.selected_done() is not None:
            context.return_selected_to_active()
        return False

    bindings = KeyBindingTable().bind(
        KeyBinding(("UP", "k"), navigate(-1)),
        KeyBinding(("DOWN", "j"), navigate(1)),
        KeyBinding(tuple(str(digit) for digit in range(1, 10)), jump),
        KeyBinding(("ENTER",), on_queue(context.dispatch_selected)),
        KeyBinding(("c", "CTRL_ENTER"), on_queue(context.clarify_selected)),
        KeyBinding(("a",), add),
        KeyBinding(("e",), on_queue(context.start_edit)),
        KeyBinding(("d",), delete),
        KeyBinding(("r",), return_to_active),
    )
    return bool(bindings.dispatch(event))
