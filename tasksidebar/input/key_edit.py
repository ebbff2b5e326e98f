"""Edit-mode keyboard handling for the add/edit input line."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..state import AppState
from .decoder import KeyEvent
from .key_registry import KeyBinding, KeyBindingTable
from .line_edit import EditBuffer


@dataclass(frozen=True)
class EditKeyContext:
    """State plus the narrow repaint hooks used while the input line is open."""

    state: AppState
    wrap_width: Callable[[], int]
    submit: Callable[[], None]
    cancel: Callable[[], None]
    paste: Callable[[str], None]
    repaint_input: Callable[[], None]
    move_cursor: Callable[[], None]


def handle_edit_key(event: KeyEvent, context: EditKeyContext) -> None:
    state = context.state

    def apply(operation: Callable[[EditBuffer], EditBuffer]) -> Callable[[KeyEvent], bool]:
        """Apply ``operation`` and pick the narrowest repaint for what changed."""

        def action(_event: KeyEvent) -> bool:
            before = state.edit.buffer
            after = operation(before)
            if after == before:
                return False
            state.edit.buffer = after
            if after.text != before.text:
                context.repaint_input()
            else:
                context.move_cursor()
            return False

        return action

    def submit(_event: KeyEvent) -> bool:
        context.submit()
        return False

    def cancel(_event: KeyEvent) -> bool:
        context.cancel()
        return False

    def paste(event: KeyEvent) -> bool:
        context.paste(event.text)
        return False

    def type_text(event: KeyEvent) -> bool:
        return apply(lambda buffer: buffer.insert(event.text))(event)

    bindings = KeyBindingTable().bind(
        KeyBinding(("ENTER",), submit),
        KeyBinding(("ESC", "CTRL_C"), cancel),
        KeyBinding(("PASTE",), paste),
        KeyBinding(("BACKSPACE",), apply(EditBuffer.backspace)),
        KeyBinding(("LEFT",), apply(EditBuffer.move_left)),
        KeyBinding(("RIGHT",), apply(EditBuffer.move_right)),
        KeyBinding(("UP",), apply(lambda buffer: buffer.move_up(context.wrap_width()))),
        KeyBinding(("DOWN",), apply(lambda buffer: buffer.move_down(context.wrap_width()))),
        KeyBinding(("WORD_LEFT",), apply(EditBuffer.word_left)),
        KeyBinding(("WORD_RIGHT",), apply(EditBuffer.word_right)),
        KeyBinding(("CTRL_A",), apply(lambda buffer: buffer.line_start(context.wrap_width()))),
        KeyBinding(("CTRL_E",), apply(lambda buffer: buffer.line_end(context.wrap_width()))),
        KeyBinding(("CTRL_U",), apply(EditBuffer.kill_to_start)),
        KeyBinding(("CTRL_K",), apply(EditBuffer.kill_to_end)),
        KeyBinding(("CTRL_W",), apply(EditBuffer.kill_word)),
    )
    if event.key == "TEXT":
        type_text(event)
        return
    bindings.dispatch(event)
