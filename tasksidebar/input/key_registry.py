"""Key-token dispatch table shared by the normal and edit handlers."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .decoder import KeyEvent

KeyAction = Callable[[KeyEvent], "bool | None"]


@dataclass(frozen=True)
class KeyBinding:
    """One action bound to every token in ``keys``.

    Tokens are decoder key names (``"UP"``, ``"CTRL_W"``) or, for ``TEXT``
    events, the typed character itself.
    """

    keys: tuple[str, ...]
    action: KeyAction


def event_token(event: KeyEvent) -> str:
    return event.text if event.key == "TEXT" else event.key


class KeyBindingTable:
    def __init__(self) -> None:
        self._actions: dict[str, KeyAction] = {}

    def bind(self, *bindings: KeyBinding) -> KeyBindingTable:
        """Register ``bindings``; later bindings replace earlier ones per token."""
        for binding in bindings:
            for key in binding.keys:
                self._actions[key] = binding.action
        return self

    def bound(self, event: KeyEvent) -> bool:
        return event_token(event) in self._actions

    def dispatch(self, event: KeyEvent) -> bool | None:
        """Run the action for ``event``; ``None`` means nothing was bound."""
        action = self._actions.get(event_token(event))
        if action is None:
            return None
        return action(event)
