"""Best-effort matching of the active task against the assistant's todo list.

When the assistant marks a todo ``completed`` whose wording overlaps the
active task enough, the sidebar treats the task as finished. This is a
heuristic: a threshold of ``0`` turns it off.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .models import AssistantTodo

_WORD_RE = re.compile(r"[a-z0-9]+")
_MIN_WORD_LENGTH = 3


def word_set(text: str) -> set[str]:
    """Lowercased alphanumeric words of at least three characters."""
    return {word for word in _WORD_RE.findall(text.lower()) if len(word) >= _MIN_WORD_LENGTH}


def word_overlap(left: str, right: str) -> float:
    """Jaccard similarity of the two word sets (``0.0`` when either is empty)."""
    a = word_set(left)
    b = word_set(right)
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def best_completed_match(
    content: str,
    todos: Iterable[AssistantTodo],
    threshold: float,
) -> AssistantTodo | None:
    """Return the completed todo most similar to ``content`` at or above ``threshold``."""
    if threshold <= 0:
        return None
    best: AssistantTodo | None = None
    best_score = 0.0
    for todo in todos:
        if todo.status != "completed":
            continue
        score = word_overlap(content, todo.content)
        if score >= threshold and score > best_score:
            best = todo
            best_score = score
    return best
