"""Input decoding and line-editing primitives.

Key handlers live in ``key_normal``/``key_edit`` and are imported by module
path so that ``state`` can depend on ``line_edit`` without a cycle.
"""

from __future__ import annotations

from .decoder import ESC_SEQUENCE_TIMEOUT_MS, InputDecoder, KeyEvent
from .line_edit import EditBuffer

__all__ = [
    "ESC_SEQUENCE_TIMEOUT_MS",
    "EditBuffer",
    "InputDecoder",
    "KeyEvent",
]
