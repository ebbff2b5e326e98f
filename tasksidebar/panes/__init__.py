"""Pane backends and startup capability detection."""

from __future__ import annotations

from collections.abc import Mapping

from loguru import logger

from ..store import PaneIdRecord
from .base import DEFAULT_TIMEOUT_SECONDS, PaneBackend, output_is_idle_at_prompt
from .iterm import ITermBackend, is_in_iterm
from .tmux import TmuxBackend, is_in_tmux

__all__ = [
    "ITermBackend",
    "PaneBackend",
    "TmuxBackend",
    "detect_backend",
    "env_info",
    "is_in_iterm",
    "is_in_tmux",
    "output_is_idle_at_prompt",
]


def detect_backend(
    env: Mapping[str, str],
    record: PaneIdRecord,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    *,
    prefer_tmux: bool = False,
) -> PaneBackend | None:
    """Pick the pane backend once at startup.

    iTerm2 wins outside tmux unless ``prefer_tmux`` is set; tmux comes next;
    otherwise ``None``.
    """
    in_tmux = is_in_tmux(env)
    if is_in_iterm(env) and not in_tmux and not prefer_tmux:
        logger.info("using iTerm2 pane backend")
        return ITermBackend(timeout_seconds=timeout_seconds)
    if in_tmux:
        logger.info("using tmux pane backend")
        return TmuxBackend(record, env, timeout_seconds=timeout_seconds)
    logger.info("no pane backend detected")
    return None


def env_info(env: Mapping[str, str], record: PaneIdRecord) -> dict[str, str]:
    """Diagnostic fields printed by ``tasksidebar env``."""
    info = {
        "in_iterm": "yes" if is_in_iterm(env) else "no",
        "in_tmux": "yes" if is_in_tmux(env) else "no",
        "term_program": env.get("TERM_PROGRAM", "unknown"),
        "term": env.get("TERM", "unknown"),
        "shell": env.get("SHELL", "unknown"),
        "stored_pane": record.read() or "none",
    }
    backend = detect_backend(env, record)
    info.update(backend.describe() if backend is not None else {"backend": "none"})
    return info
