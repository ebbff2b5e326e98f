"""JSON config loading.

Covers polling intervals, the dispatch policy, and retention limits.
A missing or malformed file, or a malformed value, falls back to the default.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger
from platformdirs import user_config_dir, user_data_dir

APP_NAME = "tasksidebar"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
DEFAULT_DATA_DIR = Path(user_data_dir(APP_NAME, appauthor=False))

DISPATCH_POLICIES = ("reject", "replace")
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class SidebarConfig:
    """Runtime knobs; every field has a safe default."""

    data_refresh_seconds: float = 1.0
    completion_check_seconds: float = 2.0
    completion_confirmations: int = 2
    dispatch_policy: str = "reject"
    done_limit: int = 20
    pane_timeout_seconds: float = 3.0
    todo_match_threshold: float = 0.6
    data_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = path if path is not None else CONFIG_PATH
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config {}: {}", config_path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _positive_float(value: object, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return float(value) if value > 0 else default


def _positive_int(value: object, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value if value > 0 else default


def _ratio(value: object, default: float) -> float:
    """Accept values in ``[0, 1]``; ``0`` disables the feature it controls."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return float(value) if 0 <= value <= 1 else default


def config_from_mapping(data: dict[str, object]) -> SidebarConfig:
    """Build a ``SidebarConfig`` from raw JSON, dropping invalid values."""
    defaults = SidebarConfig()
    policy = data.get("dispatch_policy")
    if policy not in DISPATCH_POLICIES:
        policy = defaults.dispatch_policy
    level = data.get("log_level")
    level = level.upper() if isinstance(level, str) else ""
    if level not in LOG_LEVELS:
        level = defaults.log_level
    raw_dir = data.get("data_dir")
    data_dir = Path(raw_dir).expanduser() if isinstance(raw_dir, str) and raw_dir.strip() else defaults.data_dir
    return SidebarConfig(
        data_refresh_seconds=_positive_float(data.get("data_refresh_seconds"), defaults.data_refresh_seconds),
        completion_check_seconds=_positive_float(
            data.get("completion_check_seconds"), defaults.completion_check_seconds
        ),
        completion_confirmations=_positive_int(
            data.get("completion_confirmations"), defaults.completion_confirmations
        ),
        dispatch_policy=str(policy),
        done_limit=_positive_int(data.get("done_limit"), defaults.done_limit),
        pane_timeout_seconds=_positive_float(data.get("pane_timeout_seconds"), defaults.pane_timeout_seconds),
        todo_match_threshold=_ratio(data.get("todo_match_threshold"), defaults.todo_match_threshold),
        data_dir=data_dir,
        log_level=level,
    )


def load_sidebar_config(path: Path | None = None) -> SidebarConfig:
    return config_from_mapping(load_config(path))
