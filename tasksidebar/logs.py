"""Logging setup.

The sidebar owns stdout for painting, so loguru's default stderr sink is
replaced with a rotating file under the platform log directory.
"""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger
from platformdirs import user_log_dir

APP_NAME = "tasksidebar"
LOG_FILENAME = "sidebar.log"
DEFAULT_LOG_DIR = Path(user_log_dir(APP_NAME, appauthor=False))


def configure_logging(level: str = "INFO", log_dir: Path | None = None, *, to_stderr: bool = False) -> Path:
    """Route loguru output to ``log_dir/sidebar.log`` and return that path.

    ``to_stderr`` keeps a stderr sink for short-lived subcommands that do not
    take over the terminal.
    """
    target_dir = log_dir if log_dir is not None else DEFAULT_LOG_DIR
    log_path = target_dir / LOG_FILENAME
    logger.remove()
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            level=level,
            rotation="1 MB",
            retention=3,
            enqueue=False,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <7} | {name}:{line} - {message}",
        )
    except OSError as exc:
        logger.add(sys.stderr, level="WARNING")
        logger.warning("cannot open log file {}: {}", log_path, exc)
        return log_path
    if to_stderr:
        logger.add(sys.stderr, level="WARNING", format="{message}")
    return log_path
