"""Project identity helpers.

Each working directory gets its own task scope keyed by a short hash, and the
header falls back to git/cwd details when no statusline snapshot exists.
"""

from __future__ import annotations

import hashlib
import subprocess
from pathlib import Path

PROJECT_HASH_LENGTH = 12


def project_hash(cwd: Path) -> str:
    """Return a stable short hash of ``cwd`` used as the project scope key."""
    return hashlib.sha256(str(cwd).encode("utf-8", errors="surrogateescape")).hexdigest()[:PROJECT_HASH_LENGTH]


def project_label(cwd: Path) -> str:
    return cwd.name or str(cwd)


def git_branch(cwd: Path, timeout_seconds: float = 0.5) -> str:
    """Return the current git branch for ``cwd`` or ``""`` when unavailable."""
    try:
        proc = subprocess.run(
            ["git", "-C", str(cwd), "rev-parse", "--abbrev-ref", "HEAD"],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.SubprocessError):
        return ""
    if proc.returncode != 0:
        return ""
    return proc.stdout.strip()
