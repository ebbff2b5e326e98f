"""Pytest bootstrap for local source imports and quiet logging.

The ``pytest`` console script can run with a sys.path that excludes the
repository root. Ensure ``import tasksidebar`` resolves to the local package,
and keep loguru's default stderr sink from interleaving with test output.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from loguru import logger


PROJECT_ROOT = Path(__file__).resolve().parent.parent
PROJECT_ROOT_STR = str(PROJECT_ROOT)

if PROJECT_ROOT_STR not in sys.path:
    sys.path.insert(0, PROJECT_ROOT_STR)


@pytest.fixture(autouse=True)
def _silence_loguru():
    logger.remove()
    yield
    logger.remove()
