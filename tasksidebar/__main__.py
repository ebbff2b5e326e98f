"""Module entrypoint for ``python -m tasksidebar``.

Argument parsing and runtime setup happen in ``tasksidebar.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
