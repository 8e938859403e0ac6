from __future__ import annotations

import logging
import os
import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Ensure the repository root (parent of this package) is on ``sys.path``.

    Lets ``python escape_terminal/__main__.py`` work as well as
    ``python -m escape_terminal``.
    """
    pkg_dir = Path(__file__).resolve().parent
    repo_root_str = str(pkg_dir.parent)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


try:
    # Works when executed as a module: python -m escape_terminal
    from .app import run  # type: ignore[attr-defined]
    from .config import LOG_LEVEL_ENV, StartupError  # type: ignore[attr-defined]
except ImportError:
    # Works when executed as a script.
    _ensure_repo_root_on_path()
    from escape_terminal.app import run  # type: ignore[attr-defined]
    from escape_terminal.config import LOG_LEVEL_ENV, StartupError  # type: ignore[attr-defined]


def _init_logging() -> None:
    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        stream=sys.stderr,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def main() -> int:
    """Entry point: run the game, exit 1 if a startup input is missing or malformed."""
    _init_logging()
    try:
        return run()
    except StartupError as exc:
        logging.getLogger("escape_terminal").error("cannot start: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
