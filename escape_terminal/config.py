from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .email_reader import Email, EmailFormatError, load_emails

logger = logging.getLogger(__name__)

GAME_DIR_ENV = "ESCAPE_GAME_DIR"
WATCH_DIR_ENV = "ESCAPE_WATCH_DIR"
LOG_LEVEL_ENV = "ESCAPE_LOG_LEVEL"

DEFAULT_WATCH_DIR = Path("/dev/disk/by-label")
DISABLED_MODE_PREFIX = "disabled"


class StartupError(RuntimeError):
    """A startup input is missing or malformed; the game cannot start."""


@dataclass(frozen=True, slots=True)
class GameConfig:
    game_dir: Path
    watch_dir: Path = DEFAULT_WATCH_DIR

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GameConfig:
        env = os.environ if environ is None else environ
        game_dir = Path(env.get(GAME_DIR_ENV, "") or Path.cwd())
        watch_dir = Path(env.get(WATCH_DIR_ENV, "") or DEFAULT_WATCH_DIR)
        return cls(game_dir=game_dir, watch_dir=watch_dir)

    @property
    def password_path(self) -> Path:
        return self.game_dir / "password.txt"

    @property
    def emails_dir(self) -> Path:
        return self.game_dir / "emails"

    @property
    def mode_path(self) -> Path:
        return self.game_dir / "mode.txt"

    @property
    def music_path(self) -> Path:
        return self.game_dir / "clairdelune.mp3"


@dataclass(frozen=True, slots=True)
class GameInputs:
    password: str
    emails: tuple[Email, ...]
    disabled: bool


def _read_text(path: Path, what: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise StartupError(f"{what} not readable ({path}): {exc}") from exc


def load_game_inputs(config: GameConfig) -> GameInputs:
    """Read the password, the mailbox and the run mode from the game directory."""

    password = _read_text(config.password_path, "password file").strip()

    try:
        emails = load_emails(config.emails_dir)
    except (OSError, UnicodeDecodeError) as exc:
        raise StartupError(f"email folder not readable ({config.emails_dir}): {exc}") from exc
    except EmailFormatError as exc:
        raise StartupError(f"malformed email: {exc}") from exc
    if not emails:
        raise StartupError(f"no *.email files in {config.emails_dir}")

    mode = _read_text(config.mode_path, "mode file")
    disabled = mode.startswith(DISABLED_MODE_PREFIX)

    logger.info(
        "startup inputs loaded from %s (%d emails, mode=%s, password=%s)",
        config.game_dir,
        len(emails),
        "disabled" if disabled else "normal",
        "set" if password else "empty",
    )
    return GameInputs(password=password, emails=tuple(emails), disabled=disabled)
