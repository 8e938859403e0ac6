from __future__ import annotations

import os
from pathlib import Path

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

from escape_terminal.__main__ import main  # noqa: E402
from escape_terminal.config import GAME_DIR_ENV, WATCH_DIR_ENV  # noqa: E402


def test_main_exits_1_when_game_dir_is_empty(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(GAME_DIR_ENV, str(tmp_path))
    monkeypatch.setenv(WATCH_DIR_ENV, str(tmp_path))
    assert main() == 1


def test_main_exits_1_on_malformed_email(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "password.txt").write_text("pw", encoding="utf-8")
    (tmp_path / "mode.txt").write_text("", encoding="utf-8")
    (tmp_path / "emails").mkdir()
    (tmp_path / "emails" / "bad.email").write_text("to: nobody\n", encoding="utf-8")
    monkeypatch.setenv(GAME_DIR_ENV, str(tmp_path))
    monkeypatch.setenv(WATCH_DIR_ENV, str(tmp_path))
    assert main() == 1
