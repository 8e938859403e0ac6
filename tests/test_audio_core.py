from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402

from escape_terminal.audio import MixerPlayer  # noqa: E402
from escape_terminal.config import StartupError  # noqa: E402


def test_mixer_init_failure_is_startup_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_init(*args: object, **kwargs: object) -> None:
        raise pygame.error("no audio device")

    monkeypatch.setattr(pygame.mixer, "get_init", lambda: None)
    monkeypatch.setattr(pygame.mixer, "init", broken_init)

    with pytest.raises(StartupError, match="no audio device"):
        MixerPlayer()


def test_missing_track_only_logs_a_warning(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    player = MixerPlayer()
    try:
        with caplog.at_level(logging.WARNING, logger="escape_terminal.audio"):
            player.play(tmp_path / "absent.mp3")
    finally:
        player.stop()
        pygame.mixer.quit()

    assert "could not play" in caplog.text
    assert "absent.mp3" in caplog.text
