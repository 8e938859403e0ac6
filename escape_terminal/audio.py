"""Pygame audio adapter for the music hint.

Playback is fire-and-forget: the game loop never waits on it, and a track that
cannot be opened only costs a warning in the log.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import pygame

from .config import StartupError

logger = logging.getLogger(__name__)


class AudioPlayer(Protocol):
    def play(self, path: Path) -> None: ...


class MixerPlayer:
    def __init__(self) -> None:
        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init()
        except pygame.error as exc:
            raise StartupError(f"audio subsystem failed to start: {exc}") from exc

    def play(self, path: Path) -> None:
        try:
            pygame.mixer.music.load(str(path))
            pygame.mixer.music.play()
        except (pygame.error, OSError) as exc:
            logger.warning("could not play %s: %s", path, exc)
            return
        logger.info("playing %s", path)

    def stop(self) -> None:
        if pygame.mixer.get_init() is not None:
            pygame.mixer.music.stop()
