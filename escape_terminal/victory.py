"""Victory tab: matrix rain, then the logo fades in over it.

The whole effect is a pure function of the number of frames since the tab was
first shown and the screen size (``victory_frame``); the tab state only
remembers the frame it started on.
"""

from __future__ import annotations

import random
import string
from dataclasses import dataclass

from .cells import BRIGHT_GREEN, DARK_GREEN, GREEN, CellBuffer, Rect, Style
from .tab_core import KeyPress

DELAY_FRAMES = 10
GROW_CHANCE = 0.75
REVEAL_FRAMES = 30
LOGO_SEED = 42

ALPHABET = (
    "".join(chr(c) for c in range(ord("ｦ"), ord("ﾝ") + 1))
    + string.ascii_uppercase
    + string.digits
)

LOGO: tuple[str, ...] = (
    "    ██    ██ ██  ██████ ████████  ██████  ██ ██████  ███████ ██",
    "    ██    ██ ██ ██         ██    ██    ██ ██ ██   ██ ██      ██",
    "    ██    ██ ██ ██         ██    ██    ██ ██ ██████  █████   ██",
    "     ██  ██  ██ ██         ██    ██    ██ ██ ██   ██ ██",
    "      ████   ██  ██████    ██     ██████  ██ ██   ██ ███████ ██",
    "",
    "",
    " ██████  ██████  ██████  ███████        ██████   ██████  ██   ██ ██████",
    "██      ██    ██ ██   ██ ██      ██          ██ ██       ██   ██      ██",
    "██      ██    ██ ██   ██ █████           █████  ███████  ███████  █████",
    "██      ██    ██ ██   ██ ██      ██          ██ ██    ██      ██ ██",
    " ██████  ██████  ██████  ███████        ██████   ██████       ██ ███████",
)
LOGO_WIDTH = max(len(line) for line in LOGO)

_RAIN = Style(fg=DARK_GREEN)
_RAIN_HEAD = Style(fg=BRIGHT_GREEN)
_LOGO = Style(fg=GREEN)


def matrix_rain(ticks: int, width: int, height: int, *, seed: int) -> tuple[list[list[str]], int | None]:
    """Grow the rain columns for ``ticks`` ticks.

    Returns the columns and the tick on which the last column filled up, or
    ``None`` while some column is still growing.
    """

    rng = random.Random(seed)
    columns: list[list[str]] = [[] for _ in range(width)]
    for tick in range(1, ticks + 1):
        for column in columns:
            if len(column) < height and rng.random() <= GROW_CHANCE:
                column.append(rng.choice(ALPHABET))
        if all(len(column) == height for column in columns):
            return columns, tick
    return columns, None


def reveal_logo(buf: CellBuffer, fraction: float) -> None:
    """Draw a fixed pseudo-random ``fraction`` of the logo's glyphs, centred."""

    area: Rect = buf.area.centered(LOGO_WIDTH, len(LOGO))
    rng = random.Random(LOGO_SEED)
    for row in range(area.h):
        line = LOGO[row]
        for col in range(area.w):
            if rng.random() > fraction:
                continue
            glyph = line[col] if col < len(line) else " "
            if glyph == " ":
                continue
            buf.set(area.x + col, area.y + row, glyph, _LOGO)


def victory_frame(elapsed: int, width: int, height: int, *, seed: int) -> CellBuffer:
    buf = CellBuffer(width, height)
    ticks = elapsed - DELAY_FRAMES
    if ticks <= 0:
        return buf

    columns, done_tick = matrix_rain(ticks, width, height, seed=seed)
    for x, column in enumerate(columns):
        for y, glyph in enumerate(column):
            buf.set(x, y, glyph, _RAIN)
        if column and len(column) != height:
            buf.set(x, len(column) - 1, column[-1], _RAIN_HEAD)

    if done_tick is None:
        return buf
    reveal_logo(buf, min(1.0, (ticks - done_tick) / REVEAL_FRAMES))
    return buf


@dataclass(slots=True)
class VictoryState:
    started_at: int | None = None


@dataclass(frozen=True, slots=True)
class VictoryAnimation:
    rain_seed: int

    def new_state(self) -> VictoryState:
        return VictoryState()

    def render(self, buf: CellBuffer, area: Rect, state: VictoryState) -> None:
        # Only reached through the regular tab path; the controller uses teardown().
        return None

    def handle_input(self, event: KeyPress, state: VictoryState) -> int | None:
        return None

    def teardown(self, frame: int, width: int, height: int, state: VictoryState) -> CellBuffer:
        """Full-screen frame replacing the normal tab rendering."""
        if state.started_at is None:
            state.started_at = frame
        return victory_frame(frame - state.started_at, width, height, seed=self.rain_seed)
