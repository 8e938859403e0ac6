"""Pygame shell for the escape terminal.

The window shows a character grid that behaves like a full-screen terminal.
Each tick renders the active tab into a ``CellBuffer``, waits briefly for one
input event, and drains at most one queued USB signal.

Game rules (which tab is active, USB bookkeeping, the win redirect) live in
``App``; the tabs themselves are deterministic and pygame-free.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from collections.abc import Callable
from pathlib import Path
from queue import Empty, Queue

import pygame

from .audio import AudioPlayer, MixerPlayer
from .cells import DEFAULT_BG, DEFAULT_FG, GREEN, RED, CellBuffer, Color, Rect, Style
from .config import GameConfig, GameInputs, load_game_inputs
from .decrypt import DecryptPuzzle
from .email_reader import EmailReader
from .install import InstallOutcome
from .music import MusicUnlock
from .password import PasswordGate
from .tab_core import EMAIL_TAB, Key, KeyPress, Tab, TabSlot, is_quit_chord
from .time_trial import TimeTrial
from .usb_watch import UsbSignal, UsbSignalKind, UsbWatcher
from .victory import VictoryAnimation, VictoryState

logger = logging.getLogger(__name__)

WINDOW_SIZE = (1280, 720)
FONT_SIZE = 18
TICK_MS = 50

HOME_TAB = 0
FIRST_USB_TAB = 2
USB_FLAG_COUNT = 5
# Flag 4 is never set by a USB tab: it is the "victory is reachable" switch.
VICTORY_GATE_FLAG = 4
USB_TABS = range(FIRST_USB_TAB, FIRST_USB_TAB + 4)

CORRUPTION_WARNING = "! AVERTISSEMENT: DISQUE PARTIELLEMENT CORROMPU. CERTAINES DONNÉES PEUVENT ÊTRE PERDUES."


class App:
    def __init__(
        self,
        slots: list[TabSlot],
        signals: Queue[UsbSignal],
        *,
        start_tab: int = HOME_TAB,
        victory_unlocked: bool = False,
    ) -> None:
        if not slots:
            raise ValueError("at least one tab is required")
        if not 0 <= start_tab < len(slots):
            raise ValueError("start_tab out of range")
        self._slots = list(slots)
        self._signals = signals
        self._current = start_tab
        self._usbs_plugged = [False] * USB_FLAG_COUNT
        self._usbs_plugged[VICTORY_GATE_FLAG] = victory_unlocked
        self._running = True
        self._frame = 0
        # Characters already typed from KEYDOWN whose TEXTINPUT echo is still due.
        self._typed_echo: deque[str] = deque(maxlen=16)

    @property
    def running(self) -> bool:
        return self._running

    @property
    def current_tab(self) -> int:
        return self._current

    @property
    def last_tab(self) -> int:
        return len(self._slots) - 1

    @property
    def usbs_plugged(self) -> tuple[bool, ...]:
        return tuple(self._usbs_plugged)

    def slot(self, index: int) -> TabSlot:
        return self._slots[index]

    def quit(self) -> None:
        self._running = False

    # -- Input ----------------------------------------------------------------
    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if event.type == pygame.TEXTINPUT:
            self._handle_text(event.text)
            return
        press = key_press_from_pygame(event)
        if press is None:
            return
        if press.key is Key.CHAR:
            self._typed_echo.append(press.char)
        self.handle_key(press)

    def _handle_text(self, text: str) -> None:
        """Type the characters only TEXTINPUT carries (dead-key and IME composition)."""
        for char in text:
            if char in self._typed_echo:
                # Older entries never got their echo (e.g. Alt chords); drop them too.
                while self._typed_echo.popleft() != char:
                    pass
                continue
            if char.isprintable():
                self.handle_key(KeyPress.typed(char))

    def handle_key(self, event: KeyPress) -> None:
        if is_quit_chord(event):
            logger.info("quit chord pressed")
            self.quit()
            return
        target = self._slots[self._current].handle_input(event)
        if target is not None:
            self._navigate(target)

    def _navigate(self, target: int) -> None:
        previous = self._current
        if previous in USB_TABS:
            # Leaving a USB tab through its own exit means it was solved.
            self._usbs_plugged[previous - FIRST_USB_TAB] = True
            logger.info("usb slot %d solved", previous - FIRST_USB_TAB)

        self._current = target
        if target == EMAIL_TAB and all(self._usbs_plugged):
            self._current = self.last_tab
            logger.info("all slots solved, switching to the victory tab")
        logger.info("tab %d -> %d", previous, self._current)

    # -- External events ------------------------------------------------------
    def drain_signal(self) -> None:
        """Apply at most one queued USB signal; later ones wait for later ticks."""
        try:
            signal = self._signals.get_nowait()
        except Empty:
            return
        self.apply_signal(signal)

    def apply_signal(self, signal: UsbSignal) -> None:
        previous = self._current
        if signal.kind is UsbSignalKind.INSERTED:
            assert signal.slot is not None
            if self._current == HOME_TAB:
                logger.info("usb %d plugged before login, ignored", signal.slot)
                return
            self._current = FIRST_USB_TAB + signal.slot
        else:
            self._current = min(EMAIL_TAB, self._current)
        logger.info("usb %s: tab %d -> %d", signal.kind.value, previous, self._current)

    # -- Rendering ------------------------------------------------------------
    def render_frame(self, width: int, height: int) -> CellBuffer:
        frame = self._frame
        self._frame += 1

        slot = self._slots[self._current]
        if (
            self._current == self.last_tab
            and isinstance(slot.tab, VictoryAnimation)
            and isinstance(slot.state, VictoryState)
        ):
            return slot.tab.teardown(frame, width, height, slot.state)

        buf = CellBuffer(width, height)
        window = Rect(3, 1, max(0, width - 6), max(0, height - 2))
        slot.render(buf, window)
        self._render_status(buf)
        return buf

    def _render_status(self, buf: CellBuffer) -> None:
        line = Rect(4, 0, max(0, buf.width - 8), 1)
        buf.put_text(line.x, line.y, CORRUPTION_WARNING, Style(fg=RED), max_width=line.w)
        plugged = sum(self._usbs_plugged)
        if plugged >= 2:
            count = f"{plugged - 1}/4"
            buf.put_text(line.right - len(count), line.y, count, Style(fg=GREEN))


_KEYMAP: dict[int, Key] = {
    pygame.K_BACKSPACE: Key.BACKSPACE,
    pygame.K_RETURN: Key.ENTER,
    pygame.K_KP_ENTER: Key.ENTER,
    pygame.K_UP: Key.UP,
    pygame.K_DOWN: Key.DOWN,
    pygame.K_LEFT: Key.LEFT,
    pygame.K_RIGHT: Key.RIGHT,
}


def key_press_from_pygame(event: pygame.event.Event) -> KeyPress | None:
    if event.type != pygame.KEYDOWN:
        return None
    alt = bool(getattr(event, "mod", 0) & pygame.KMOD_ALT)
    key = _KEYMAP.get(event.key)
    if key is not None:
        return KeyPress(key, alt=alt)
    if alt and event.key == pygame.K_q:
        # Alt often swallows the unicode text of the key.
        return KeyPress.typed("q", alt=True)
    char = getattr(event, "unicode", "") or ""
    if len(char) == 1 and char.isprintable():
        return KeyPress.typed(char, alt=alt)
    return KeyPress(Key.OTHER, alt=alt)


class TerminalPresenter:
    """Draws a ``CellBuffer`` onto a pygame surface with a monospace font."""

    def __init__(self, font: pygame.font.Font) -> None:
        self._font = font
        self._cell_w, self._cell_h = font.size("M")
        self._glyphs: dict[tuple[str, Color, bool, bool], pygame.Surface] = {}

    def grid_size(self, surface: pygame.Surface) -> tuple[int, int]:
        w, h = surface.get_size()
        return max(1, w // self._cell_w), max(1, h // self._cell_h)

    def present(self, surface: pygame.Surface, buf: CellBuffer) -> None:
        surface.fill(DEFAULT_BG)
        cw, ch = self._cell_w, self._cell_h
        for y, row in enumerate(buf.rows()):
            for x, cell in enumerate(row):
                if cell.style.bg is not None:
                    pygame.draw.rect(surface, cell.style.bg, pygame.Rect(x * cw, y * ch, cw, ch))
                if cell.char == " ":
                    continue
                surface.blit(self._glyph(cell.char, cell.style), (x * cw, y * ch))

    def _glyph(self, char: str, style: Style) -> pygame.Surface:
        fg = style.fg or DEFAULT_FG
        if style.dim:
            fg = (fg[0] * 3 // 5, fg[1] * 3 // 5, fg[2] * 3 // 5)
        key = (char, fg, style.bold, style.italic)
        glyph = self._glyphs.get(key)
        if glyph is None:
            self._font.set_bold(style.bold)
            self._font.set_italic(style.italic)
            glyph = self._font.render(char, True, fg)
            self._font.set_bold(False)
            self._font.set_italic(False)
            self._glyphs[key] = glyph
        return glyph


def build_tabs(inputs: GameInputs, *, music_path: Path, player: AudioPlayer, rain_seed: int) -> list[TabSlot]:
    tabs: list[Tab] = [PasswordGate(inputs.password), EmailReader(list(inputs.emails))]
    if inputs.disabled:
        tabs += [InstallOutcome(success=False) for _ in USB_TABS]
    else:
        tabs += [
            DecryptPuzzle(),
            MusicUnlock(track=music_path, player=player),
            InstallOutcome(success=True),
            TimeTrial(),
        ]
    tabs.append(VictoryAnimation(rain_seed=rain_seed))
    return [TabSlot.of(tab) for tab in tabs]


def create_app(
    inputs: GameInputs,
    signals: Queue[UsbSignal],
    *,
    music_path: Path,
    player: AudioPlayer,
    rain_seed: int,
) -> App:
    slots = build_tabs(inputs, music_path=music_path, player=player, rain_seed=rain_seed)
    return App(
        slots,
        signals,
        # No password configured: the login screen is skipped.
        start_tab=EMAIL_TAB if inputs.password == "" else HOME_TAB,
        victory_unlocked=not inputs.disabled,
    )


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def _terminal_font() -> pygame.font.Font:
    return pygame.font.SysFont("dejavusansmono,menlo,consolas,couriernew,monospace", FONT_SIZE)


def run(
    *,
    config: GameConfig | None = None,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
) -> int:
    """Run the game until the quit chord; raises ``StartupError`` on bad inputs."""

    config = GameConfig.from_env() if config is None else config
    pygame.init()
    watcher: UsbWatcher | None = None
    player: MixerPlayer | None = None
    try:
        inputs = load_game_inputs(config)
        player = MixerPlayer()
        watcher = UsbWatcher(config.watch_dir)
        watcher.start()

        pygame.display.set_caption("Terminal")
        pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)
        presenter = TerminalPresenter(_terminal_font())
        app = create_app(
            inputs,
            watcher.signals,
            music_path=config.music_path,
            player=player,
            rain_seed=_new_seed(),
        )

        frame = 0
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            surface = pygame.display.get_surface()
            width, height = presenter.grid_size(surface)
            presenter.present(surface, app.render_frame(width, height))
            pygame.display.flip()

            event = pygame.event.wait(TICK_MS)
            if event.type != pygame.NOEVENT:
                app.handle_event(event)
            app.drain_signal()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break
    finally:
        if watcher is not None:
            watcher.stop()
        if player is not None:
            player.stop()
        pygame.quit()

    return 0
