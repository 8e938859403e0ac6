from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Protocol, TypeVar

from .cells import CellBuffer, Rect

# Every gate sends the player back to the mail client when solved.
EMAIL_TAB = 1
MAX_ENTRY_LEN = 20


class Key(str, Enum):
    CHAR = "char"
    BACKSPACE = "backspace"
    ENTER = "enter"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class KeyPress:
    """A single key press as seen by tabs (already decoded from pygame)."""

    key: Key
    char: str = ""
    alt: bool = False

    @classmethod
    def typed(cls, char: str, *, alt: bool = False) -> KeyPress:
        return cls(Key.CHAR, char, alt)


def is_quit_chord(event: KeyPress) -> bool:
    return event.key is Key.CHAR and event.char.lower() == "q" and event.alt


S = TypeVar("S")


class Tab(Protocol[S]):
    def new_state(self) -> S: ...
    def render(self, buf: CellBuffer, area: Rect, state: S) -> None: ...
    def handle_input(self, event: KeyPress, state: S) -> int | None: ...


@dataclass(slots=True)
class TabSlot(Generic[S]):
    """A tab bundled with the one state object it created.

    Slots are the only way the controller holds tabs, so a tab can never be
    handed another tab's state.
    """

    tab: Tab[S]
    state: S

    @classmethod
    def of(cls, tab: Tab[S]) -> TabSlot[S]:
        return cls(tab=tab, state=tab.new_state())

    def render(self, buf: CellBuffer, area: Rect) -> None:
        self.tab.render(buf, area, self.state)

    def handle_input(self, event: KeyPress) -> int | None:
        return self.tab.handle_input(event, self.state)


@dataclass(slots=True)
class TextEntryState:
    entry: str = ""
    error: bool = False


def edit_entry(event: KeyPress, state: TextEntryState) -> bool:
    """Apply a typing/backspace press to ``state``. Returns True if consumed."""

    if event.key is Key.CHAR:
        if len(state.entry) < MAX_ENTRY_LEN:
            state.entry += event.char
            state.error = False
        return True
    if event.key is Key.BACKSPACE:
        state.entry = state.entry[:-1]
        state.error = False
        return True
    return False


def submit_entry(state: TextEntryState, accepts: Callable[[str], bool]) -> int | None:
    if accepts(state.entry):
        return EMAIL_TAB
    state.error = True
    return None


def handle_text_gate(event: KeyPress, state: TextEntryState, accepts: Callable[[str], bool]) -> int | None:
    """Shared input flow of the password-style gates."""

    if edit_entry(event, state):
        return None
    if event.key is Key.ENTER:
        return submit_entry(state, accepts)
    return None
