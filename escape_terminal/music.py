from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .audio import AudioPlayer
from .cells import PLAIN, CellBuffer, Rect
from .password import entry_border_style
from .tab_core import Key, KeyPress, TextEntryState, handle_text_gate

ACCEPTED_ANSWERS = ("2.5.", "2.5")


@dataclass(frozen=True, slots=True)
class MusicUnlock:
    """Storage decryption gate; Space plays the hint track."""

    track: Path
    player: AudioPlayer

    def new_state(self) -> TextEntryState:
        return TextEntryState()

    def render(self, buf: CellBuffer, area: Rect, state: TextEntryState) -> None:
        box = area.centered(50, 3)
        buf.draw_box(box, entry_border_style(state), title="Decryption du stockage (ESP pour indice)")
        buf.put_centered(box.inner(), box.y + 1, state.entry, PLAIN)

    def handle_input(self, event: KeyPress, state: TextEntryState) -> int | None:
        if event.key is Key.CHAR and event.char == " ":
            self.player.play(self.track)
            return None
        return handle_text_gate(event, state, lambda entry: entry in ACCEPTED_ANSWERS)
