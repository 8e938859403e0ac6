from __future__ import annotations

from dataclasses import dataclass

from .cells import PLAIN, CellBuffer, Rect
from .password import entry_border_style
from .tab_core import KeyPress, TextEntryState, handle_text_gate

CIPHER_TEXT = "ÉVLWÉÈJDJ"
SOLUTION = "ALMA.PAIX"

# The entry box hangs under the cipher box, sharing its bottom edge.
_JOINED_TOP = ("├", "┤", "└", "┘", "─", "│")


@dataclass(frozen=True, slots=True)
class DecryptPuzzle:
    def new_state(self) -> TextEntryState:
        return TextEntryState()

    def render(self, buf: CellBuffer, area: Rect, state: TextEntryState) -> None:
        whole = area.centered(50, 5)
        border = entry_border_style(state)

        cipher = Rect(whole.x, whole.y, whole.w, 3)
        buf.draw_box(cipher, border, title="Mot de passe encrypté")
        buf.put_centered(cipher.inner(), cipher.y + 1, CIPHER_TEXT, PLAIN)

        entry = Rect(whole.x, whole.y + 2, whole.w, 3)
        buf.draw_box(entry, border, title="Entrez le mot de passe", glyphs=_JOINED_TOP)
        buf.put_centered(entry.inner(), entry.y + 1, state.entry, PLAIN)

    def handle_input(self, event: KeyPress, state: TextEntryState) -> int | None:
        return handle_text_gate(event, state, lambda entry: entry == SOLUTION)
