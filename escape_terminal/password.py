from __future__ import annotations

from dataclasses import dataclass

from .cells import PLAIN, RED, CellBuffer, Rect, Style
from .tab_core import KeyPress, TextEntryState, handle_text_gate


def entry_border_style(state: TextEntryState) -> Style:
    return Style(fg=RED) if state.error else PLAIN


@dataclass(frozen=True, slots=True)
class PasswordGate:
    """Login prompt; the password is read from disk at startup."""

    password: str

    def new_state(self) -> TextEntryState:
        return TextEntryState()

    def render(self, buf: CellBuffer, area: Rect, state: TextEntryState) -> None:
        box = area.centered(22, 3)
        buf.draw_box(box, entry_border_style(state), title="Entrez mot de passe")
        buf.put_centered(box.inner(), box.y + 1, "*" * len(state.entry))

    def handle_input(self, event: KeyPress, state: TextEntryState) -> int | None:
        return handle_text_gate(event, state, lambda entry: entry == self.password)
