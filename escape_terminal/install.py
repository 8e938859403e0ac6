from __future__ import annotations

from dataclasses import dataclass

from .cells import GREEN, RED, CellBuffer, Rect, Style
from .tab_core import EMAIL_TAB, Key, KeyPress


@dataclass(frozen=True, slots=True)
class InstallState:
    pass


@dataclass(frozen=True, slots=True)
class InstallOutcome:
    """Install result banner; Space goes back to the mail client."""

    success: bool

    def new_state(self) -> InstallState:
        return InstallState()

    def render(self, buf: CellBuffer, area: Rect, state: InstallState) -> None:
        style = Style(fg=GREEN if self.success else RED)
        message = "Installation réussie" if self.success else "Installation échouée"
        box = area.centered(50, 3)
        buf.draw_box(box, style, title_bottom="<ESPACE>")
        buf.put_centered(box.inner(), box.y + 1, message, style)

    def handle_input(self, event: KeyPress, state: InstallState) -> int | None:
        if event.key is Key.CHAR and event.char == " ":
            return EMAIL_TAB
        return None
