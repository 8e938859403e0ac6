"""Character-cell presentation buffer.

Tabs draw into a ``CellBuffer`` (a grid of glyph + style cells) exactly like a
full-screen terminal program would. The pygame presenter in ``app`` turns the
buffer into pixels; nothing in this module depends on pygame so rendering can
be asserted on in plain unit tests.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

Color = tuple[int, int, int]

BLACK: Color = (0, 0, 0)
WHITE: Color = (229, 229, 229)
RED: Color = (205, 49, 49)
GREEN: Color = (13, 188, 121)
DARK_GREEN: Color = (0, 110, 40)
BRIGHT_GREEN: Color = (35, 209, 139)
BLUE: Color = (36, 114, 200)

DEFAULT_FG: Color = WHITE
DEFAULT_BG: Color = BLACK


@dataclass(frozen=True, slots=True)
class Style:
    fg: Color | None = None
    bg: Color | None = None
    bold: bool = False
    italic: bool = False
    dim: bool = False

    def patch(self, other: Style) -> Style:
        """Layer ``other`` on top of this style (set fields win, flags add up)."""
        return Style(
            fg=other.fg if other.fg is not None else self.fg,
            bg=other.bg if other.bg is not None else self.bg,
            bold=self.bold or other.bold,
            italic=self.italic or other.italic,
            dim=self.dim or other.dim,
        )


PLAIN = Style()

StyledRun = tuple[str, Style]


@dataclass(frozen=True, slots=True)
class Rect:
    x: int
    y: int
    w: int
    h: int

    @property
    def right(self) -> int:
        return self.x + self.w

    @property
    def bottom(self) -> int:
        return self.y + self.h

    def inner(self, dx: int = 1, dy: int = 1) -> Rect:
        return Rect(self.x + dx, self.y + dy, max(0, self.w - 2 * dx), max(0, self.h - 2 * dy))

    def centered(self, w: int, h: int) -> Rect:
        """A ``w`` x ``h`` rect centred in this one (clipped to fit)."""
        w = min(w, self.w)
        h = min(h, self.h)
        return Rect(self.x + (self.w - w) // 2, self.y + (self.h - h) // 2, w, h)

    def split_columns(self, left_w: int) -> tuple[Rect, Rect]:
        left_w = max(0, min(left_w, self.w))
        return Rect(self.x, self.y, left_w, self.h), Rect(self.x + left_w, self.y, self.w - left_w, self.h)


@dataclass(slots=True)
class Cell:
    char: str = " "
    style: Style = field(default_factory=Style)


# Box-drawing glyphs: (top_left, top_right, bottom_left, bottom_right, horizontal, vertical)
PLAIN_BORDER = ("┌", "┐", "└", "┘", "─", "│")


class CellBuffer:
    def __init__(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError("buffer size must be >= 0")
        self._width = int(width)
        self._height = int(height)
        self._cells = [[Cell() for _ in range(self._width)] for _ in range(self._height)]

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def area(self) -> Rect:
        return Rect(0, 0, self._width, self._height)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def cell(self, x: int, y: int) -> Cell:
        return self._cells[y][x]

    def rows(self) -> list[list[Cell]]:
        return self._cells

    def row_text(self, y: int) -> str:
        return "".join(c.char for c in self._cells[y])

    def text(self) -> str:
        return "\n".join(self.row_text(y) for y in range(self._height))

    def set(self, x: int, y: int, char: str, style: Style | None = None) -> None:
        if not self.in_bounds(x, y):
            return
        cell = self._cells[y][x]
        cell.char = char
        if style is not None:
            cell.style = style

    def put_text(self, x: int, y: int, text: str, style: Style = PLAIN, *, max_width: int | None = None) -> int:
        """Write ``text`` on one row; returns the number of columns written."""
        limit = len(text) if max_width is None else max(0, min(len(text), max_width))
        for i, ch in enumerate(text[:limit]):
            self.set(x + i, y, ch, style)
        return limit

    def put_runs(self, x: int, y: int, runs: list[StyledRun], *, max_width: int | None = None) -> int:
        col = 0
        for text, style in runs:
            remaining = None if max_width is None else max_width - col
            if remaining is not None and remaining <= 0:
                break
            col += self.put_text(x + col, y, text, style, max_width=remaining)
        return col

    def put_centered(self, rect: Rect, y: int, text: str, style: Style = PLAIN) -> None:
        text = text[: rect.w]
        self.put_text(rect.x + (rect.w - len(text)) // 2, y, text, style)

    def draw_box(
        self,
        rect: Rect,
        style: Style = PLAIN,
        *,
        title: str | None = None,
        title_bottom: str | None = None,
        glyphs: tuple[str, str, str, str, str, str] = PLAIN_BORDER,
    ) -> None:
        if rect.w < 2 or rect.h < 2:
            return
        tl, tr, bl, br, hz, vt = glyphs
        x0, y0, x1, y1 = rect.x, rect.y, rect.right - 1, rect.bottom - 1
        for x in range(x0 + 1, x1):
            self.set(x, y0, hz, style)
            self.set(x, y1, hz, style)
        for y in range(y0 + 1, y1):
            self.set(x0, y, vt, style)
            self.set(x1, y, vt, style)
        self.set(x0, y0, tl, style)
        self.set(x1, y0, tr, style)
        self.set(x0, y1, bl, style)
        self.set(x1, y1, br, style)
        if title:
            self.put_text(x0 + 1, y0, title, style, max_width=rect.w - 2)
        if title_bottom:
            self.put_text(x0 + 1, y1, title_bottom, style, max_width=rect.w - 2)


def wrap_runs(runs: list[StyledRun], width: int) -> list[list[StyledRun]]:
    """Greedy word wrap of styled runs; whitespace at a line start is dropped."""

    lines: list[list[StyledRun]] = [[]]
    if width <= 0:
        return lines
    col = 0
    for text, style in runs:
        for token in re.findall(r"\S+|\s+", text):
            if token.isspace():
                if col == 0:
                    continue
                if col + len(token) >= width:
                    lines.append([])
                    col = 0
                    continue
                lines[-1].append((token, style))
                col += len(token)
                continue
            while len(token) > width:
                if col > 0:
                    lines.append([])
                    col = 0
                lines[-1].append((token[:width], style))
                lines.append([])
                token = token[width:]
            if col + len(token) > width:
                lines.append([])
                col = 0
            lines[-1].append((token, style))
            col += len(token)
    return lines
