"""Time-trial tab: six mental-arithmetic steps, then a wiring puzzle.

The arithmetic phase uses the installer's own operator rules (appendix A.1 of
the in-game documents), so the expected answers are not ordinary arithmetic.

The wiring phase works on a 77 x 15 grid. Each of the four coloured wires is
anchored on the top edge and ends at a connector the player can grab with
Enter, drag with the arrow keys and drop with Enter again. Dropping while all
four connectors sit on their sockets solves the tab.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from .cells import BLUE, GREEN, PLAIN, RED, WHITE, CellBuffer, Color, Rect, Style
from .tab_core import EMAIL_TAB, Key, KeyPress, TextEntryState, edit_entry

Point = tuple[int, int]


@dataclass(frozen=True, slots=True)
class Calculation:
    expression: str
    answer: int
    color: Color


CALCULATIONS: tuple[Calculation, ...] = (
    Calculation("77++75", 2, RED),
    Calculation("34-19+26", 41, BLUE),
    Calculation("12+16*4", 16, BLUE),
    Calculation("(26-24)*6", 22, GREEN),
    Calculation("40÷12+8", 4, RED),
    Calculation("20++20", 40, GREEN),
)

X_BOUNDS = (1, 77)
Y_BOUNDS = (1, 15)

START_POSITIONS: tuple[Point, ...] = ((11, 2), (28, 2), (54, 2), (74, 2))
START_CURSOR: Point = (10, 10)
# Connector i must sit on socket i; sockets are not interchangeable.
SOLUTION: tuple[Point, ...] = ((76, 15), (61, 15), (18, 15), (40, 15))

CONNECTOR_COLORS: tuple[Color, ...] = (RED, WHITE, GREEN, BLUE)
ANCHOR_X: tuple[int, ...] = (11, 28, 54, 74)

BOARD_WIDTH = 78
BOARD_HEIGHT = 16

_MOVES: dict[Key, Point] = {
    Key.LEFT: (-1, 0),
    Key.RIGHT: (1, 0),
    Key.UP: (0, -1),
    Key.DOWN: (0, 1),
}


@dataclass(slots=True)
class Calculations(TextEntryState):
    step: int = 0


@dataclass(slots=True)
class Connections:
    positions: list[Point] = field(default_factory=lambda: list(START_POSITIONS))
    cursor: Point = START_CURSOR
    grabbed: int | None = None


@dataclass(slots=True)
class TimeTrialState:
    phase: Calculations | Connections = field(default_factory=Calculations)


def _clamp(value: int, bounds: tuple[int, int]) -> int:
    lo, hi = bounds
    return lo if value < lo else hi if value > hi else value


def step_calculations(event: KeyPress, calc: Calculations) -> Connections | None:
    """Apply one key press; returns the wiring phase once the last step is solved."""

    if edit_entry(event, calc):
        return None
    if event.key is not Key.ENTER:
        return None

    if calc.entry != str(CALCULATIONS[calc.step].answer):
        calc.error = True
        return None
    if calc.step == len(CALCULATIONS) - 1:
        return Connections()
    calc.step += 1
    calc.entry = ""
    calc.error = False
    return None


def step_connections(event: KeyPress, conn: Connections) -> int | None:
    move = _MOVES.get(event.key)
    if move is not None:
        x, y = conn.cursor
        conn.cursor = (_clamp(x + move[0], X_BOUNDS), _clamp(y + move[1], Y_BOUNDS))
    elif event.key is Key.ENTER:
        if conn.grabbed is not None:
            if tuple(conn.positions) == SOLUTION:
                return EMAIL_TAB
            conn.grabbed = None
        else:
            conn.grabbed = next((i for i, pos in enumerate(conn.positions) if pos == conn.cursor), None)

    if conn.grabbed is not None:
        conn.positions[conn.grabbed] = conn.cursor
    return None


class TimeTrial:
    def new_state(self) -> TimeTrialState:
        return TimeTrialState()

    def handle_input(self, event: KeyPress, state: TimeTrialState) -> int | None:
        phase = state.phase
        if isinstance(phase, Calculations):
            wiring = step_calculations(event, phase)
            if wiring is not None:
                state.phase = wiring
            return None
        return step_connections(event, phase)

    def render(self, buf: CellBuffer, area: Rect, state: TimeTrialState) -> None:
        if isinstance(state.phase, Calculations):
            self._render_calculations(buf, area, state.phase)
        else:
            self._render_connections(buf, area, state.phase)

    @staticmethod
    def _render_calculations(buf: CellBuffer, area: Rect, calc: Calculations) -> None:
        current = CALCULATIONS[calc.step]
        whole = area.centered(34, 6)
        question = Rect(whole.x, whole.y, whole.w, 3)
        answer = Rect(whole.x, whole.y + 3, whole.w, 3)
        entry_style = Style(fg=RED) if calc.error else PLAIN

        buf.draw_box(question, Style(fg=current.color), title="Installation (voir appendice A.1)")
        buf.put_centered(question.inner(), question.y + 1, current.expression, Style(fg=current.color))
        buf.draw_box(answer, entry_style, title="Résultat")
        buf.put_centered(answer.inner(), answer.y + 1, calc.entry, entry_style)

    @staticmethod
    def _render_connections(buf: CellBuffer, area: Rect, conn: Connections) -> None:
        board = area.centered(BOARD_WIDTH, BOARD_HEIGHT)
        buf.draw_box(board)
        for x, color in zip(ANCHOR_X, CONNECTOR_COLORS):
            buf.set(board.x + x - 1, board.y, "┬", Style(fg=color))
        for x, _ in SOLUTION:
            buf.set(board.x + x - 1, board.bottom - 1, "┴")

        for index, pos in enumerate(conn.positions):
            style = Style(fg=CONNECTOR_COLORS[index])
            start = _to_cell(board, (ANCHOR_X[index], Y_BOUNDS[0]))
            for cx, cy in _line_cells(start, _to_cell(board, pos)):
                buf.set(cx, cy, "█", style)

        cx, cy = _to_cell(board, conn.cursor)
        buf.set(cx, cy, "X", Style(bold=True))


def _to_cell(board: Rect, point: Point) -> Point:
    """Map a grid point to a buffer cell inside the board's border."""
    x, y = point
    inner = board.inner()
    col = board.x + _clamp(x - 1, (1, inner.w))
    row = inner.y + int((y - Y_BOUNDS[0]) * (inner.h - 1) / (Y_BOUNDS[1] - Y_BOUNDS[0]) + 0.5)
    return col, row


def _line_cells(start: Point, end: Point) -> Iterator[Point]:
    # Bresenham
    x0, y0 = start
    x1, y1 = end
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    while True:
        yield x0, y0
        if x0 == x1 and y0 == y1:
            return
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy
