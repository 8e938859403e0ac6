"""Mail client tab.

Emails are plain text records::

    from: Alice
    to: Bob
    cc:
    date: 2024-03-02 09:15
    subject: Rendez-vous

    Body paragraphs with *bold*, _italic_ and ~red~ toggles.
    A backslash makes the next delimiter literal: 3 \\* 4.

The five header lines are mandatory and must appear in that order. Markup
toggles never carry over to the next source line.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .cells import GREEN, PLAIN, RED, CellBuffer, Rect, Style, StyledRun, wrap_runs
from .tab_core import Key, KeyPress

logger = logging.getLogger(__name__)

EMAIL_SUFFIX = ".email"
HEADER_FIELDS = ("from", "to", "cc", "date", "subject")
DELIMITERS = "*_~\\"
ESCAPE = "\\"

LIST_WIDTH = 30
STUB_HEIGHT = 4

_LABEL = Style(bold=True, dim=True)


class EmailFormatError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class Email:
    sender: str
    to: str
    cc: str
    date: str
    subject: str
    # One tuple of styled runs per body line; blank lines are empty tuples.
    body: tuple[tuple[StyledRun, ...], ...]


def _markup_style(bold: bool, italic: bool, red: bool) -> Style:
    return Style(fg=RED if red else None, bold=bold, italic=italic)


def parse_markup(line: str) -> tuple[StyledRun, ...]:
    """Split one body line into styled runs.

    ``*`` toggles bold, ``_`` italic and ``~`` red text. A backslash before a
    delimiter emits that delimiter literally; before anything else it is kept.
    """

    runs: list[StyledRun] = []
    bold = italic = red = False
    current: list[str] = []
    escaped = False

    def flush() -> None:
        if current:
            runs.append(("".join(current), _markup_style(bold, italic, red)))
            current.clear()

    for ch in line:
        if escaped:
            if ch not in DELIMITERS:
                current.append(ESCAPE)
            current.append(ch)
            escaped = False
        elif ch == ESCAPE:
            escaped = True
        elif ch == "*":
            flush()
            bold = not bold
        elif ch == "_":
            flush()
            italic = not italic
        elif ch == "~":
            flush()
            red = not red
        else:
            current.append(ch)

    if escaped:
        current.append(ESCAPE)
    flush()
    return tuple(runs)


def _header(lines: list[str], index: int, name: str) -> str:
    if index >= len(lines):
        raise EmailFormatError(f"no `{name}` line")
    line = lines[index]
    prefix = f"{name}:"
    if not line.startswith(prefix):
        raise EmailFormatError(f"line {index + 1} should start with `{prefix}`, got {line!r}")
    return line[len(prefix):].strip()


def parse_email(text: str) -> Email:
    # Only "\n" (and "\r\n") end a line; other control characters stay in the text.
    lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
    if lines and lines[-1] == "":
        lines.pop()
    sender, to, cc, date, subject = (_header(lines, i, name) for i, name in enumerate(HEADER_FIELDS))

    body_lines = lines[len(HEADER_FIELDS):]
    while body_lines and body_lines[0] == "":
        body_lines.pop(0)

    body = tuple(() if line == "" else parse_markup(line) for line in body_lines)
    return Email(sender=sender, to=to, cc=cc, date=date, subject=subject, body=body)


def load_emails(folder: Path) -> list[Email]:
    """Parse every ``*.email`` file in ``folder``, newest date first.

    Dates are compared as raw text; records with the same date keep their
    file-name order.
    """

    emails: list[Email] = []
    for path in sorted(folder.iterdir()):
        if not path.is_file() or path.suffix != EMAIL_SUFFIX:
            continue
        try:
            emails.append(parse_email(path.read_text(encoding="utf-8")))
        except EmailFormatError as exc:
            raise EmailFormatError(f"{path.name}: {exc}") from exc
    emails.sort(key=lambda email: email.date, reverse=True)
    logger.info("loaded %d emails from %s", len(emails), folder)
    return emails


@dataclass(slots=True)
class EmailReaderState:
    selected: int | None = None


class EmailReader:
    def __init__(self, emails: list[Email]) -> None:
        if not emails:
            raise ValueError("the mail client needs at least one email")
        self._emails = tuple(emails)

    def new_state(self) -> EmailReaderState:
        return EmailReaderState(selected=0)

    def handle_input(self, event: KeyPress, state: EmailReaderState) -> int | None:
        n = len(self._emails)
        if event.key is Key.DOWN:
            state.selected = 0 if state.selected is None else (state.selected + 1) % n
        elif event.key is Key.UP:
            state.selected = n - 1 if state.selected is None else (state.selected + n - 1) % n
        return None

    def render(self, buf: CellBuffer, area: Rect, state: EmailReaderState) -> None:
        left, _ = area.split_columns(LIST_WIDTH)
        right = Rect(left.right - 1, area.y, area.w - left.w + 1, area.h)

        buf.draw_box(left, title="Courriels")
        self._render_list(buf, left.inner(), state.selected)

        if state.selected is None:
            buf.draw_box(right, title="Courriel actuel")
            buf.put_centered(right.inner(), right.y + right.h // 2, "No email selected!", Style(fg=GREEN))
        else:
            self._render_detail(buf, right, self._emails[state.selected])

        buf.set(right.x, right.y, "┬")
        buf.set(right.x, right.bottom - 1, "┴")

    def _render_list(self, buf: CellBuffer, inner: Rect, selected: int | None) -> None:
        visible = max(1, inner.h // STUB_HEIGHT)
        offset = 0 if selected is None else max(0, selected - visible + 1)
        y = inner.y
        for index in range(offset, len(self._emails)):
            if y >= inner.bottom:
                break
            email = self._emails[index]
            highlight = Style(fg=GREEN, bold=True) if index == selected else PLAIN
            for text, style in ((email.sender, PLAIN), (email.date, Style(bold=True)), (email.subject, PLAIN)):
                if y < inner.bottom:
                    buf.put_text(inner.x, y, text, style.patch(highlight), max_width=inner.w)
                y += 1
            y += 1

    def _render_detail(self, buf: CellBuffer, pane: Rect, email: Email) -> None:
        buf.draw_box(pane, title="Courriel actuel")
        inner = pane.inner()
        header_rows = (
            [("de: ", _LABEL), (email.sender, PLAIN), (" le ", _LABEL), (email.date, PLAIN)],
            [("à : ", _LABEL), (email.to, PLAIN)],
            [("cc: ", _LABEL), (email.cc, PLAIN)],
            [("sujet: ", _LABEL), (email.subject, PLAIN)],
        )
        y = inner.y
        for runs in header_rows:
            if y + 1 >= pane.bottom - 1:
                return
            buf.put_runs(inner.x, y, runs, max_width=inner.w)
            buf.set(pane.x, y + 1, "├")
            buf.put_text(inner.x, y + 1, "─" * inner.w)
            buf.set(pane.right - 1, y + 1, "┤")
            y += 2

        for paragraph in email.body:
            for line in wrap_runs(list(paragraph), inner.w) if paragraph else [[]]:
                if y >= inner.bottom:
                    return
                buf.put_runs(inner.x, y, line, max_width=inner.w)
                y += 1
