from __future__ import annotations

from pathlib import Path

import pytest

from escape_terminal.cells import RED, CellBuffer
from escape_terminal.email_reader import (
    Email,
    EmailFormatError,
    EmailReader,
    load_emails,
    parse_email,
    parse_markup,
)
from escape_terminal.tab_core import Key, KeyPress

SAMPLE = """from: Direction
to: Équipe technique
cc: Archives
date: 2024-05-02
subject: Mise à jour

Bonjour, merci de lire *attentivement* ce _message_.
Le mot ~interdit~ est 3 \\* 4.

Cordialement
"""


def _email(date: str, subject: str = "s") -> Email:
    return Email(sender="a", to="b", cc="", date=date, subject=subject, body=())


def _plain(email: Email) -> list[str]:
    return ["".join(text for text, _ in paragraph) for paragraph in email.body]


def test_parse_headers_in_order() -> None:
    email = parse_email(SAMPLE)
    assert email.sender == "Direction"
    assert email.to == "Équipe technique"
    assert email.cc == "Archives"
    assert email.date == "2024-05-02"
    assert email.subject == "Mise à jour"


def test_body_paragraphs_keep_blank_lines() -> None:
    email = parse_email(SAMPLE)
    assert _plain(email) == [
        "Bonjour, merci de lire attentivement ce message.",
        "Le mot interdit est 3 * 4.",
        "",
        "Cordialement",
    ]


def test_markup_runs_and_styles() -> None:
    runs = parse_markup("a *b* _c_ ~d~")
    assert [text for text, _ in runs] == ["a ", "b", " ", "c", " ", "d"]
    styles = dict(runs)
    assert styles["b"].bold is True
    assert styles["c"].italic is True
    assert styles["d"].fg == RED
    assert styles["a "].bold is False


def test_markup_round_trip_drops_delimiters_and_keeps_escapes() -> None:
    line = "x *bold* y _it_ z ~red~ \\_ \\\\ end"
    runs = parse_markup(line)
    assert "".join(text for text, _ in runs) == "x bold y it z red _ \\ end"


def test_markup_style_does_not_leak_to_next_line() -> None:
    email = parse_email("from: a\nto: b\ncc: c\ndate: d\nsubject: e\n\n*open bold\nplain\n")
    second = email.body[1]
    assert all(not style.bold for _, style in second)


def test_missing_header_line_fails() -> None:
    with pytest.raises(EmailFormatError):
        parse_email("from: a\nto: b\ncc: c\n")


def test_header_out_of_order_fails() -> None:
    with pytest.raises(EmailFormatError):
        parse_email("to: b\nfrom: a\ncc: c\ndate: d\nsubject: e\n")


def test_load_sorts_by_raw_date_descending(tmp_path: Path) -> None:
    dates = {"a.email": "2024-01-09", "b.email": "2024-01-10", "c.email": "9 janvier"}
    for name, date in dates.items():
        (tmp_path / name).write_text(f"from: x\nto: y\ncc:\ndate: {date}\nsubject: {name}\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
    (tmp_path / "dir.email").mkdir()

    emails = load_emails(tmp_path)
    assert [e.date for e in emails] == ["9 janvier", "2024-01-10", "2024-01-09"]


def test_load_reports_bad_file(tmp_path: Path) -> None:
    (tmp_path / "broken.email").write_text("from: x\n", encoding="utf-8")
    with pytest.raises(EmailFormatError, match="broken.email"):
        load_emails(tmp_path)


def test_selection_cycles_and_up_inverts_down() -> None:
    reader = EmailReader([_email(str(i)) for i in range(4)])
    state = reader.new_state()
    assert state.selected == 0

    seen = []
    for _ in range(9):
        assert reader.handle_input(KeyPress(Key.DOWN), state) is None
        seen.append(state.selected)
    assert seen == [1, 2, 3, 0, 1, 2, 3, 0, 1]

    for expected in (0, 3, 2, 1, 0, 3):
        assert reader.handle_input(KeyPress(Key.UP), state) is None
        assert state.selected == expected


def test_reader_requires_emails() -> None:
    with pytest.raises(ValueError):
        EmailReader([])


def test_render_shows_selected_email() -> None:
    reader = EmailReader([parse_email(SAMPLE), _email("2020", subject="Ancien")])
    state = reader.new_state()
    buf = CellBuffer(100, 30)
    reader.render(buf, buf.area, state)
    text = buf.text()
    assert "Courriels" in text
    assert "Mise à jour" in text
    assert "Cordialement" in text

    reader.handle_input(KeyPress(Key.DOWN), state)
    buf = CellBuffer(100, 30)
    reader.render(buf, buf.area, state)
    assert "sujet: Ancien" in buf.text()


def test_render_placeholder_without_selection() -> None:
    reader = EmailReader([_email("1")])
    state = reader.new_state()
    state.selected = None
    buf = CellBuffer(80, 20)
    reader.render(buf, buf.area, state)
    assert "No email selected!" in buf.text()


def test_only_newlines_split_body_paragraphs() -> None:
    email = parse_email("from: a\r\nto: b\r\ncc: c\r\ndate: d\r\nsubject: e\r\n\r\npage\x0cbreak\r\nsep arator\n")
    assert email.subject == "e"
    assert _plain(email) == ["page\x0cbreak", "sep arator"]


def _list_lines(buf: CellBuffer) -> list[str]:
    # List pane is the left 30 columns, inside its border.
    return [buf.row_text(y)[1:29].rstrip() for y in range(1, buf.height - 1)]


def test_list_scrolls_to_keep_selection_visible() -> None:
    reader = EmailReader([_email(str(i), subject=f"sujet {i:02d}") for i in range(12)])
    state = reader.new_state()

    buf = CellBuffer(100, 20)
    reader.render(buf, buf.area, state)
    lines = _list_lines(buf)
    assert "sujet 00" in lines
    assert "sujet 11" not in lines

    state.selected = 11
    buf = CellBuffer(100, 20)
    reader.render(buf, buf.area, state)
    lines = _list_lines(buf)
    assert "sujet 11" in lines
    assert "sujet 00" not in lines
    assert lines.index("sujet 11") > lines.index("sujet 10")
