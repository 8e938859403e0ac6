from __future__ import annotations

from escape_terminal.cells import PLAIN, RED, CellBuffer, Rect, Style, wrap_runs


def _texts(lines):
    return ["".join(text for text, _ in line) for line in lines]


def test_put_text_clips_to_buffer_and_max_width() -> None:
    buf = CellBuffer(6, 1)
    assert buf.put_text(2, 0, "abcdef", max_width=3) == 3
    assert buf.row_text(0) == "  abc "
    buf.put_text(4, 0, "xyz")
    assert buf.row_text(0) == "  abxy"


def test_draw_box_with_titles() -> None:
    buf = CellBuffer(8, 3)
    buf.draw_box(buf.area, Style(fg=RED), title="ab", title_bottom="<z>")
    assert buf.text().splitlines() == ["┌ab────┐", "│      │", "└<z>───┘"]
    assert buf.cell(0, 0).style.fg == RED


def test_centered_rect_is_clipped_to_parent() -> None:
    area = Rect(0, 0, 10, 4)
    assert area.centered(4, 2) == Rect(3, 1, 4, 2)
    assert area.centered(20, 10) == area


def test_style_patch_layers_colours_and_flags() -> None:
    base = Style(bold=True)
    assert base.patch(Style(fg=RED)) == Style(fg=RED, bold=True)
    assert Style(fg=RED).patch(Style(italic=True)) == Style(fg=RED, italic=True)


def test_wrap_runs_breaks_on_words() -> None:
    lines = wrap_runs([("one two three", PLAIN)], 8)
    assert _texts(lines) == ["one two", "three"]


def test_wrap_runs_splits_long_words() -> None:
    lines = wrap_runs([("abcdefghij", PLAIN)], 4)
    assert _texts(lines) == ["abcd", "efgh", "ij"]


def test_wrap_runs_keeps_styles_per_run() -> None:
    bold = Style(bold=True)
    lines = wrap_runs([("a ", PLAIN), ("b", bold)], 10)
    assert lines == [[("a", PLAIN), (" ", PLAIN), ("b", bold)]]
