import pytest

from socialcard.render.canvas import Canvas
from socialcard.render.typography import (
    FAMILY_DISPLAY,
    FAMILY_MONO,
    FontBook,
    draw_body,
    draw_tracked,
    measure_tracked,
    wrap_text,
)


@pytest.mark.parametrize("align", ["left", "center", "right"])
def test_tracked_width_drives_alignment(align: str) -> None:
    canvas = Canvas(400, 100)
    canvas.set_font(FAMILY_MONO, 500, 20)
    layout = measure_tracked(canvas, "DIGIKO", 200, 0.1, align)

    expected = sum(canvas.measure_text(ch) for ch in "DIGIKO") + 5 * (20 * 0.1)
    assert layout.total_width == pytest.approx(expected)
    offset = {"left": 0.0, "center": expected / 2, "right": expected}[align]
    assert layout.start_x == pytest.approx(200 - offset)

    xs = layout.positions()
    assert xs[0] == pytest.approx(layout.start_x)
    assert xs[-1] + layout.advances[-1] == pytest.approx(layout.start_x + layout.total_width)


def test_tracked_single_char_has_no_gap() -> None:
    canvas = Canvas(200, 100)
    canvas.set_font(FAMILY_DISPLAY, 400, 24)
    layout = measure_tracked(canvas, "A", 10, 0.5)
    assert layout.total_width == pytest.approx(canvas.measure_text("A"))


def test_draw_tracked_draws_each_character() -> None:
    canvas = Canvas(300, 80)
    canvas.set_font(FAMILY_MONO, 500, 18)
    draw_tracked(canvas, "NEW", 10, 10, tracking=0.2, paint="#ffffff", gradient=("#ff0000", "#0000ff"))
    assert canvas.operations.count("fill_text") == 3
    assert canvas.image.getbbox() is not None


def test_wrap_text_is_greedy() -> None:
    font = FontBook().get(FAMILY_DISPLAY, 400, 16)
    text = "one two three four five six seven eight nine ten"
    lines = wrap_text(font, text, font.getlength("one two three "))
    assert len(lines) > 1
    assert " ".join(lines) == text
    assert all(font.getlength(line) <= font.getlength("one two three ") for line in lines)
    assert wrap_text(font, "   ", 100) == []


def test_draw_body_returns_y_below_wrapped_lines() -> None:
    canvas = Canvas(400, 400)
    single = draw_body(canvas, "short", 10, 10, 400)
    wrapped = draw_body(canvas, "a long body text that will certainly wrap across lines", 10, 10, 400, max_width=60)
    assert wrapped > single


def test_font_book_weight_picks_bold(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def fake_load_font(path, size, family, bold):
        calls.append((path, size, family, bold))
        return object()

    monkeypatch.setattr("socialcard.render.typography.load_font", fake_load_font)
    book = FontBook({"display": "/fonts/regular.ttf", "display_bold": "/fonts/bold.ttf"})
    book.get("display", 700, 31.6)
    book.get("display", 400, 12)
    book.get("serif", 400, 12)
    assert calls[0][1:] == (32, "display", True)
    assert calls[0][0].name == "bold.ttf"
    assert calls[1][0].name == "regular.ttf"
    assert calls[1][3] is False
    assert calls[2][2] == "display"
