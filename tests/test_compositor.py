from socialcard.models import TokenInfo
from socialcard.render.canvas import Canvas
from socialcard.render.compositor import draw_floating_token, draw_platform, fallback_glyph


def test_fallback_glyph_is_uppercased_first_char() -> None:
    assert fallback_glyph(TokenInfo(symbol="dgko")) == "D"
    assert fallback_glyph(TokenInfo(symbol="KLV")) == "K"


def test_token_badge_without_logo_fills_token_color() -> None:
    canvas = Canvas(200, 200)
    token = TokenInfo(symbol="abc", color="#FF0000")
    draw_floating_token(canvas, 100, 100, 100, token, {}, "#0066FF")

    radius = 100 * 0.44
    assert canvas.image.getpixel((int(100 - radius * 0.8), 100)) == (255, 0, 0)
    assert "draw_image" not in canvas.operations
    assert "fill_text" in canvas.operations


def test_token_badge_with_logo_draws_image() -> None:
    from PIL import Image

    canvas = Canvas(200, 200)
    token = TokenInfo(symbol="abc", color="#FF0000")
    logo = Image.new("RGBA", (32, 32), (0, 255, 0, 255))
    draw_floating_token(canvas, 100, 100, 100, token, {"/tokens/abc.png": logo}, "#0066FF")

    assert "draw_image" in canvas.operations
    assert "fill_text" not in canvas.operations
    assert canvas.image.getpixel((100, 100)) == (0, 255, 0)


def test_platform_returns_point_above_top_face() -> None:
    canvas = Canvas(400, 400)
    top = draw_platform(canvas, 200, 300, 400, "#0066FF")
    assert top < 300
    assert canvas.draw_calls > 0
