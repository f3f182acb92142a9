from pathlib import Path

from PIL import Image

from socialcard.export import display_size, preview_scale, save_png, to_data_url, to_png_bytes
from socialcard.naming import build_export_name, build_output_name, sanitize_token


def test_build_export_name() -> None:
    assert build_export_name("new-pair", timestamp_ms=1700000000123) == "rarecanvas-new-pair-1700000000123.png"


def test_build_output_name_sanitizes() -> None:
    name = build_output_name(Path("my card?.yaml"), "listing", "1200x630")
    assert name == "my_card__listing_1200x630.png"
    assert sanitize_token("  ") == "NA"


def test_save_png_forces_extension(tmp_path: Path) -> None:
    image = Image.new("RGBA", (4, 4), (1, 2, 3, 255))
    saved = save_png(image, tmp_path / "nested" / "card.jpg")
    assert saved == tmp_path / "nested" / "card.png"
    with Image.open(saved) as reopened:
        assert reopened.format == "PNG"
        assert reopened.size == (4, 4)


def test_data_url_and_bytes() -> None:
    image = Image.new("RGBA", (2, 2))
    assert to_png_bytes(image).startswith(b"\x89PNG")
    assert to_data_url(image).startswith("data:image/png;base64,")


def test_preview_scale_never_changes_render_size() -> None:
    scale = preview_scale("1920x1080")
    assert scale < 1
    width, height = display_size("1920x1080", scale)
    assert width <= 800 and height <= 600
    assert display_size("1200x630") == (1200, 630)
