import struct
import time
import zlib
from pathlib import Path

import pytest

from socialcard.models import TemplateData, TokenInfo
from socialcard.render.canvas import Canvas
from socialcard.render.engine import CardRenderer, draw_card


def _config(tmp_path: Path, **extra) -> dict:
    cfg = {"asset_root": str(tmp_path), "brand_logo_url": None, "loader_workers": 1, "load_timeout": 0.5, "noise_seed": 1}
    cfg.update(extra)
    return cfg


def test_undecodable_logo_falls_back_to_badge(tmp_path: Path) -> None:
    def chunk(kind: bytes, payload: bytes) -> bytes:
        return struct.pack(">I", len(payload)) + kind + payload + struct.pack(">I", zlib.crc32(kind + payload))

    logo = tmp_path / "tokens" / "abc.png"
    logo.parent.mkdir(parents=True)
    header = struct.pack(">IIBBBBB", 20000, 20000, 8, 6, 0, 0, 0)
    logo.write_bytes(b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IEND", b""))

    data = TemplateData(template="listing", tokens=(TokenInfo(symbol="ABC"),), size="1200x630")
    with CardRenderer(_config(tmp_path)) as renderer:
        rendered = renderer.render(data)
    assert rendered.size == (1200, 630)


def test_slow_loads_do_not_reject_the_render(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    data = TemplateData(template="new-pair", tokens=(TokenInfo(symbol="DGKO"), TokenInfo(symbol="KLV")), size="1200x630")
    with CardRenderer(_config(tmp_path, load_timeout=0.1)) as renderer:

        def slow_load(url: str):
            time.sleep(0.5)
            raise OSError("too slow")

        monkeypatch.setattr(renderer.resolver, "load", slow_load)
        rendered = renderer.render(data)
    assert rendered.size == (1200, 630)
    assert "still loading" in caplog.text


def test_draw_card_normalizes_shorthand_accent() -> None:
    canvas = Canvas(200, 120)
    data = TemplateData(template="milestone", accent_color="#FFF", size="1200x630")
    assert draw_card(canvas, data, {}, brand_logo_url=None, noise_intensity=0) is True
    assert canvas.image.getbbox() is not None
