from pathlib import Path

import pytest

pytest.importorskip("PyQt6")


@pytest.fixture()
def qt_app(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("QT_QPA_PLATFORM", "offscreen")
    from PyQt6.QtWidgets import QApplication

    return QApplication.instance() or QApplication([])


def test_pil_to_qpixmap(qt_app) -> None:
    from PIL import Image

    from socialcard.gui.preview import _pil_to_qpixmap

    pixmap = _pil_to_qpixmap(Image.new("RGB", (30, 20), (255, 0, 0)))
    assert (pixmap.width(), pixmap.height()) == (30, 20)


def test_preview_window_renders_and_opens_cards(qt_app, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from socialcard.config import DEFAULT_CONFIG
    from socialcard.gui import preview

    cfg = dict(DEFAULT_CONFIG, asset_root=str(tmp_path), loader_workers=1, noise_seed=1)
    monkeypatch.setattr(preview, "load_config", lambda: cfg)
    window = preview.CardPreviewWindow()
    try:
        window.render_preview()
        assert window.last_rendered is not None
        assert window.last_rendered.size == (1080, 1080)

        card = tmp_path / "card.yaml"
        card.write_text("template: announcement\nfields:\n  headline: Big News\n", encoding="utf-8")
        window.open_card(card)
        assert window.state.template == "announcement"
        assert window.template_combo.currentData() == "announcement"
        assert window.state.size == "1200x630"

        window.render_preview()
        assert window.last_rendered.size == (1200, 630)
    finally:
        window.close()
