import numpy as np
import pytest

from socialcard.constants import IMAGE_SIZES
from socialcard.models import TemplateData, TokenInfo
from socialcard.render.engine import draw_card, render_card


@pytest.mark.parametrize("size", list(IMAGE_SIZES))
def test_render_matches_size_preset(size: str) -> None:
    rendered = render_card(TemplateData(template="announcement", size=size), {}, noise_seed=1)
    assert rendered.size == IMAGE_SIZES[size]
    assert rendered.mode == "RGBA"


def test_render_is_deterministic_with_seed() -> None:
    data = TemplateData(template="new-pair", tokens=(TokenInfo(symbol="DGKO"), TokenInfo(symbol="KLV")), size="1200x630")
    first = render_card(data, {}, noise_seed=42)
    second = render_card(data, {}, noise_seed=42)
    assert first.tobytes() == second.tobytes()

    other = render_card(data, {}, noise_seed=43)
    diff = np.abs(np.asarray(first, dtype=int) - np.asarray(other, dtype=int))
    # 只有噪点不同
    assert diff.max() <= 6


def test_unknown_template_still_renders_background_and_footer() -> None:
    rendered = render_card(TemplateData(template="mystery", size="1200x630"), {}, noise_seed=0)
    assert rendered.size == (1200, 630)
    assert rendered.convert("RGB").getbbox() is not None


def test_draw_card_without_canvas_is_noop() -> None:
    assert draw_card(None, TemplateData(template="listing")) is False
