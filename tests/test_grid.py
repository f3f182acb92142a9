import pytest

from socialcard.constants import GRID_STYLES
from socialcard.models import GridOptions
from socialcard.render.background import draw_background
from socialcard.render.canvas import Canvas
from socialcard.render.grid import density_line_count, density_tier, draw_grid, hex_cells


def test_grid_none_issues_no_draw_calls() -> None:
    canvas = Canvas(120, 80)
    draw_grid(canvas, 120, 80, "#0066FF", GridOptions(style="none"))
    assert canvas.operations == []


def test_unknown_grid_style_is_noop() -> None:
    canvas = Canvas(120, 80)
    draw_grid(canvas, 120, 80, "#0066FF", GridOptions(style="zigzag"))
    assert canvas.draw_calls == 0


@pytest.mark.parametrize("style", [s for s in GRID_STYLES if s != "none"])
def test_every_grid_style_draws(style: str) -> None:
    canvas = Canvas(120, 80)
    draw_grid(canvas, 120, 80, "#0066FF", GridOptions(style=style, opacity=50, density=1))
    assert canvas.draw_calls > 0


def test_background_differs_only_by_grid_calls() -> None:
    plain = Canvas(120, 80)
    draw_background(plain, 120, 80, "#0066FF", GridOptions(style="none"), noise_intensity=0)
    gridded = Canvas(120, 80)
    draw_background(gridded, 120, 80, "#0066FF", GridOptions(style="radial"), noise_intensity=0)

    grid_only = Canvas(120, 80)
    draw_grid(grid_only, 120, 80, "#0066FF", GridOptions(style="radial"))
    assert gridded.draw_calls - plain.draw_calls == grid_only.draw_calls


def test_density_tiers_clamp() -> None:
    assert density_tier(0) == 1
    assert density_tier(2) == 2
    assert density_tier(7) == 3
    assert density_tier("dense") == 1
    assert density_tier(None) == 1
    assert [density_line_count(d) for d in (1, 2, 3)] == [8, 12, 18]


def test_hex_cells_stay_inside_fade_radius() -> None:
    w, h = 1080, 1080
    cells = hex_cells(w, h, 3)
    assert cells
    assert all(dist <= max(w, h) * 0.7 for _, _, dist in cells)
    # 中心格一定存在
    assert any(x == w / 2 and y == h / 2 for x, y, _ in cells)


def test_hex_grid_with_zero_opacity_still_visible() -> None:
    canvas = Canvas(200, 200)
    draw_grid(canvas, 200, 200, "#FFFFFF", GridOptions(style="hex", density=3, opacity=0))
    assert canvas.image.getbbox() is not None
