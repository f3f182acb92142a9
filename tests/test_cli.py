from pathlib import Path

import yaml
from PIL import Image
from typer.testing import CliRunner

from socialcard.cli import app

runner = CliRunner()


def _config(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.safe_dump({"asset_root": str(tmp_path / "public"), "loader_workers": 1, "noise_seed": 3}),
        encoding="utf-8",
    )
    return path


def _card(tmp_path: Path, name: str = "card.yaml", **extra) -> Path:
    data = {"template": "listing", "size": "1200x630", "tokens": ["ABC"], "fields": {"subheadline": "Now on Digiko"}}
    data.update(extra)
    path = tmp_path / "cards" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_render_writes_png(tmp_path: Path) -> None:
    card = _card(tmp_path)
    out_dir = tmp_path / "out"
    result = runner.invoke(app, ["render", str(card), "--out", str(out_dir), "--config", str(_config(tmp_path))])
    assert result.exit_code == 0, result.output
    output = out_dir / "card__listing_1200x630.png"
    with Image.open(output) as image:
        assert image.size == (1200, 630)
    assert "success=1" in result.output


def test_render_size_override_and_skip_existing(tmp_path: Path) -> None:
    card = _card(tmp_path)
    out_dir = tmp_path / "out"
    args = ["render", str(card), "--out", str(out_dir), "--size", "1080x1080", "--config", str(_config(tmp_path))]
    assert runner.invoke(app, args).exit_code == 0
    assert (out_dir / "card__listing_1080x1080.png").exists()

    result = runner.invoke(app, args + ["--skip-existing"])
    assert result.exit_code == 0
    assert "skipped=1" in result.output


def test_render_rejects_unknown_size(tmp_path: Path) -> None:
    result = runner.invoke(app, ["render", str(_card(tmp_path)), "--size", "1x1", "--config", str(_config(tmp_path))])
    assert result.exit_code == 1


def test_render_reports_failures(tmp_path: Path) -> None:
    _card(tmp_path)
    broken = tmp_path / "cards" / "broken.yaml"
    broken.write_text("fields: {}\n", encoding="utf-8")
    result = runner.invoke(
        app, ["render", str(tmp_path / "cards"), "--out", str(tmp_path / "out"), "--config", str(_config(tmp_path))]
    )
    assert result.exit_code == 1
    assert "broken.yaml" in result.output
    assert (tmp_path / "out" / "card__listing_1200x630.png").exists()


def test_render_data_url(tmp_path: Path) -> None:
    result = runner.invoke(app, ["render", str(_card(tmp_path)), "--data-url", "--config", str(_config(tmp_path))])
    assert result.exit_code == 0, result.output
    assert "data:image/png;base64," in result.output


def test_listing_commands() -> None:
    templates = runner.invoke(app, ["templates"])
    assert templates.exit_code == 0
    assert "season-announcement" in templates.output

    tokens = runner.invoke(app, ["tokens"])
    assert "DGKO" in tokens.output

    sizes = runner.invoke(app, ["sizes"])
    assert "1920x1080" in sizes.output
    assert "hex" in sizes.output


def test_init_config(tmp_path: Path, monkeypatch) -> None:
    target = tmp_path / "Config" / "config.yaml"
    monkeypatch.setattr("socialcard.config.get_config_path", lambda: target)
    result = runner.invoke(app, ["init-config"])
    assert result.exit_code == 0
    assert target.exists()
