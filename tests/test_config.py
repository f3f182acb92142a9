from pathlib import Path

import yaml

from socialcard.config import DEFAULT_CONFIG, get_app_dir, get_asset_root, load_config, write_default_config


def test_missing_config_gives_defaults(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "absent.yaml")
    assert cfg["brand_logo_url"] == DEFAULT_CONFIG["brand_logo_url"]
    assert cfg["loader_workers"] >= 1
    assert cfg["fonts"] == DEFAULT_CONFIG["fonts"]


def test_user_config_deep_merges(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"fonts": {"mono": "/fonts/mono.ttf"}, "noise_intensity": 0}), encoding="utf-8")
    cfg = load_config(path)
    assert cfg["fonts"]["mono"] == "/fonts/mono.ttf"
    assert cfg["fonts"]["display"] is None
    assert cfg["noise_intensity"] == 0
    assert DEFAULT_CONFIG["fonts"]["mono"] is None


def test_asset_root(tmp_path: Path) -> None:
    assert get_asset_root({}) == get_app_dir() / "public"
    assert get_asset_root({"asset_root": str(tmp_path)}) == tmp_path


def test_write_default_config_respects_force(tmp_path: Path) -> None:
    path = tmp_path / "Config" / "config.yaml"
    assert write_default_config(path) == path
    path.write_text("noise_intensity: 9\n", encoding="utf-8")
    write_default_config(path)
    assert load_config(path)["noise_intensity"] == 9
    write_default_config(path, force=True)
    assert load_config(path)["noise_intensity"] == DEFAULT_CONFIG["noise_intensity"]
