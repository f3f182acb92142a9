import json
from pathlib import Path

import pytest

from socialcard.card_loader import (
    accent_palette,
    custom_token,
    get_template_spec,
    list_templates,
    load_card,
    load_presets,
    normalize_card_dict,
    preset_token,
    template_defaults,
)
from socialcard.constants import TEMPLATE_IDS


def test_catalog_lists_every_template() -> None:
    ids = [spec.id for spec in list_templates()]
    assert ids == list(TEMPLATE_IDS)
    assert get_template_spec("announcement").default_size == "1200x630"
    assert get_template_spec("nope") is None


def test_template_defaults_come_from_catalog() -> None:
    defaults = template_defaults("milestone")
    assert defaults["metric"] == "transactions"
    assert defaults["number"] == "1,000,000"
    assert template_defaults("nope") == {}

    metric = next(item for item in get_template_spec("milestone").fields if item.id == "metric")
    assert ("users", "Users") in metric.options


def test_presets_and_custom_tokens() -> None:
    presets = load_presets()
    assert "DGKO" in presets and "KLV" in presets
    assert preset_token("dgko") is presets["DGKO"]
    assert preset_token("zzz") is None

    token = custom_token("abc", color="#ff00ff")
    assert token.symbol == "ABC"
    assert token.name == "abc"
    assert token.color == "#FF00FF"
    with pytest.raises(ValueError):
        custom_token("   ")


def test_accent_palette_is_deduplicated() -> None:
    values = [value for value, _ in accent_palette()]
    assert values
    assert len(values) == len(set(values))


def test_normalize_clamps_grid_and_tokens(caplog: pytest.LogCaptureFixture) -> None:
    data = normalize_card_dict(
        {
            "template": "new-pair",
            "size": "640x480",
            "tokens": ["DGKO", {"symbol": "NEW", "logoUrl": "https://cdn.example.com/new.png"}, "KLV"],
            "grid": {"style": "HEX", "opacity": 250, "density": 9},
            "accentColor": "#ff0000",
        }
    )
    assert data.size == "1080x1080"
    assert [t.symbol for t in data.tokens] == ["DGKO", "NEW"]
    assert data.tokens[1].logo_url == "https://cdn.example.com/new.png"
    assert data.grid.style == "hex"
    assert data.grid.opacity == 100
    assert data.grid.density == 3
    assert data.accent_color == "#FF0000"
    assert data.fields["headline"] == "New Pair Added"
    assert "640x480" in caplog.text


def test_normalize_grid_bad_values() -> None:
    data = normalize_card_dict({"template": "milestone", "grid": {"opacity": -5, "density": "dense"}})
    assert data.grid.opacity == 0
    assert data.grid.density == 1
    assert data.grid.alpha == pytest.approx(0.1)


def test_normalize_requires_template() -> None:
    with pytest.raises(ValueError):
        normalize_card_dict({"fields": {}})


def test_normalize_without_prefill_keeps_only_given_fields() -> None:
    data = normalize_card_dict({"template": "listing", "fields": {"subheadline": "Now on Digiko"}}, prefill_defaults=False)
    assert data.fields == {"subheadline": "Now on Digiko"}


def test_load_card_yaml_and_json(tmp_path: Path) -> None:
    yaml_path = tmp_path / "card.yaml"
    yaml_path.write_text("template: listing\ntokens: [ABC]\nfields:\n  subheadline: Now on Digiko\n", encoding="utf-8")
    data = load_card(yaml_path)
    assert data.template == "listing"
    assert data.tokens[0].symbol == "ABC"

    json_path = tmp_path / "card.json"
    json_path.write_text(json.dumps({"template": "milestone", "fields": {"metric": "users"}, "showDisclaimer": False}), encoding="utf-8")
    data = load_card(json_path)
    assert data.fields["metric"] == "users"
    assert data.show_disclaimer is False


def test_load_card_errors_name_the_file(tmp_path: Path) -> None:
    broken = tmp_path / "broken.yaml"
    broken.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError, match="broken.yaml"):
        load_card(broken)

    bad_tokens = tmp_path / "tokens.yaml"
    bad_tokens.write_text("template: listing\ntokens: [42]\n", encoding="utf-8")
    with pytest.raises(ValueError, match="tokens.yaml"):
        load_card(bad_tokens)

    with pytest.raises(ValueError):
        load_card(tmp_path / "missing.yaml")
