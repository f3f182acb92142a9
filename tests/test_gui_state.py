from socialcard.card_loader import custom_token, preset_token
from socialcard.gui.state import EditorState
from socialcard.models import GridOptions


def test_defaults_prefill_catalog_fields() -> None:
    state = EditorState()
    assert state.template == "new-pair"
    assert [t.symbol for t in state.tokens] == ["DGKO", "KLV"]
    assert state.fields["headline"] == "New Pair Added"


def test_select_template_resets_size_and_fields() -> None:
    state = EditorState()
    state.set_field("headline", "Custom")
    state.select_template("announcement")
    assert state.size == "1200x630"
    assert state.fields["headline"] == "Announcement"
    assert "bodyText" in state.fields


def test_add_token_limits() -> None:
    state = EditorState(tokens=[])
    assert state.add_token(preset_token("DGKO"))
    assert not state.add_token(preset_token("DGKO"))
    assert state.add_token(custom_token("abc"))
    assert not state.add_token(preset_token("KLV"))
    state.remove_token("DGKO")
    assert [t.symbol for t in state.tokens] == ["ABC"]


def test_reset_and_snapshot() -> None:
    state = EditorState()
    state.accent_color = "#FF0000"
    state.grid = GridOptions(style="hex", opacity=0, density=3)
    data = state.to_template_data()
    assert data.grid.alpha == 0.1
    state.fields["headline"] = "changed"
    assert data.fields["headline"] == "New Pair Added"

    state.reset()
    assert state.accent_color == "#0066FF"
    assert state.grid == GridOptions()
