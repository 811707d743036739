import pytest

from text_annotator.core.annotation.config import DEFAULTS, make_config, to_bool


def test_defaults():
    cfg = make_config(env={})
    for key, value in DEFAULTS.items():
        assert cfg[key] == value
    assert cfg.editor_auto_position is True


def test_overrides():
    cfg = make_config(env={}, read_only=True, widgets=[{"widget": "TAG"}])
    assert cfg.read_only
    assert cfg.widgets[0].widget == "TAG"


def test_environment():
    cfg = make_config(
        env={
            "TEXTANNOTATOR_READ_ONLY": "yes",
            "TEXTANNOTATOR_DISABLE_EDITOR": "0",
            "TEXTANNOTATOR_RELATION_VOCABULARY__SOURCE": "vocab.json",
            "OTHER_READ_ONLY": "true",
        }
    )
    assert cfg.read_only is True
    assert cfg.disable_editor is False
    assert cfg.relation_vocabulary.source == "vocab.json"


def test_overrides_win_over_environment():
    cfg = make_config(env={"TEXTANNOTATOR_ALLOW_EMPTY": "true"}, allow_empty=False)
    assert cfg.allow_empty is False


def test_defaults_are_not_shared():
    make_config(env={}).widgets.append("COMMENT")
    assert make_config(env={}).widgets == []


@pytest.mark.parametrize("value", ["maybe", "2"])
def test_to_bool_rejects_garbage(value):
    with pytest.raises(ValueError):
        to_bool(value)
