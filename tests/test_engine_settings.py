"""Tests for engine configuration."""

import pytest
from pydantic import ValidationError

from board_engine import BoardEngine
from engine_settings import EngineSettings


def test_defaults():
    settings = EngineSettings()
    assert (settings.rows, settings.columns) == (4, 4)
    assert settings.spawn_probability == 0.1
    assert settings.win_power == 11


@pytest.mark.parametrize("field, value", [
    ("rows", 0),
    ("columns", -2),
    ("spawn_probability", 1.5),
    ("spawn_probability", -0.1),
    ("win_power", 0),
])
def test_out_of_range_settings_rejected(field, value):
    with pytest.raises(ValidationError):
        EngineSettings(**{field: value})


def test_engine_from_settings():
    settings = EngineSettings(rows=3, columns=5, spawn_probability=0.5, win_power=7)

    engine = BoardEngine.from_settings(settings, best_score=12)

    assert (engine.rows, engine.columns) == (3, 5)
    assert engine.spawn_probability == 0.5
    assert engine.win_power == 7
    assert engine.best_score == 12
    assert engine.score == 0


def test_layout_overrides_configured_dimensions():
    engine = BoardEngine.from_settings(EngineSettings(), layout=[[1, None]])
    assert (engine.rows, engine.columns) == (1, 2)
