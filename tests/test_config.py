"""
Tests for the configuration
===========================
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from gesture_fireworks.config import Config


def test_defaults() -> None:
    config = Config()
    assert config.classifier.extension_ratio == 1.3
    assert config.classifier.pinch_threshold == 0.05
    assert config.engine.burst_damping == 0.9
    assert config.interaction.heart_cooldown == 1.5
    assert config.interaction.finale_cooldown == 3.0
    assert config.show.phrases == ["2026", "祝大家", "新年快乐", "马到成功"]


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    assert Config.load(tmp_path / "missing.json") == Config()


def test_save_then_load(tmp_path: Path) -> None:
    config = Config()
    config.interaction.zoom_step = 0.5
    config.show.phrases = ["福"]

    path = config.save(tmp_path / "nested" / "config.json")
    assert path.is_file()

    loaded = Config.load(path)
    assert loaded.interaction.zoom_step == 0.5
    assert loaded.show.phrases == ["福"]


def test_partial_file(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text('{"engine": {"fade_step": 0.05}}', encoding="utf-8")
    config = Config.load(str(path))
    assert config.engine.fade_step == 0.05
    assert config.engine.burst_damping == 0.9


def test_invalid_file_gives_defaults(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.ERROR, logger="gesture_fireworks.config"):
        assert Config.load(path) == Config()
    assert "Error loading config" in caplog.text


def test_invalid_values_give_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text('{"interaction": {"finale_count": "many"}}', encoding="utf-8")
    assert Config.load(path).interaction.finale_count == 6


def test_directory_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        Config.load(tmp_path)
    with pytest.raises(ValueError):
        Config().save(tmp_path)


def test_user_path() -> None:
    path = Config.get_user_path()
    assert path.name == "config.json"
    assert "gesture-fireworks" in str(path)
