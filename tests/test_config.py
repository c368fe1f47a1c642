"""Tests for config loading and validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from catcircle.config import load_config, load_config_or_default
from catcircle.schemas.config import AppConfig, MatchingSettings


class TestAppConfig:
    """Test the AppConfig Pydantic model directly."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert cfg.api.base_url == ""
        assert cfg.matching == MatchingSettings(base=65, interest_weight=8, jitter=5, ceiling=99)
        assert cfg.assistant.history_window == 6
        assert cfg.rewards.post_reward == 10
        assert cfg.rewards.signup_balance == 500

    def test_negative_latency_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AppConfig(api={"latency_seconds": -1})

    def test_ceiling_above_100_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AppConfig(matching={"ceiling": 120})


class TestLoadConfig:
    """Test YAML file loading."""

    def test_load_valid(self, tmp_config: Path) -> None:
        cfg = load_config(tmp_config)
        assert cfg.api.latency_seconds == 0
        assert cfg.matching.jitter == 0
        assert cfg.storage_path.endswith("storage.json")

    def test_file_not_found(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_config("/nonexistent/catcircle.yml")

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yml"
        path.write_text("# nothing here\n")
        assert load_config(path) == AppConfig()

    def test_blank_section_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "blank.yml"
        path.write_text("matching:\nassistant:\n  history_window: 2\n")
        cfg = load_config(path)
        assert cfg.matching == MatchingSettings()
        assert cfg.assistant.history_window == 2

    def test_non_mapping_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="YAML mapping"):
            load_config(path)

    def test_invalid_values(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yml"
        path.write_text("matching:\n  base: 120\n")
        with pytest.raises(ValidationError):
            load_config(path)


class TestLoadConfigOrDefault:
    def test_explicit_path(self, tmp_config: Path) -> None:
        assert load_config_or_default(tmp_config).matching.jitter == 0

    def test_no_file_gives_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert load_config_or_default(None) == AppConfig()

    def test_picks_up_local_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "catcircle.yml").write_text("rewards:\n  post_reward: 25\n")
        assert load_config_or_default(None).rewards.post_reward == 25
