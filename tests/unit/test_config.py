"""Unit tests for configuration loading."""

import pytest
from pydantic import ValidationError

from tokenscope.config import Config, ScoringConfig
from tokenscope.config.config import LazyConfig


class TestConfig:
    """Test defaults, environment overrides and YAML loading."""

    def test_defaults(self):
        config = Config()

        assert config.project_name == "tokenscope"
        assert config.pipeline.max_concurrency == 8
        assert config.scoring.acceptable_threshold == 0.7
        assert config.color.contrast_normal == 4.5

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("TOKENSCOPE_PIPELINE__MAX_CONCURRENCY", "3")
        assert Config().pipeline.max_concurrency == 3

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "tokenscope.yaml"
        path.write_text("pipeline:\n  max_concurrency: 4\nscoring:\n  acceptable_threshold: 0.5\n")
        config = Config.from_yaml(path)

        assert config.pipeline.max_concurrency == 4
        assert config.scoring.acceptable_threshold == 0.5

    def test_empty_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / "tokenscope.yaml"
        path.write_text("")
        assert Config.from_yaml(path).pipeline.max_concurrency == 8

    def test_missing_yaml(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.from_yaml(tmp_path / "missing.yaml")

    def test_log_file_parent_is_created(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        config = Config(monitoring={"log_file": log_file})

        assert config.monitoring.log_file == str(log_file)
        assert log_file.parent.is_dir()


class TestScoringWeights:
    def test_unknown_sub_score(self):
        with pytest.raises(ValidationError):
            ScoringConfig(weights={"vibes": 1.0})

    def test_all_zero_weights(self):
        with pytest.raises(ValidationError):
            ScoringConfig(weights={"color_consistency": 0.0})

    def test_negative_weight(self):
        with pytest.raises(ValidationError):
            ScoringConfig(weights={"color_consistency": -1.0, "spacing_regularity": 1.0})


class TestLazyConfig:
    """Test the lazily loaded global settings."""

    def test_loads_yaml_from_working_directory(self, tmp_path, monkeypatch):
        (tmp_path / "tokenscope.yaml").write_text("project_name: acme-audit\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(LazyConfig, "_config", None)

        assert LazyConfig().project_name == "acme-audit"

    def test_invalid_yaml_falls_back_to_defaults(self, tmp_path, monkeypatch):
        (tmp_path / "tokenscope.yaml").write_text("scoring:\n  weights:\n    vibes: 1.0\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(LazyConfig, "_config", None)

        assert LazyConfig().project_name == "tokenscope"
