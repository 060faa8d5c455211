"""Tests for configuration loading and content settings."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from aicn.config import Config, ConfigModel, load_config, load_sources, save_config
from aicn.models import ContentSettings


class TestConfig:
    """Test the YAML configuration layer."""

    def test_defaults_when_missing(self, tmp_path: Path) -> None:
        """Test a missing file yields the default configuration."""
        config = Config(tmp_path / "config.yaml")

        assert config.config.llm.model == "gpt-4o-mini"
        assert config.config.postgres.database == "aicn"

    def test_env_path(self, tmp_path: Path, monkeypatch) -> None:
        """Test AICN_CONFIG selects the config file."""
        path = tmp_path / "custom.yaml"
        save_config(ConfigModel(llm={"provider": "mock"}), path)
        monkeypatch.setenv("AICN_CONFIG", str(path))

        config = Config()

        assert config.config_path == path
        assert config.config.llm.provider == "mock"
        assert config.sources_path == tmp_path / "sources.yaml"

    def test_secrets_from_environment(self, tmp_path: Path, monkeypatch) -> None:
        """Test passwords and API keys are read from the named variables."""
        monkeypatch.setenv("AICN_DB_PASSWORD", "s3cret")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        config = Config(tmp_path / "config.yaml")

        assert config.get_db_config()["password"] == "s3cret"
        assert config.get_llm_config()["api_key"] == "sk-test"

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Test malformed YAML is reported as a ValueError."""
        path = tmp_path / "config.yaml"
        path.write_text("llm: [unclosed")

        with pytest.raises(ValueError):
            load_config(path)

    def test_load_sources_skips_invalid(self, tmp_path: Path) -> None:
        """Test entries without a feed are skipped."""
        path = tmp_path / "sources.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "sources": [
                        {"name": "Finextra", "rss_feed": "https://www.finextra.com/rss/headlines.aspx"},
                        {"name": "Broken"},
                    ]
                }
            )
        )

        sources = load_sources(path)

        assert [s.name for s in sources] == ["Finextra"]


class TestContentSettings:
    """Test content settings validation."""

    def test_defaults(self) -> None:
        """Test the baked-in defaults."""
        settings = ContentSettings()

        assert settings.daily_min_articles == 5
        assert settings.daily_max_articles == 10
        assert settings.daily_max_ai_articles == 3
        assert settings.auto_publish_hours == 48

    def test_min_above_max(self) -> None:
        """Test the minimum cannot exceed the maximum."""
        with pytest.raises(ValidationError):
            ContentSettings(daily_min_articles=11, daily_max_articles=10)

    def test_ai_above_max(self) -> None:
        """Test the AI cap cannot exceed the daily maximum."""
        with pytest.raises(ValidationError):
            ContentSettings(daily_max_articles=2, daily_min_articles=1, daily_max_ai_articles=3)

    def test_negative(self) -> None:
        """Test negative limits are refused."""
        with pytest.raises(ValidationError):
            ContentSettings(daily_min_articles=-1)
