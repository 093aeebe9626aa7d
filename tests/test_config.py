"""Tests for configuration loading."""

from pathlib import Path

import pytest
import yaml

from oahspe.config import AppConfig, load_config


class TestAppConfigDefaults:
    """Test that AppConfig provides sensible defaults."""

    def test_default_config_creates_successfully(self) -> None:
        config = AppConfig()
        assert config.ingestion.introduction_book_description == "Preface and introductory content"
        assert config.logging.format.startswith("%(asctime)s")

    def test_default_ingestion_config(self) -> None:
        config = AppConfig()
        assert config.ingestion.introduction_book_title == "Introduction"
        assert config.ingestion.preface_chapter_title == "Preface"
        assert config.ingestion.page_separator == "\f"

    def test_default_storage_config(self) -> None:
        config = AppConfig()
        assert config.storage.sqlite_path == "./db/oahspe.db"

    def test_default_logging_level(self) -> None:
        assert AppConfig().logging.level == "INFO"


class TestLoadConfig:
    """Test loading config from YAML files."""

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        yaml_data = {
            "storage": {"sqlite_path": "/data/test.db"},
            "ingestion": {"preface_chapter_title": "Foreword"},
        }
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump(yaml_data))

        config = load_config(config_file)
        assert config.storage.sqlite_path == "/data/test.db"
        assert config.ingestion.preface_chapter_title == "Foreword"
        # Other fields keep defaults
        assert config.ingestion.introduction_book_title == "Introduction"

    def test_load_missing_yaml_uses_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("OAHSPE_SQLITE_PATH", raising=False)
        config = load_config(tmp_path / "nonexistent.yaml")
        assert config.storage.sqlite_path == "./db/oahspe.db"

    def test_env_vars_override_storage_and_logging(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("{}")

        monkeypatch.setenv("OAHSPE_SQLITE_PATH", "/tmp/other.db")
        monkeypatch.setenv("OAHSPE_LOG_LEVEL", "debug")

        config = load_config(config_file)
        assert config.storage.sqlite_path == "/tmp/other.db"
        assert config.logging.level == "DEBUG"

    def test_load_project_config_yaml(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test loading the actual project config.yaml."""
        monkeypatch.delenv("OAHSPE_SQLITE_PATH", raising=False)
        config_path = Path(__file__).parent.parent / "config.yaml"
        config = load_config(config_path)
        assert config.ingestion.preface_chapter_title == "Preface"
        assert config.storage.sqlite_path == "./db/oahspe.db"
