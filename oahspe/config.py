"""Configuration loader for the Oahspe ingestion engine."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class IngestionConfig(BaseModel):
    """Event folding configuration."""

    introduction_book_title: str = "Introduction"
    introduction_book_description: str = "Preface and introductory content"
    preface_chapter_title: str = "Preface"
    preface_chapter_description: str = "Content before first formal chapter"
    page_separator: str = "\f"


class StorageConfig(BaseModel):
    """Storage configuration."""

    sqlite_path: str = "./db/oahspe.db"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class AppConfig(BaseModel):
    """Root application configuration."""

    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Fully populated AppConfig instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            yaml_data = yaml.safe_load(f) or {}

    config = AppConfig(**yaml_data)

    # Environment wins over the YAML file
    sqlite_path = os.getenv("OAHSPE_SQLITE_PATH")
    if sqlite_path:
        config.storage.sqlite_path = sqlite_path
    log_level = os.getenv("OAHSPE_LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.upper()

    return config
