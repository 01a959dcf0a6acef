# Configuration loader with environment variable support

import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, validator
from pydantic_settings import BaseSettings

from .models import XmlGraphBaseModel

logger = logging.getLogger(__name__)

DEFAULT_ADAPTERS = ["structural", "attribute_reference"]


class IngestionConfig(BaseModel):
    concurrency: int = Field(default=4, gt=0)
    batch_size: int = Field(default=1000, gt=0)
    queue_size: int = Field(default=50, gt=0)
    file_pattern: str = "**/*.xml"


class RelationshipsConfig(BaseModel):
    enabled: bool = True
    queue_size: int = Field(default=100, gt=0)
    batch_size: int = Field(default=1000, gt=0)
    adapters: List[str] = Field(default_factory=lambda: list(DEFAULT_ADAPTERS))

    @validator("adapters", each_item=True)
    def _adapter_name_not_blank(cls, value: str):
        if not value or not value.strip():
            raise ValueError("adapter names must be non-empty")
        return value.strip()


class StoreConfig(BaseModel):
    path: str = "db/output.sqlite3"
    force: bool = False


class Config(XmlGraphBaseModel):
    """Main configuration model"""

    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    relationships: RelationshipsConfig = Field(default_factory=RelationshipsConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)


class Settings(BaseSettings):
    """Environment-based settings"""

    env: str = Field(default="development", alias="ENV")
    config_path: Optional[str] = Field(default=None, alias="CONFIG_PATH")
    database_path: Optional[str] = Field(default=None, alias="XMLGRAPH_DATABASE_PATH")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


def _default_config_path(settings: Settings) -> Path:
    return Path(__file__).parent.parent.parent / "config" / f"{settings.env}.yaml"


@lru_cache(maxsize=8)
def _read_yaml(path: str) -> dict:
    with open(path, "r") as fh:
        return yaml.safe_load(fh) or {}


def load_config() -> tuple[Config, Settings]:
    """
    Load configuration from YAML file and environment variables.

    Returns:
        tuple: (Config, Settings) - YAML config and environment settings

    Raises:
        FileNotFoundError: If an explicit CONFIG_PATH does not exist
        pydantic.ValidationError: If configuration validation fails
    """
    settings = Settings()

    if settings.config_path:
        config_path = Path(settings.config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
    else:
        config_path = _default_config_path(settings)

    if config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        config = Config(**_read_yaml(str(config_path.resolve())))
    else:
        logger.info(f"No configuration file at {config_path}, using defaults")
        config = Config()

    if settings.database_path:
        config.store.path = settings.database_path

    return config, settings


# Global config instances (loaded once at startup)
_config: Optional[Config] = None
_settings: Optional[Settings] = None


def get_config() -> Config:
    """Get the global Config instance"""
    global _config
    if _config is None:
        _config, _ = load_config()
    return _config


def get_settings() -> Settings:
    """Get the global Settings instance"""
    global _settings
    if _settings is None:
        _, _settings = load_config()
    return _settings


def init_config() -> tuple[Config, Settings]:
    """Initialize and cache global config instances"""
    global _config, _settings
    _config, _settings = load_config()
    return _config, _settings


def reload_config() -> tuple[Config, Settings]:
    """Force reload of config/settings from disk and environment."""
    global _config, _settings
    _read_yaml.cache_clear()
    _config, _settings = load_config()
    return _config, _settings
