"""Centralized settings and configuration loading utilities."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from . import __version__

DEFAULT_USER_AGENT = f"webmarkdown/{__version__} (HTML to Markdown Converter)"


class FetchSettings(BaseModel):
    user_agent: str = DEFAULT_USER_AGENT
    timeout_sec: float = Field(30.0, gt=0)
    follow_redirects: bool = True


class LoggingSettings(BaseModel):
    level: str = "INFO"
    log_dir: str | None = None
    max_log_file_size_mb: int = 100
    backup_count: int = 7


class MonitoringSettings(BaseModel):
    enabled: bool = False
    prometheus_port: int = 9091


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="WEBMD_", env_nested_delimiter="__", extra="allow")

    service_name: str = "webmarkdown"
    environment: str = "dev"
    host: str = "0.0.0.0"
    port: int = Field(3000, validation_alias=AliasChoices("PORT", "WEBMD_PORT", "port"))
    converter: str = "readability"
    static_dir: str | None = None

    fetch: FetchSettings = FetchSettings()
    logging: LoggingSettings = LoggingSettings()
    monitoring: MonitoringSettings = MonitoringSettings()

    @staticmethod
    def load_yaml_config_file(file_path: str | Path | None) -> Dict[str, Any]:
        if not file_path:
            return {}
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        import yaml  # lazy import for optional dependency

        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        if not isinstance(data, dict):
            raise ValueError("Configuration YAML must produce a mapping")
        return data

    @classmethod
    def from_source(cls, *, config_file: str | None = None, **overrides: Any) -> "Settings":
        base_data = cls.load_yaml_config_file(config_file)
        base_data.update(overrides)
        return cls(**base_data)


@lru_cache
def get_settings() -> Settings:
    cfg_file = os.getenv("WEBMD_CONFIG_FILE")
    if cfg_file:
        return Settings.from_source(config_file=cfg_file)

    default_path = Path.cwd() / "config" / "settings.yaml"
    if default_path.exists():
        return Settings.from_source(config_file=str(default_path))

    return Settings()


def reload_settings() -> None:
    get_settings.cache_clear()
