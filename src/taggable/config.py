"""Centralised configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/taggable/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class EditorConfig(BaseModel):
    """Tag editor behaviour."""

    # Character written after every inserted tag
    tag_separator: str = " "
    # Upper bound for repair passes per edit; None derives it from text length
    max_repair_passes: int | None = None

    @field_validator("tag_separator")
    @classmethod
    def separator_is_whitespace(cls, value: str) -> str:
        if len(value) != 1 or not value.isspace():
            msg = "EDITOR__TAG_SEPARATOR must be a single whitespace character"
            raise ValueError(msg)
        return value

    @field_validator("max_repair_passes")
    @classmethod
    def passes_positive(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            msg = "EDITOR__MAX_REPAIR_PASSES must be at least 1"
            raise ValueError(msg)
        return value


class AppConfig(BaseModel):
    """Demo application runtime configuration."""

    host: str = "127.0.0.1"
    port: int = 8080
    storage_secret: SecretStr = SecretStr("dev-secret-change-me")
    log_dir: Path = Path("logs")
    # Console handler level; the log file always records DEBUG
    log_level: str = "INFO"


class DevConfig(BaseModel):
    """Development toggles."""

    reload: bool = False
    enable_demo_pages: bool = True


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``EDITOR__TAG_SEPARATOR``, ``APP__PORT``, ``DEV__RELOAD``, etc.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    editor: EditorConfig = EditorConfig()
    app: AppConfig = AppConfig()
    dev: DevConfig = DevConfig()


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.info("Settings: no .env file found, using env vars and defaults")

    return settings
