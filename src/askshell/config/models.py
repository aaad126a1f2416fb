"""Settings schema for askshell."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator

DEFAULT_MODEL = "qwen2.5-coder:7b"
DEFAULT_OLLAMA_HOST = "http://localhost:11434"
SCHEMA_VERSION = 1


def env_default(key: str, fallback: str) -> str:
    """Return the environment value for ``key`` unless unset or empty."""
    value = os.getenv(key)
    if value:
        return value
    return fallback


class OllamaSettings(BaseModel):
    host: str = Field(default=DEFAULT_OLLAMA_HOST)
    request_timeout_s: float = Field(default=120.0, gt=0)
    health_timeout_s: float = Field(default=3.0, gt=0)

    @field_validator("host")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class ModelSettings(BaseModel):
    name: str = Field(default=DEFAULT_MODEL)


class StatisticsSettings(BaseModel):
    enabled: bool = Field(default=True)


class UpdateSettings(BaseModel):
    check_enabled: bool = Field(default=True)
    package_name: str = Field(default="askshell")
    check_interval_hours: float = Field(default=24.0, ge=0)
    timeout_s: float = Field(default=5.0, gt=0)


class AppSettings(BaseModel):
    schema_version: int = Field(default=SCHEMA_VERSION)
    ollama: OllamaSettings = Field(default_factory=OllamaSettings)
    model: ModelSettings = Field(default_factory=ModelSettings)
    statistics: StatisticsSettings = Field(default_factory=StatisticsSettings)
    updates: UpdateSettings = Field(default_factory=UpdateSettings)


def apply_env_overrides(settings: AppSettings) -> AppSettings:
    """Layer ``OLLAMA_HOST`` and ``ASK_MODEL`` over persisted settings.

    Environment values are read on every start and never written back, so
    unsetting a variable restores the stored value.
    """
    ollama = settings.ollama.model_copy(
        update={"host": env_default("OLLAMA_HOST", settings.ollama.host).rstrip("/")}
    )
    model = settings.model.model_copy(
        update={"name": env_default("ASK_MODEL", settings.model.name)}
    )
    return settings.model_copy(update={"ollama": ollama, "model": model})
