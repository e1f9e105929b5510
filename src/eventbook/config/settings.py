# src/eventbook/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/eventbook/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `EVENTBOOK_JWT_SECRET`, `EVENTBOOK_DATA_DIR`)
- an external YAML file via `EVENTBOOK_CONFIG_PATH`

Design rule:
- The request-handling layer receives a `Settings` object at startup (`create_app(settings)`);
  the scheduling/search core never reads configuration itself.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from eventbook.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `eventbook.config`."""
    text = resources.files("eventbook.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "EventBook"
    timezone: str = "UTC"
    log_level: str = "INFO"


class StorageSettings(BaseModel):
    enabled: bool = True
    dir: str = ".data/eventbook"


class AuthSettings(BaseModel):
    jwt_secret: str | None = None
    jwt_algorithm: str = "HS256"
    token_ttl_seconds: int = Field(60 * 60, gt=0)
    bcrypt_rounds: int = Field(10, ge=4, le=31)


class SchedulingSettings(BaseModel):
    # False keeps one occurrence per matching selector (duplicate dates included).
    dedupe_dates: bool = False


class ExportSettings(BaseModel):
    dir: str = "data/files"


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    scheduling: SchedulingSettings = Field(default_factory=SchedulingSettings)
    exports: ExportSettings = Field(default_factory=ExportSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("EVENTBOOK_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    timezone = os.getenv("EVENTBOOK_TIMEZONE")
    if timezone:
        data.setdefault("app", {})["timezone"] = timezone

    data_dir = os.getenv("EVENTBOOK_DATA_DIR")
    if data_dir:
        data.setdefault("storage", {})["dir"] = data_dir

    jwt_secret = os.getenv("EVENTBOOK_JWT_SECRET")
    if jwt_secret:
        data.setdefault("auth", {})["jwt_secret"] = jwt_secret

    return data


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load and validate settings (uncached)."""
    load_dotenv_if_present()
    config_path = config_path or os.getenv("EVENTBOOK_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    return load_settings()


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
