"""Configuration loading, validation, and access."""

from __future__ import annotations

import os
from enum import StrEnum
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from commodity_pulse.core.exceptions import ConfigError


class StorageBackend(StrEnum):
    """Supported persistent store backends."""

    JSON = "json"
    MEMORY = "memory"


class DataSourceConfig(BaseModel):
    """Remote quote service access configuration."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://query1.finance.yahoo.com"
    request_timeout: float = 15.0
    user_agent: str = "CommodityPulse/1.0"

    @field_validator("base_url")
    @classmethod
    def base_url_is_http(cls, v: str) -> str:
        if not v.startswith(("https://", "http://")):
            raise ValueError("base_url must be an http(s) URL")
        return v.rstrip("/")

    @field_validator("request_timeout")
    @classmethod
    def timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout must be > 0")
        return v

    @field_validator("user_agent")
    @classmethod
    def user_agent_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("user_agent must not be blank")
        return v


class RefreshConfig(BaseModel):
    """Periodic refresh configuration."""

    model_config = ConfigDict(frozen=True)

    interval_seconds: float = 60.0

    @field_validator("interval_seconds")
    @classmethod
    def interval_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("interval_seconds must be > 0")
        return v


class StorageConfig(BaseModel):
    """Persistent store configuration."""

    model_config = ConfigDict(frozen=True)

    backend: StorageBackend = StorageBackend.JSON
    path: str = "./data/commodity-pulse.json"

    @model_validator(mode="after")
    def path_required_for_json(self) -> StorageConfig:
        if self.backend == StorageBackend.JSON and not self.path:
            raise ValueError("path is required when backend is 'json'")
        return self


class PulseConfig(BaseModel):
    """Root configuration for commodity-pulse."""

    model_config = ConfigDict(frozen=True)

    data_source: DataSourceConfig = DataSourceConfig()
    refresh: RefreshConfig = RefreshConfig()
    storage: StorageConfig = StorageConfig()


def load_config(
    config_path: str | None = None,
    env_prefix: str = "COMMODITY_PULSE_",
) -> PulseConfig:
    """Load configuration from environment + YAML file + defaults.

    Resolution order (highest priority first):
    1. Environment variables (COMMODITY_PULSE_REFRESH__INTERVAL_SECONDS, etc.)
    2. YAML file at config_path
    3. Built-in defaults

    Nested keys use double-underscore in env vars:
        COMMODITY_PULSE_STORAGE__BACKEND=memory  ->  storage.backend = "memory"
    """
    try:
        yaml_path = _resolve_config_path(config_path)
        base: dict = {}
        if yaml_path is not None:
            base = _load_yaml(yaml_path)

        merged = _merge_env_vars(base, env_prefix)
        return PulseConfig.model_validate(merged)
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(str(e), context={"source": "load_config"}) from e


def _resolve_config_path(explicit: str | None) -> Path | None:
    """Determine config file path."""
    if explicit is not None:
        p = Path(explicit)
        if not p.exists():
            raise ConfigError(
                f"Config file not found: {explicit}",
                context={"field": "config_path", "value": explicit},
            )
        return p

    env_path = os.environ.get("COMMODITY_PULSE_CONFIG")
    if env_path:
        p = Path(env_path)
        if not p.exists():
            raise ConfigError(
                f"Config file from COMMODITY_PULSE_CONFIG not found: {env_path}",
                context={"field": "COMMODITY_PULSE_CONFIG", "value": env_path},
            )
        return p

    default = Path("commodity-pulse.yml")
    if default.exists():
        return default

    return None


def _load_yaml(path: Path) -> dict:
    """Load and parse YAML file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"YAML config must be a mapping, got {type(data).__name__}",
                context={"field": "config_file", "value": str(path)},
            )
        return data
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse YAML config: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e


def _merge_env_vars(base: dict, prefix: str) -> dict:
    """Overlay environment variables onto base config dict.

    Double-underscore separates nesting levels.
    Values are auto-cast: "true"/"false" -> bool, numeric strings -> int/float.
    """
    result = dict(base)

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        remainder = key[len(prefix) :]
        parts = [p.lower() for p in remainder.split("__")]

        # Skip the CONFIG env var itself
        if parts == ["config"]:
            continue

        cast_value = _auto_cast(value)

        target = result
        for part in parts[:-1]:
            if not isinstance(target.get(part), dict):
                target[part] = {}
            target = target[part]
        target[parts[-1]] = cast_value

    return result


def _auto_cast(value: str) -> str | int | float | bool:
    """Auto-cast string values from environment variables."""
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value
