from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Runtime settings (environment) and the persisted per-user config file.
"""

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ValidationError

from .errors import ConfigurationError

DEFAULT_PROVIDER = "ollama"
DEFAULT_MODEL = "llama3"
DEFAULT_OLLAMA_URL = "http://localhost:11434"

USER_CONFIG_KEYS = ("model", "lang", "provider")


def home_path(name: str) -> Path:
    """
    Resolve a dotfile under the user's home directory.

    Falls back to the system temp directory when no home can be determined.
    """
    try:
        return Path.home() / name
    except RuntimeError:
        return Path(tempfile.gettempdir()) / name


def env_path(var: str, default_name: str) -> Path:
    raw = os.getenv(var)
    return Path(raw).expanduser() if raw else home_path(default_name)


@dataclass(frozen=True, slots=True)
class SageSettings:
    """
    Process-wide settings from `SSAGE_*` variables.

    `SSAGE_PROVIDER` and `SSAGE_MODEL` are not held here: they sit in the
    middle of the provider and model priority chains and are read when those
    chains are resolved.
    """

    # Backend
    ollama_url: str
    timeout_s: float

    # Pipeline
    max_attempts: int
    cache_ttl_s: float
    cache_dir: Path

    # Logging
    log_level: str
    log_file: Path

    @staticmethod
    def from_env() -> "SageSettings":
        try:
            return SageSettings(
                ollama_url=os.getenv("SSAGE_OLLAMA_URL", DEFAULT_OLLAMA_URL).rstrip("/"),
                timeout_s=float(os.getenv("SSAGE_TIMEOUT_S", "120")),
                max_attempts=int(os.getenv("SSAGE_MAX_ATTEMPTS", "3")),
                cache_ttl_s=float(os.getenv("SSAGE_CACHE_TTL_S", str(24 * 60 * 60))),
                cache_dir=env_path("SSAGE_CACHE_DIR", ".ssage_cache"),
                log_level=os.getenv("SSAGE_LOG_LEVEL", "INFO").upper(),
                log_file=env_path("SSAGE_LOG_FILE", ".ssage.log"),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid SSAGE_* environment value: {e}") from e


class UserConfig(BaseModel):
    """Persisted user preferences, edited through `ssage config set`."""

    model: str = ""
    lang: str = ""
    provider: str = ""

    def set_value(self, key: str, value: str) -> None:
        if key not in USER_CONFIG_KEYS:
            raise ConfigurationError(
                f"Unknown config key: {key} (available: {', '.join(USER_CONFIG_KEYS)})"
            )
        setattr(self, key, value)

    def save(self, path: Path | None = None) -> Path:
        target = path or user_config_path()
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Could not write config file {target}: {e}") from e
        return target


def user_config_path() -> Path:
    return env_path("SSAGE_CONFIG", ".ssage_config.json")


def load_user_config(path: Path | None = None) -> UserConfig:
    """
    Load the persisted config.

    A missing file yields defaults; an unreadable or invalid one raises
    `ConfigurationError`.
    """
    source = path or user_config_path()
    try:
        raw = source.read_text(encoding="utf-8")
    except FileNotFoundError:
        return UserConfig()
    except OSError as e:
        raise ConfigurationError(f"Could not read config file {source}: {e}") from e

    try:
        return UserConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config file {source}: {e}") from e
