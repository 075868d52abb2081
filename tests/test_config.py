from __future__ import annotations

import json
from dataclasses import fields

import pytest

from ssage.config import (
    DEFAULT_OLLAMA_URL,
    SageSettings,
    UserConfig,
    load_user_config,
    user_config_path,
)
from ssage.errors import ConfigurationError

_SETTINGS_ENV = (
    "SSAGE_PROVIDER",
    "SSAGE_MODEL",
    "SSAGE_OLLAMA_URL",
    "SSAGE_TIMEOUT_S",
    "SSAGE_MAX_ATTEMPTS",
    "SSAGE_CACHE_TTL_S",
    "SSAGE_CACHE_DIR",
    "SSAGE_LOG_LEVEL",
    "SSAGE_LOG_FILE",
)


@pytest.fixture
def clean_env(monkeypatch):
    for var in _SETTINGS_ENV:
        monkeypatch.delenv(var, raising=False)


def test_settings_defaults(clean_env):
    settings = SageSettings.from_env()

    assert settings.ollama_url == DEFAULT_OLLAMA_URL
    assert settings.timeout_s == 120.0
    assert settings.max_attempts == 3
    assert settings.cache_ttl_s == 86400.0
    assert settings.cache_dir.name == ".ssage_cache"
    assert settings.log_level == "INFO"
    assert settings.log_file.name == ".ssage.log"


def test_settings_from_env(clean_env, monkeypatch, tmp_path):
    monkeypatch.setenv("SSAGE_OLLAMA_URL", "http://box:11434/")
    monkeypatch.setenv("SSAGE_MAX_ATTEMPTS", "5")
    monkeypatch.setenv("SSAGE_CACHE_DIR", str(tmp_path / "c"))
    monkeypatch.setenv("SSAGE_LOG_LEVEL", "debug")

    settings = SageSettings.from_env()

    assert settings.ollama_url == "http://box:11434"
    assert settings.max_attempts == 5
    assert settings.cache_dir == tmp_path / "c"
    assert settings.log_level == "DEBUG"


def test_invalid_numeric_env_is_a_configuration_error(clean_env, monkeypatch):
    monkeypatch.setenv("SSAGE_MAX_ATTEMPTS", "three")
    with pytest.raises(ConfigurationError, match="SSAGE_"):
        SageSettings.from_env()


def test_missing_config_file_yields_defaults(tmp_path):
    cfg = load_user_config(tmp_path / "absent.json")
    assert cfg == UserConfig()


def test_config_round_trip(tmp_path):
    path = tmp_path / "cfg.json"
    cfg = UserConfig()
    cfg.set_value("model", "mistral")
    cfg.set_value("lang", "es")
    cfg.save(path)

    loaded = load_user_config(path)
    assert loaded.model == "mistral"
    assert loaded.lang == "es"
    assert loaded.provider == ""
    assert json.loads(path.read_text(encoding="utf-8"))["model"] == "mistral"


def test_unknown_key_is_rejected():
    with pytest.raises(ConfigurationError, match="Unknown config key"):
        UserConfig().set_value("colour", "blue")


def test_corrupt_config_file_raises(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text("{oops", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_user_config(path)


def test_config_path_honours_env(monkeypatch, tmp_path):
    monkeypatch.setenv("SSAGE_CONFIG", str(tmp_path / "mine.json"))
    assert user_config_path() == tmp_path / "mine.json"


def test_settings_do_not_shadow_resolution_chain_variables():
    names = {f.name for f in fields(SageSettings)}
    assert "provider" not in names
    assert "model" not in names
