# SPDX-License-Identifier: MIT
"""Tests for configuration loading."""

from pathlib import Path

import pytest

from constants import DEFAULT_ENCRYPT_ENDPOINT
from io_utils.loader import load_app_config
from runtime.settings import load_settings


def _write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "app.yaml"
    path.write_text(body, encoding="utf-8")
    return path


def test_defaults_from_app_config() -> None:
    settings = load_settings()
    assert settings.log_level == "INFO"
    assert settings.encrypt_endpoint == DEFAULT_ENCRYPT_ENDPOINT
    assert settings.request_timeout == 10.0
    assert settings.default_version == "v4"
    assert settings.obfuscate is False
    assert settings.logfire_token is None


def test_config_file_values(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        "default_version: v1\nobfuscate: true\nrequest_timeout: 2.5\n",
    )
    settings = load_settings(path)
    assert settings.default_version == "v1"
    assert settings.obfuscate is True
    assert settings.request_timeout == 2.5


def test_environment_overrides_file(monkeypatch, tmp_path: Path) -> None:
    """Environment variables take precedence over YAML values."""
    path = _write_config(tmp_path, "default_version: v1\nrequest_timeout: 2.5\n")
    monkeypatch.setenv("FX_DEFAULT_VERSION", "v4")
    monkeypatch.setenv("FX_DECRYPT_ENDPOINT", "http://localhost:8787/decrypt")
    monkeypatch.setenv("FX_LOGFIRE_TOKEN", "secret-token")
    settings = load_settings(path)
    assert settings.default_version == "v4"
    assert settings.request_timeout == 2.5
    assert settings.decrypt_endpoint == "http://localhost:8787/decrypt"
    assert settings.logfire_token == "secret-token"
    assert "secret-token" not in repr(settings)


def test_invalid_file_value(tmp_path: Path) -> None:
    path = _write_config(tmp_path, "request_timeout: -1\n")
    with pytest.raises(RuntimeError):
        load_settings(path)


def test_unknown_file_key(tmp_path: Path) -> None:
    path = _write_config(tmp_path, "colour_scheme: dark\n")
    with pytest.raises(RuntimeError):
        load_settings(path)


def test_invalid_environment_value(monkeypatch) -> None:
    monkeypatch.setenv("FX_DEFAULT_VERSION", "v9")
    with pytest.raises(RuntimeError, match="Invalid configuration"):
        load_settings()


def test_missing_default_config_uses_builtins(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    load_app_config.cache_clear()
    settings = load_settings()
    assert settings.default_version == "v4"
