# SPDX-License-Identifier: MIT
"""Centralised application configuration management.

This module exposes :class:`Settings`, a ``pydantic-settings`` model that
combines values sourced from ``config/app.yaml`` and environment variables.
Environment variables take precedence over file-based values and the merged
configuration is validated before use.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from constants import DEFAULT_DECRYPT_ENDPOINT, DEFAULT_ENCRYPT_ENDPOINT
from io_utils.loader import load_app_config


class Settings(BaseSettings):
    """Application settings combining file-based and environment configuration."""

    log_level: str = Field("INFO", description="Logging verbosity level.")
    logfire_token: str | None = Field(
        None, description="Logfire authentication token, if available.", repr=False
    )
    encrypt_endpoint: str = Field(
        DEFAULT_ENCRYPT_ENDPOINT, description="URL of the encryption service."
    )
    decrypt_endpoint: str = Field(
        DEFAULT_DECRYPT_ENDPOINT, description="URL of the decryption service."
    )
    request_timeout: float = Field(
        10.0, gt=0, description="Per-request timeout in seconds."
    )
    default_version: Literal["v1", "v4"] = Field(
        "v4", description="Token format produced by ``encode`` by default."
    )
    obfuscate: bool = Field(
        False, description="Apply the XOR obfuscation layer to v1 payloads."
    )

    model_config = SettingsConfigDict(env_prefix="FX_", extra="ignore")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # File values arrive as init kwargs; the environment must override them.
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load and validate application settings.

    Configuration values are read from the application configuration file and
    then merged with environment variables using ``pydantic-settings``. When a
    value is provided in both sources the environment variable wins. A ``.env``
    file in the working directory is loaded automatically when present.

    Args:
        config_path: Optional path to a YAML configuration file. Defaults to
            ``config/app.yaml``; a missing default file yields built-in values.

    Returns:
        Settings: Fully validated application configuration.

    Raises:
        RuntimeError: If configuration values are missing or invalid.
    """
    if config_path:
        cfg_path = Path(config_path)
        config = load_app_config(cfg_path.parent, cfg_path.name)
    else:
        try:
            config = load_app_config()
        except FileNotFoundError:
            config = None
    env_file_path = Path(".env")
    env_file = env_file_path if env_file_path.exists() else None
    values = config.model_dump() if config is not None else {}
    try:
        return Settings(**values, _env_file=env_file)
    except ValidationError as exc:
        # Summarise validation issues so the caller receives clear feedback.
        details = "; ".join(
            f"{'.'.join(map(str, error['loc']))}: {error['msg']}"
            for error in exc.errors()
        )
        raise RuntimeError(f"Invalid configuration: {details}") from exc


__all__ = ["Settings", "load_settings"]
