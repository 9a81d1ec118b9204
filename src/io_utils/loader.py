# SPDX-License-Identifier: MIT
"""Utilities for loading configuration, parameter sets and provenance files.

The helpers in this module centralise file-system access. Parse failures are
reported through an :class:`utils.ErrorHandler` and re-raised as concise
``RuntimeError`` exceptions carrying the file context.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, TypeVar

import logfire
import yaml
from pydantic import TypeAdapter, ValidationError

from models import AppConfig, Provenance
from utils import ErrorHandler, LoggingErrorHandler

T = TypeVar("T")

_YAML_SUFFIXES = {".yaml", ".yml"}


def _read_file(path: Path, error_handler: ErrorHandler | None = None) -> str:
    """Return the contents of ``path``.

    Raises:
        FileNotFoundError: If the file does not exist.
        RuntimeError: If the file cannot be read.
    """
    handler = error_handler if error_handler is not None else LoggingErrorHandler()
    with logfire.span("fs.read_text", attributes={"path": str(path)}):
        try:
            with path.open("r", encoding="utf-8") as file:
                text = file.read().strip()
                logfire.debug("Read text file", path=str(path), bytes=len(text))
                return text
        except FileNotFoundError as exc:
            handler.handle(f"File not found: {path}", exc)
            raise
        except OSError as exc:
            handler.handle(f"Error reading file {path}", exc)
            raise RuntimeError(
                f"An error occurred while reading the file: {exc}"
            ) from exc


def _read_json_file(
    path: Path,
    schema: type[T],
    error_handler: ErrorHandler | None = None,
) -> T:
    """Return JSON data loaded from ``path`` validated against ``schema``.

    ``schema`` may be any type understood by :class:`pydantic.TypeAdapter`, such
    as a Pydantic model or standard container type.
    """
    handler = error_handler if error_handler is not None else LoggingErrorHandler()
    with logfire.span("fs.read_json", attributes={"path": str(path)}):
        try:
            adapter = TypeAdapter(schema)
            return adapter.validate_json(_read_file(path, handler))
        except FileNotFoundError:
            raise
        except (RuntimeError, ValidationError, ValueError) as exc:
            handler.handle(f"Error reading JSON file {path}", exc)
            raise RuntimeError(
                f"An error occurred while reading the JSON file: {exc}"
            ) from exc


def _read_yaml_file(
    path: Path,
    schema: type[T],
    error_handler: ErrorHandler | None = None,
) -> T:
    """Return YAML data loaded from ``path`` validated against ``schema``."""
    handler = error_handler if error_handler is not None else LoggingErrorHandler()
    with logfire.span("fs.read_yaml", attributes={"path": str(path)}):
        try:
            adapter = TypeAdapter(schema)
            return adapter.validate_python(yaml.safe_load(_read_file(path, handler)))
        except FileNotFoundError:
            raise
        except (RuntimeError, ValidationError, yaml.YAMLError, ValueError) as exc:
            handler.handle(f"Error reading YAML file {path}", exc)
            raise RuntimeError(
                f"An error occurred while reading the YAML file: {exc}"
            ) from exc


def _read_structured(
    path: Path, schema: type[T], error_handler: ErrorHandler | None = None
) -> T:
    if path.suffix.lower() in _YAML_SUFFIXES:
        return _read_yaml_file(path, schema, error_handler)
    return _read_json_file(path, schema, error_handler)


@lru_cache(maxsize=None)
def load_app_config(
    base_dir: Path | str = Path("config"),
    filename: Path | str = Path("app.yaml"),
) -> AppConfig:
    """Return application configuration from ``base_dir``.

    Results are cached for the lifetime of the process.
    """
    path = Path(base_dir) / Path(filename)
    return _read_yaml_file(path, AppConfig)


def load_params_file(
    path: Path | str, error_handler: ErrorHandler | None = None
) -> dict[str, Any]:
    """Return a parameter set stored as a JSON or YAML mapping."""
    return _read_structured(Path(path), dict[str, Any], error_handler)


def load_provenance_file(
    path: Path | str, error_handler: ErrorHandler | None = None
) -> Provenance:
    """Return provenance metadata stored as a JSON or YAML mapping."""
    return _read_structured(Path(path), Provenance, error_handler)


__all__ = ["load_app_config", "load_params_file", "load_provenance_file"]
