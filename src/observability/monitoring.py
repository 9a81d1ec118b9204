# SPDX-License-Identifier: MIT
"""Pydantic Logfire setup for the token tooling.

Telemetry stays on the local console unless a Logfire token is supplied.
Key material handed to the cipher service is scrubbed from every span.
"""

from __future__ import annotations

import os
from typing import Iterable, Literal

import logfire

LogLevel = Literal["fatal", "error", "warn", "notice", "info", "debug", "trace"]

# Attribute names that may carry cipher key material.
SCRUB_PATTERNS = ("passphrase", "cipher_key", "key_provider")

DEFAULT_INSTRUMENTATION = ("pydantic", "httpx")


def _mask_token(value: str | None) -> str | None:
    """Return a masked representation of ``value`` for safe logging."""

    if not value:
        return None
    return f"{value[:4]}..."


def _instrument(targets: Iterable[str]) -> list[str]:
    """Enable each ``logfire.instrument_<target>`` hook that exists."""

    applied: list[str] = []
    for target in targets:
        hook = getattr(logfire, f"instrument_{target}", None)
        if hook is None:
            logfire.debug("Instrumentation unavailable", target=target)
            continue
        hook()
        applied.append(target)
    return applied


def init_logfire(
    token: str | None = None,
    min_log_level: LogLevel = "warn",
    instrument: Iterable[str] = DEFAULT_INSTRUMENTATION,
) -> list[str]:
    """Configure Logfire and return the instrumentation that was enabled.

    Args:
        token: Optional Logfire API token. If omitted, ``FX_LOGFIRE_TOKEN`` from
            the environment is used. Missing tokens keep telemetry local.
        min_log_level: Minimum level for console and telemetry output.
        instrument: Libraries to instrument; ``httpx`` covers calls to the
            encryption service.
    """

    key = token or os.getenv("FX_LOGFIRE_TOKEN")
    logfire.debug("Configuring logfire", token=_mask_token(key))
    logfire.configure(
        token=key,
        send_to_logfire="if-token-present",
        service_name="artwork-tokens",
        console=logfire.ConsoleOptions(
            min_log_level=min_log_level,
            show_project_link=False,
            verbose=True,
        ),
        scrubbing=logfire.ScrubbingOptions(extra_patterns=list(SCRUB_PATTERNS)),
        min_level=min_log_level,
    )
    return _instrument(instrument)


__all__ = ["LogLevel", "init_logfire"]
