"""Telemetry and monitoring helpers for the token tooling.

Exports:
    init_logfire: Configure Pydantic Logfire instrumentation.
    record_encode: Count an issued token per version.
    record_decode: Count a decoded token per version.
    record_rejection: Count a rejected token per reason.
    print_summary: Output a summary of collected metrics.
    reset: Clear stored metrics.
"""

from .monitoring import init_logfire
from .telemetry import (
    print_summary,
    record_decode,
    record_encode,
    record_rejection,
    reset,
)

__all__ = [
    "init_logfire",
    "record_encode",
    "record_decode",
    "record_rejection",
    "print_summary",
    "reset",
]
